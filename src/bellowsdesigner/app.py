"""Command helpers for generating bellows patterns from the terminal."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from bellows.assembler import generate
from bellows.params import DEFAULT_PARAMETERS, BellowsParameters, Mode, PageSize, clamp_parameters
from schemas.records import load_parameters, save_snapshot

from .logging_config import setup_logging
from .pipelines.export_pattern import DEFAULT_FORMATS, SUPPORTED_FORMATS, describe_outputs, export_pattern

__all__ = ["build_cli", "build_parser", "resolve_parameters"]

logger = logging.getLogger(__name__)

# Options named after the BellowsParameters and FocalGeometryInput fields they override.
_PARAMETER_FIELDS = (
    "front_width",
    "front_height",
    "rear_width",
    "rear_height",
    "folds",
    "fold_depth",
    "seam_allowance",
)
_FOCAL_FIELDS = (
    "camera_focal_distance",
    "front_std_size",
    "rear_std_size",
    "fold_distance",
    "flex_factor",
)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--params",
        type=Path,
        help="JSON or YAML parameter file (snapshot, bare parameters or BellowsDesigner record)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in Mode],
        help="Diagram generator (default: standard, or the mode stored in --params)",
    )
    parser.add_argument("--front-width", type=float, help="Front inner width in mm")
    parser.add_argument("--front-height", type=float, help="Front inner height in mm")
    parser.add_argument("--rear-width", type=float, help="Rear inner width in mm")
    parser.add_argument("--rear-height", type=float, help="Rear inner height in mm")
    parser.add_argument("--folds", type=float, help="Number of folds (rounded to an integer)")
    parser.add_argument("--fold-depth", type=float, help="Fold depth in mm")
    parser.add_argument("--seam-allowance", type=float, help="Seam allowance for the fifth face in mm")
    parser.add_argument(
        "--five-faces",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Add a seam flap to the first face of the flat pattern",
    )
    parser.add_argument(
        "--annotations",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Draw dimension arrows, labels and the page outline",
    )
    parser.add_argument(
        "--page-size",
        choices=[page.value for page in PageSize],
        help="Sheet size used for the page outline and pagination",
    )
    parser.add_argument("--camera-focal-distance", type=float, help="Focal distance of the camera in mm")
    parser.add_argument("--front-std-size", type=float, help="Front standard size in mm")
    parser.add_argument("--rear-std-size", type=float, help="Rear standard size in mm")
    parser.add_argument("--fold-distance", type=float, help="Fold distance for the focal model in mm")
    parser.add_argument("--flex-factor", type=float, help="Flex panel factor for the focal model")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity (default: INFO)",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")


def resolve_parameters(args: argparse.Namespace) -> BellowsParameters:
    """Layer defaults, the optional parameter file and CLI overrides, then clamp."""

    params = load_parameters(args.params) if args.params else DEFAULT_PARAMETERS

    updates: dict[str, object] = {}
    for field_name in _PARAMETER_FIELDS:
        value = getattr(args, field_name)
        if value is not None:
            updates[field_name] = value
    if args.mode is not None:
        updates["mode"] = Mode.parse(args.mode)
    if args.page_size is not None:
        updates["page_size"] = PageSize.parse(args.page_size)
    if args.five_faces is not None:
        updates["use_five_faces"] = args.five_faces
    if args.annotations is not None:
        updates["show_annotations"] = args.annotations

    focal_updates = {
        field_name: getattr(args, field_name)
        for field_name in _FOCAL_FIELDS
        if getattr(args, field_name) is not None
    }
    if focal_updates:
        updates["focal"] = replace(params.focal, **focal_updates)

    return clamp_parameters(params.with_updates(**updates))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bellows flat-pattern designer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Render the pattern and write SVG, PNG, PDF and JSON outputs",
    )
    _add_common_arguments(generate_parser)
    generate_parser.add_argument(
        "--output",
        type=Path,
        default=Path("exports/bellows"),
        help="Directory where exported files will be stored.",
    )
    generate_parser.add_argument(
        "--formats",
        nargs="+",
        default=list(DEFAULT_FORMATS),
        choices=SUPPORTED_FORMATS,
        help="One or more formats to export (default: svg png pdf json).",
    )
    generate_parser.add_argument(
        "--split-pages",
        action="store_true",
        help="Write the PNG as vertical page-height strips",
    )
    generate_parser.add_argument(
        "--pages",
        type=int,
        default=0,
        help="Number of PNG strips (default: as many as the page height requires)",
    )
    generate_parser.add_argument("--split-start", type=float, default=0.0, help="Top of the split range in mm")
    generate_parser.add_argument(
        "--split-end",
        type=float,
        default=0.0,
        help="Bottom of the split range in mm (default: full height)",
    )
    generate_parser.add_argument(
        "--fit-page",
        action="store_true",
        help="Scale the PDF onto one page instead of tiling it one-to-one",
    )

    import_parser = subparsers.add_parser(
        "import",
        help="Convert a parameter file of any supported shape into a current snapshot",
    )
    import_parser.add_argument("path", type=Path, help="Parameter file to import")
    _add_common_arguments(import_parser)
    import_parser.add_argument(
        "--output",
        type=Path,
        default=Path("bellows_config.json"),
        help="Where to write the normalised snapshot",
    )

    summary_parser = subparsers.add_parser("summary", help="Print the dimension summary only")
    _add_common_arguments(summary_parser)

    return parser


def build_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, str(args.log_file) if args.log_file else None)

    if args.command == "import":
        args.params = args.path
        params = resolve_parameters(args)
        result = generate(params)
        target = save_snapshot(params, result.view_box, args.output)
        logger.info("Imported %s as %s parameters", args.path, result.mode.value)
        print(result.summary)
        print(f"Wrote JSON to {target}")
        return 0

    params = resolve_parameters(args)

    if args.command == "summary":
        print(generate(params).summary)
        return 0

    if args.command == "generate":
        result, created = export_pattern(
            params,
            args.output,
            args.formats,
            split_pages=args.split_pages,
            pages=args.pages,
            split_start=args.split_start,
            split_end=args.split_end,
            fit_page=args.fit_page,
        )
        print(result.summary)
        for line in describe_outputs(created):
            print(line)
        return 0

    parser.error(f"Unknown command {args.command!r}")
    return 2
