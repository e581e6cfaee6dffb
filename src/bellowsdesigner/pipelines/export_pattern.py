"""Generate a bellows diagram once and write it in every requested format."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping

from bellows.assembler import GenerationResult, generate
from bellows.params import BellowsParameters, Mode, PageSize
from exporters.render import write_pdf, write_png, write_png_strips
from exporters.svg import write_svg
from schemas.records import save_snapshot

__all__ = ["DEFAULT_FORMATS", "SUPPORTED_FORMATS", "ExportResult", "describe_outputs", "export_pattern"]

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("svg", "png", "pdf", "json")
DEFAULT_FORMATS = ("svg", "png", "pdf", "json")

ExportResult = dict[str, "Path | list[Path]"]


def _normalise_formats(formats: Iterable[str]) -> list[str]:
    requested: list[str] = []
    for fmt in formats:
        key = fmt.lower().lstrip(".")
        if key not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported export format '{fmt}'. Expected one of {', '.join(SUPPORTED_FORMATS)}.")
        if key not in requested:
            requested.append(key)
    return requested


def export_pattern(
    params: BellowsParameters,
    output_dir: Path | str,
    formats: Iterable[str] = DEFAULT_FORMATS,
    *,
    stem: str = "bellows",
    split_pages: bool = False,
    pages: int = 0,
    split_start: float = 0.0,
    split_end: float = 0.0,
    fit_page: bool = False,
    export_date: datetime | None = None,
) -> tuple[GenerationResult, ExportResult]:
    """Render *params* and write ``<stem>.svg``, ``.png``, ``.pdf`` and ``_config.json``.

    ``split_pages`` writes the PNG as vertical page-height strips instead of
    one image. The PDF is tiled one-to-one over pages for flat patterns unless
    ``fit_page`` is set; other modes are always fitted to a single page.
    """

    requested = _normalise_formats(formats)
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)

    result = generate(params)
    page = PageSize.parse(params.page_size)
    logger.info("Generated %s pattern: %s", result.mode.value, result.summary)

    created: ExportResult = {}
    if "svg" in requested:
        created["svg"] = write_svg(
            result.diagram,
            destination / f"{stem}.svg",
            metadata={"mode": result.mode.value, "summary": result.summary},
        )
    if "png" in requested:
        if split_pages:
            created["png"] = write_png_strips(
                result.diagram,
                destination,
                page,
                stem=stem,
                pages=pages,
                start=split_start,
                end=split_end,
            )
        else:
            created["png"] = write_png(result.diagram, destination / f"{stem}.png")
    if "pdf" in requested:
        one_to_one = result.mode is Mode.FLAT_PATTERN and not fit_page
        created["pdf"] = write_pdf(result.diagram, destination / f"{stem}.pdf", page, one_to_one=one_to_one)
    if "json" in requested:
        created["json"] = save_snapshot(
            params,
            result.view_box,
            destination / f"{stem}_config.json",
            export_date=export_date,
        )

    for fmt, path in created.items():
        logger.debug("Wrote %s output: %s", fmt, path)
    return result, created


def describe_outputs(created: Mapping[str, "Path | list[Path]"]) -> list[str]:
    lines: list[str] = []
    for fmt, value in created.items():
        paths = value if isinstance(value, list) else [value]
        for path in paths:
            lines.append(f"Wrote {fmt.upper()} to {path}")
    return lines
