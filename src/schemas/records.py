"""Convert bellows parameters to and from the designer's JSON records.

Three shapes are recognised on import:

``snapshot``
    ``{"params": {...}, "viewBox": {...}, "exportDate": "..."}`` as written by
    :func:`save_snapshot`.
``flat``
    The camelCase parameter object on its own (``{"frontWidth": ..., ...}``).
``designer``
    The flat camera record of the older BellowsDesigner tool
    (``{"cameraFocalDist": ..., "frontStdSize": ..., ...}``).
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bellows.params import (
    DEFAULT_FOCAL_INPUT,
    DEFAULT_PARAMETERS,
    BellowsParameters,
    FocalGeometryInput,
    Mode,
    PageSize,
    round_half_up,
)
from bellows.primitives import ViewBox

from .validators import load_payload, validate_designer_payload, validate_parameter_payload

__all__ = [
    "DESIGNER_DEFAULTS",
    "UnrecognizedPayloadError",
    "detect_shape",
    "from_designer_record",
    "from_payload",
    "from_record",
    "load_parameters",
    "save_snapshot",
    "snapshot",
    "to_record",
]

logger = logging.getLogger(__name__)

# Defaults applied to BellowsDesigner records; falsy values count as missing.
DESIGNER_DEFAULTS: dict[str, float] = {
    "frontStdSize": 100.0,
    "rearStdSize": 120.0,
    "numFolds": 8,
    "foldDepth": 15.0,
    "cameraFocalDist": 120.0,
    "foldDist": 18.5,
    "flexFactor": 2.0,
}


class UnrecognizedPayloadError(ValueError):
    """Raised when a JSON payload matches none of the supported record shapes."""


def _coerce_folds(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return round_half_up(float(value))


def _focal_record(focal: FocalGeometryInput) -> dict[str, float]:
    return {
        "cameraFocalDist": focal.camera_focal_distance,
        "frontStdSize": focal.front_std_size,
        "rearStdSize": focal.rear_std_size,
        "foldDist": focal.fold_distance,
        "flexFactor": focal.flex_factor,
    }


def to_record(params: BellowsParameters) -> dict[str, Any]:
    """Return the camelCase parameter object for *params*."""

    mode = Mode.parse(params.mode)
    return {
        "frontWidth": params.front_width,
        "frontHeight": params.front_height,
        "rearWidth": params.rear_width,
        "rearHeight": params.rear_height,
        "folds": params.folds,
        "foldDepth": params.fold_depth,
        "showAnnotations": params.show_annotations,
        "pageSize": PageSize.parse(params.page_size).value,
        "mode": mode.value,
        "useBdMode": mode is Mode.FOCAL_GEOMETRY,
        "useGeneratorMode": mode is Mode.FLAT_PATTERN,
        "useFiveFaces": params.use_five_faces,
        "seamAllowance": params.seam_allowance,
        "bdData": _focal_record(params.focal),
    }


def _mode_from_record(record: Mapping[str, Any]) -> Mode:
    if record.get("mode"):
        return Mode.parse(record["mode"])
    if record.get("useGeneratorMode"):
        return Mode.FLAT_PATTERN
    if record.get("useBdMode"):
        return Mode.FOCAL_GEOMETRY
    return Mode.STANDARD


def _focal_from_record(record: Mapping[str, Any] | None) -> FocalGeometryInput:
    if not record:
        return DEFAULT_FOCAL_INPUT
    base = DEFAULT_FOCAL_INPUT
    return FocalGeometryInput(
        camera_focal_distance=float(record.get("cameraFocalDist", base.camera_focal_distance)),
        front_std_size=float(record.get("frontStdSize", base.front_std_size)),
        rear_std_size=float(record.get("rearStdSize", base.rear_std_size)),
        fold_distance=float(record.get("foldDist", base.fold_distance)),
        flex_factor=float(record.get("flexFactor", base.flex_factor)),
    )


def from_record(record: Mapping[str, Any]) -> BellowsParameters:
    """Build parameters from a camelCase parameter object.

    Optional keys missing from *record* take the designer defaults.
    """

    validate_parameter_payload(dict(record))
    base = DEFAULT_PARAMETERS
    return BellowsParameters(
        front_width=float(record["frontWidth"]),
        front_height=float(record["frontHeight"]),
        rear_width=float(record["rearWidth"]),
        rear_height=float(record["rearHeight"]),
        folds=_coerce_folds(record["folds"]),
        fold_depth=float(record["foldDepth"]),
        show_annotations=bool(record.get("showAnnotations", base.show_annotations)),
        page_size=PageSize.parse(record.get("pageSize", base.page_size)),
        mode=_mode_from_record(record),
        use_five_faces=bool(record.get("useFiveFaces", base.use_five_faces)),
        seam_allowance=float(record.get("seamAllowance", base.seam_allowance)),
        focal=_focal_from_record(record.get("bdData")),
    )


def _designer_value(record: Mapping[str, Any], key: str, default_key: str | None = None) -> Any:
    return record.get(key) or DESIGNER_DEFAULTS[default_key or key]


def from_designer_record(record: Mapping[str, Any]) -> BellowsParameters:
    """Translate a BellowsDesigner camera record into focal-geometry parameters."""

    validate_designer_payload(dict(record))
    front = float(_designer_value(record, "frontStdSize"))
    rear = float(_designer_value(record, "rearStdSize"))
    focal = FocalGeometryInput(
        camera_focal_distance=float(_designer_value(record, "cameraFocalDist")),
        front_std_size=front,
        rear_std_size=rear,
        fold_distance=float(_designer_value(record, "foldDist")),
        flex_factor=float(_designer_value(record, "flexFactor")),
    )
    return BellowsParameters(
        front_width=front,
        front_height=front,
        rear_width=rear,
        rear_height=rear,
        folds=_coerce_folds(_designer_value(record, "numFolds")),
        fold_depth=float(_designer_value(record, "foldDist", "foldDepth")),
        show_annotations=True,
        page_size=PageSize.A4,
        mode=Mode.FOCAL_GEOMETRY,
        use_five_faces=DEFAULT_PARAMETERS.use_five_faces,
        seam_allowance=DEFAULT_PARAMETERS.seam_allowance,
        focal=focal,
    )


def detect_shape(payload: Any) -> str:
    """Return ``"snapshot"``, ``"flat"`` or ``"designer"`` for *payload*."""

    if not isinstance(payload, Mapping):
        raise UnrecognizedPayloadError(f"Expected a JSON object, received {type(payload).__name__}")
    if "params" in payload:
        return "snapshot"
    if "frontWidth" in payload:
        return "flat"
    if "cameraFocalDist" in payload:
        return "designer"
    raise UnrecognizedPayloadError(
        "Unrecognised parameter file: expected 'params', 'frontWidth' or 'cameraFocalDist' at the top level"
    )


def from_payload(payload: Any) -> BellowsParameters:
    """Parse any of the supported record shapes into :class:`BellowsParameters`."""

    shape = detect_shape(payload)
    logger.debug("Importing %s parameter record", shape)
    if shape == "snapshot":
        params = payload["params"]
        if not isinstance(params, Mapping):
            raise UnrecognizedPayloadError("Snapshot 'params' entry must be a JSON object")
        return from_record(params)
    if shape == "flat":
        return from_record(payload)
    return from_designer_record(payload)


def snapshot(
    params: BellowsParameters,
    view_box: ViewBox,
    *,
    export_date: datetime | None = None,
) -> dict[str, Any]:
    """Return the ``bellows_config.json`` document for *params*."""

    stamp = export_date or datetime.now(timezone.utc)
    return {
        "params": to_record(params),
        "viewBox": {
            "x": view_box.x,
            "y": view_box.y,
            "width": view_box.width,
            "height": view_box.height,
        },
        "exportDate": stamp.isoformat(),
    }


def save_snapshot(
    params: BellowsParameters,
    view_box: ViewBox,
    path: Path | str,
    *,
    export_date: datetime | None = None,
) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    document = snapshot(params, view_box, export_date=export_date)
    target.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return target


def load_parameters(path: Path | str) -> BellowsParameters:
    """Load a JSON or YAML parameter file in any supported shape."""

    return from_payload(load_payload(Path(path)))
