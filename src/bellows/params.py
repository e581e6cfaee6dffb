"""Parameter records consumed by the bellows generators."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum

__all__ = [
    "DEFAULT_FOCAL_INPUT",
    "DEFAULT_PARAMETERS",
    "PARAMETER_RANGES",
    "BellowsParameters",
    "FocalGeometryInput",
    "Mode",
    "PageSize",
    "clamp_parameters",
    "round_half_up",
]


class PageSize(str, Enum):
    """Physical sheet sizes in millimetres."""

    A4 = "A4"
    B4 = "B4"
    A3 = "A3"

    @property
    def width(self) -> float:
        return _PAGE_DIMENSIONS[self][0]

    @property
    def height(self) -> float:
        return _PAGE_DIMENSIONS[self][1]

    @property
    def label(self) -> str:
        return f"{self.value} ({self.width:g}x{self.height:g}mm)"

    @classmethod
    def parse(cls, value: "PageSize | str") -> "PageSize":
        if isinstance(value, PageSize):
            return value
        normalized = str(value).strip().upper()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unknown page size '{value}'. Expected one of A4, B4, A3.") from exc


_PAGE_DIMENSIONS: dict[PageSize, tuple[float, float]] = {
    PageSize.A4: (210.0, 297.0),
    PageSize.B4: (257.0, 364.0),
    PageSize.A3: (297.0, 420.0),
}


class Mode(str, Enum):
    """Which generator renders the diagram."""

    STANDARD = "standard"
    FOCAL_GEOMETRY = "focal-geometry"
    FLAT_PATTERN = "flat-pattern"

    @classmethod
    def parse(cls, value: "Mode | str") -> "Mode":
        if isinstance(value, Mode):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        try:
            return cls(normalized)
        except ValueError as exc:
            choices = ", ".join(mode.value for mode in cls)
            raise ValueError(f"Unknown mode '{value}'. Expected one of {choices}.") from exc


@dataclass(frozen=True, slots=True)
class FocalGeometryInput:
    """Camera-style inputs for the focal-geometry generator (millimetres)."""

    camera_focal_distance: float = 120.0
    front_std_size: float = 100.0
    rear_std_size: float = 120.0
    fold_distance: float = 18.5
    flex_factor: float = 2.0


@dataclass(frozen=True, slots=True)
class BellowsParameters:
    """Immutable input of a single diagram generation call."""

    front_width: float = 100.0
    front_height: float = 100.0
    rear_width: float = 120.0
    rear_height: float = 120.0
    folds: int = 8
    fold_depth: float = 15.0
    show_annotations: bool = True
    page_size: PageSize = PageSize.A4
    mode: Mode = Mode.STANDARD
    use_five_faces: bool = False
    seam_allowance: float = 10.0
    focal: FocalGeometryInput = field(default_factory=FocalGeometryInput)

    def with_updates(self, **changes: object) -> "BellowsParameters":
        return replace(self, **changes)


DEFAULT_FOCAL_INPUT = FocalGeometryInput()
DEFAULT_PARAMETERS = BellowsParameters()

# Control ranges of the interactive designer; callers clamp before generating.
PARAMETER_RANGES: dict[str, tuple[float, float]] = {
    "front_width": (10.0, 300.0),
    "front_height": (10.0, 300.0),
    "rear_width": (10.0, 400.0),
    "rear_height": (10.0, 400.0),
    "folds": (2, 40),
    "fold_depth": (5.0, 50.0),
    "seam_allowance": (0.0, 30.0),
    "camera_focal_distance": (50.0, 500.0),
    "front_std_size": (50.0, 300.0),
    "rear_std_size": (50.0, 400.0),
    "fold_distance": (5.0, 50.0),
    "flex_factor": (0.5, 5.0),
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (not banker's rounding)."""

    return int(math.floor(value + 0.5))


def _clamp(name: str, value: float) -> float:
    low, high = PARAMETER_RANGES[name]
    if math.isnan(value):
        return float(low)
    return float(min(max(value, low), high))


def clamp_parameters(params: BellowsParameters) -> BellowsParameters:
    """Pull every numeric field into the designer's supported range."""

    focal = params.focal
    clamped_focal = FocalGeometryInput(
        camera_focal_distance=_clamp("camera_focal_distance", focal.camera_focal_distance),
        front_std_size=_clamp("front_std_size", focal.front_std_size),
        rear_std_size=_clamp("rear_std_size", focal.rear_std_size),
        fold_distance=_clamp("fold_distance", focal.fold_distance),
        flex_factor=_clamp("flex_factor", focal.flex_factor),
    )
    return replace(
        params,
        front_width=_clamp("front_width", params.front_width),
        front_height=_clamp("front_height", params.front_height),
        rear_width=_clamp("rear_width", params.rear_width),
        rear_height=_clamp("rear_height", params.rear_height),
        folds=round_half_up(_clamp("folds", params.folds)),
        fold_depth=_clamp("fold_depth", params.fold_depth),
        seam_allowance=_clamp("seam_allowance", params.seam_allowance),
        focal=clamped_focal,
    )
