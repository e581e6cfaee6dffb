"""Dispatch a parameter record to exactly one diagram generator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping

from .flat_pattern import generate_flat_pattern
from .focal import generate_focal_geometry
from .params import BellowsParameters, Mode
from .primitives import Diagram
from .standard import generate_standard

__all__ = ["GENERATORS", "GenerationResult", "generate"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Drawing list, view box and human-readable dimension summary."""

    mode: Mode
    diagram: Diagram
    summary: str

    @property
    def view_box(self):
        return self.diagram.view_box


def _focal(params: BellowsParameters) -> tuple[Diagram, str]:
    return generate_focal_geometry(params.focal)


GENERATORS: Mapping[Mode, Callable[[BellowsParameters], tuple[Diagram, str]]] = {
    Mode.STANDARD: generate_standard,
    Mode.FOCAL_GEOMETRY: _focal,
    Mode.FLAT_PATTERN: generate_flat_pattern,
}


def generate(params: BellowsParameters) -> GenerationResult:
    """Render *params* with the generator selected by ``params.mode``."""

    mode = Mode.parse(params.mode)
    diagram, summary = GENERATORS[mode](params)
    logger.debug("Generated %s diagram with %d primitives", mode.value, len(diagram.primitives))
    for message in diagram.diagnostics:
        logger.debug("%s: %s", mode.value, message)
    return GenerationResult(mode=mode, diagram=diagram, summary=summary)
