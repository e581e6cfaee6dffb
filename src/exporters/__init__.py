"""Exporter utilities for bellows diagrams."""

from .render import draw_diagram, write_pdf, write_png, write_png_strips
from .svg import render_svg, write_svg
from .tiling import grid_tiles, printable_area, vertical_strips

__all__ = [
    "draw_diagram",
    "grid_tiles",
    "printable_area",
    "render_svg",
    "vertical_strips",
    "write_pdf",
    "write_png",
    "write_png_strips",
    "write_svg",
]
