"""Split a diagram's view box into printable page tiles."""

from __future__ import annotations

import math

from bellows.params import PageSize
from bellows.primitives import ViewBox

__all__ = ["DEFAULT_MARGIN", "MIN_STRIP_HEIGHT", "grid_tiles", "printable_area", "vertical_strips"]

DEFAULT_MARGIN = 10.0
MIN_STRIP_HEIGHT = 1.0


def printable_area(page: PageSize, margin: float = DEFAULT_MARGIN) -> tuple[float, float]:
    """Return the width and height left on *page* after a margin on every side."""

    return page.width - 2 * margin, page.height - 2 * margin


def grid_tiles(view_box: ViewBox, page: PageSize, margin: float = DEFAULT_MARGIN) -> list[ViewBox]:
    """Cover *view_box* with printable-size tiles in row-major order.

    Tiles abut without overlap. Tiles on the right and bottom edges keep the
    full printable size so every page prints at the same scale.
    """

    tile_w, tile_h = printable_area(page, margin)
    if tile_w <= 0 or tile_h <= 0:
        raise ValueError(f"Margin {margin}mm leaves no printable area on {page.value}")
    columns = max(1, math.ceil(view_box.width / tile_w))
    rows = max(1, math.ceil(view_box.height / tile_h))
    return [
        ViewBox(view_box.x + column * tile_w, view_box.y + row * tile_h, tile_w, tile_h)
        for row in range(rows)
        for column in range(columns)
    ]


def vertical_strips(
    view_box: ViewBox,
    page: PageSize,
    margin: float = DEFAULT_MARGIN,
    *,
    pages: int = 0,
    start: float = 0.0,
    end: float = 0.0,
) -> list[ViewBox]:
    """Slice the vertical range ``[start, end]`` of *view_box* into equal strips.

    Both bounds are offsets from the top of the view box and ``end`` of zero
    means its bottom. An empty or inverted range becomes a 1 mm strip. The page
    count is chosen so that each strip fits the printable height; a positive
    ``pages`` can lower that count but never raise it.
    """

    range_start = max(start, 0.0)
    range_end = end if end > 0 else view_box.height
    range_end = min(view_box.height, max(range_end, range_start))
    range_height = max(MIN_STRIP_HEIGHT, range_end - range_start)

    _, printable_h = printable_area(page, margin)
    auto_pages = max(1, math.ceil(range_height / printable_h))
    count = max(1, min(pages, auto_pages)) if pages > 0 else auto_pages
    strip_h = range_height / count
    top = view_box.y + range_start
    return [
        ViewBox(view_box.x, top + index * strip_h, view_box.width, strip_h)
        for index in range(count)
    ]
