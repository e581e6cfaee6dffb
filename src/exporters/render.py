"""Rasterise bellows diagrams to PNG and paginate them into PDF with matplotlib."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import matplotlib
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Polygon

from bellows.params import PageSize
from bellows.primitives import Diagram, Line, Polyline, Text, ViewBox, iter_flattened

from .tiling import DEFAULT_MARGIN, grid_tiles, printable_area, vertical_strips

__all__ = [
    "MIN_EXTENT",
    "MM_PER_INCH",
    "PNG_OVERSAMPLING",
    "draw_diagram",
    "write_pdf",
    "write_png",
    "write_png_strips",
]

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4
PT_PER_MM = 72.0 / MM_PER_INCH
PNG_OVERSAMPLING = 4
MIN_EXTENT = 1.0

_ANCHORS = {"start": "left", "middle": "center", "end": "right"}
_RC_OVERRIDES = {"lines.scale_dashes": False, "pdf.fonttype": 42}


def _dash_points(dash: Sequence[float] | None, scale: float) -> tuple[float, ...] | None:
    if not dash:
        return None
    return tuple(value * PT_PER_MM * scale for value in dash)


def draw_diagram(ax: Axes, diagram: Diagram, *, scale: float = 1.0) -> int:
    """Add every leaf primitive of *diagram* to *ax* in sheet coordinates.

    ``scale`` is the ratio between printed and sheet millimetres and is used to
    size strokes, dashes and fonts. Returns the number of artists added.
    """

    count = 0
    for leaf, matrix, inherited_stroke, inherited_dash in iter_flattened(diagram.primitives):
        if isinstance(leaf, Line):
            (x1, y1) = matrix.apply(leaf.start)
            (x2, y2) = matrix.apply(leaf.end)
            dashes = _dash_points(leaf.dash or inherited_dash, scale)
            kwargs = {"dashes": dashes} if dashes else {}
            ax.add_line(
                Line2D(
                    [x1, x2],
                    [y1, y2],
                    color=leaf.stroke or inherited_stroke,
                    linewidth=leaf.stroke_width * PT_PER_MM * scale,
                    solid_capstyle="butt",
                    **kwargs,
                )
            )
        elif isinstance(leaf, Polyline):
            points = [matrix.apply(point) for point in leaf.points]
            dashes = _dash_points(leaf.dash or inherited_dash, scale)
            linestyle = (0, dashes) if dashes else "solid"
            linewidth = leaf.stroke_width * PT_PER_MM * scale
            if leaf.closed:
                ax.add_patch(
                    Polygon(
                        points,
                        closed=True,
                        fill=leaf.fill is not None,
                        facecolor=leaf.fill or "none",
                        edgecolor=leaf.stroke or inherited_stroke,
                        linewidth=linewidth,
                        linestyle=linestyle,
                    )
                )
            else:
                xs, ys = zip(*points) if points else ((), ())
                ax.add_line(
                    Line2D(
                        list(xs),
                        list(ys),
                        color=leaf.stroke or inherited_stroke,
                        linewidth=linewidth,
                        linestyle=linestyle,
                    )
                )
        elif isinstance(leaf, Text):
            x, y = matrix.apply(leaf.position)
            # Sheet y grows downward, so clockwise SVG rotation is negative here.
            ax.text(
                x,
                y,
                leaf.content,
                fontsize=leaf.font_size * PT_PER_MM * scale,
                ha=_ANCHORS.get(leaf.anchor, "center"),
                va="baseline",
                rotation=-leaf.rotation,
                rotation_mode="anchor",
                color=leaf.fill,
                clip_on=True,
            )
        else:  # pragma: no cover - iter_flattened only yields leaves
            raise TypeError(f"Unsupported draw primitive: {type(leaf)!r}")
        count += 1
    return count


def _drawable(view_box: ViewBox) -> ViewBox:
    """Widen a collapsed view box (zero, negative or NaN extent) to ``MIN_EXTENT``."""

    width = view_box.width if view_box.width >= MIN_EXTENT else MIN_EXTENT
    height = view_box.height if view_box.height >= MIN_EXTENT else MIN_EXTENT
    if (width, height) == (view_box.width, view_box.height):
        return view_box
    return ViewBox(view_box.x, view_box.y, width, height)


def _fit_scale(view_box: ViewBox, printable_w: float, printable_h: float) -> float:
    ratios = [1.0]
    if view_box.width > 0:
        ratios.append(printable_w / view_box.width)
    if view_box.height > 0:
        ratios.append(printable_h / view_box.height)
    return min(ratios)


def _frame(ax: Axes, view_box: ViewBox) -> None:
    ax.set_xlim(view_box.x, view_box.max_x)
    ax.set_ylim(view_box.max_y, view_box.y)
    ax.set_axis_off()


def _sheet_figure(diagram: Diagram, view_box: ViewBox) -> Figure:
    figure = Figure(
        figsize=(view_box.width / MM_PER_INCH, view_box.height / MM_PER_INCH),
        facecolor="white",
    )
    FigureCanvasAgg(figure)
    ax = figure.add_axes((0.0, 0.0, 1.0, 1.0))
    _frame(ax, view_box)
    draw_diagram(ax, diagram)
    return figure


def write_png(
    diagram: Diagram,
    path: Path | str,
    *,
    view_box: ViewBox | None = None,
    oversampling: int = PNG_OVERSAMPLING,
) -> Path:
    """Rasterise *diagram* at ``oversampling`` pixels per millimetre."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    box = _drawable(view_box or diagram.view_box)
    with matplotlib.rc_context(_RC_OVERRIDES):
        figure = _sheet_figure(diagram, box)
        figure.savefig(target, dpi=MM_PER_INCH * oversampling, facecolor="white")
    logger.debug("Wrote %s (%.0fx%.0f px)", target, box.width * oversampling, box.height * oversampling)
    return target


def write_png_strips(
    diagram: Diagram,
    output_dir: Path | str,
    page: PageSize,
    *,
    stem: str = "bellows",
    pages: int = 0,
    start: float = 0.0,
    end: float = 0.0,
    margin: float = DEFAULT_MARGIN,
    oversampling: int = PNG_OVERSAMPLING,
) -> list[Path]:
    """Write one PNG per vertical strip, named ``<stem>-01.png`` and onward."""

    destination = Path(output_dir)
    strips = vertical_strips(diagram.view_box, page, margin, pages=pages, start=start, end=end)
    written: list[Path] = []
    for index, strip in enumerate(strips, start=1):
        written.append(
            write_png(
                diagram,
                destination / f"{stem}-{index:02d}.png",
                view_box=strip,
                oversampling=oversampling,
            )
        )
    logger.info("Split %s into %d PNG strip(s)", stem, len(written))
    return written


def _page_figure(page: PageSize) -> Figure:
    figure = Figure(figsize=(page.width / MM_PER_INCH, page.height / MM_PER_INCH), facecolor="white")
    FigureCanvasAgg(figure)
    return figure


def _page_axes(figure: Figure, page: PageSize, margin: float, width: float, height: float) -> Axes:
    left = margin / page.width
    bottom = 1.0 - (margin + height) / page.height
    return figure.add_axes((left, bottom, width / page.width, height / page.height))


def write_pdf(
    diagram: Diagram,
    path: Path | str,
    page: PageSize,
    *,
    one_to_one: bool = True,
    margin: float = DEFAULT_MARGIN,
) -> Path:
    """Paginate *diagram* onto *page* sized PDF pages.

    At one-to-one scale the view box is cut into printable-size tiles, one per
    page. Otherwise the whole diagram is shrunk to fit a single page.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    printable_w, printable_h = printable_area(page, margin)
    scale = _fit_scale(diagram.view_box, printable_w, printable_h)
    box = _drawable(diagram.view_box)

    with matplotlib.rc_context(_RC_OVERRIDES), PdfPages(target) as pdf:
        if one_to_one:
            tiles = grid_tiles(box, page, margin)
            for tile in tiles:
                figure = _page_figure(page)
                ax = _page_axes(figure, page, margin, printable_w, printable_h)
                _frame(ax, tile)
                draw_diagram(ax, diagram)
                pdf.savefig(figure)
            logger.info("Wrote %s with %d tile page(s) on %s", target, len(tiles), page.value)
        else:
            figure = _page_figure(page)
            ax = _page_axes(figure, page, margin, box.width * scale, box.height * scale)
            _frame(ax, box)
            draw_diagram(ax, diagram, scale=scale)
            pdf.savefig(figure)
            logger.info("Wrote %s fitted to one %s page at scale %.3f", target, page.value, scale)
    return target
