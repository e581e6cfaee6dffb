"""Serialise bellows diagrams as millimetre-scaled SVG documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from bellows.geometry import AffineTransform
from bellows.primitives import Diagram, DrawPrimitive, Group, Line, Polyline, Text, ViewBox

__all__ = ["render_svg", "write_svg"]

_INDENT = "  "


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def _dash_attr(dash: tuple[float, ...] | None) -> str:
    if not dash:
        return ""
    return f" stroke-dasharray=\"{','.join(_num(value) for value in dash)}\""


def _escape_svg_text(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _points_attr(points: tuple[tuple[float, float], ...]) -> str:
    return " ".join(f"{_num(x)},{_num(y)}" for x, y in points)


def _element_lines(primitive: DrawPrimitive, depth: int) -> list[str]:
    pad = _INDENT * depth
    if isinstance(primitive, Line):
        (x1, y1), (x2, y2) = primitive.start, primitive.end
        return [
            f"{pad}<line x1=\"{_num(x1)}\" y1=\"{_num(y1)}\" x2=\"{_num(x2)}\" y2=\"{_num(y2)}\" "
            f"stroke=\"{primitive.stroke}\" stroke-width=\"{_num(primitive.stroke_width)}\""
            f"{_dash_attr(primitive.dash)} />"
        ]
    if isinstance(primitive, Polyline):
        tag = "polygon" if primitive.closed else "polyline"
        fill = primitive.fill or "none"
        return [
            f"{pad}<{tag} points=\"{_points_attr(primitive.points)}\" fill=\"{fill}\" "
            f"stroke=\"{primitive.stroke}\" stroke-width=\"{_num(primitive.stroke_width)}\""
            f"{_dash_attr(primitive.dash)} />"
        ]
    if isinstance(primitive, Text):
        x, y = primitive.position
        rotate_attr = (
            f" transform=\"rotate({_num(primitive.rotation)} {_num(x)} {_num(y)})\""
            if abs(primitive.rotation) > 1e-9
            else ""
        )
        return [
            f"{pad}<text x=\"{_num(x)}\" y=\"{_num(y)}\" font-size=\"{_num(primitive.font_size)}\" "
            f"text-anchor=\"{primitive.anchor}\" fill=\"{primitive.fill}\" stroke=\"none\"{rotate_attr}>"
            f"{_escape_svg_text(primitive.content)}</text>"
        ]
    if isinstance(primitive, Group):
        attrs = ""
        if primitive.name:
            attrs += f" id=\"{_escape_svg_text(primitive.name)}\""
        if primitive.transform != AffineTransform.identity():
            attrs += f" transform=\"{primitive.transform.to_svg()}\""
        if primitive.stroke:
            attrs += f" stroke=\"{primitive.stroke}\""
        attrs += _dash_attr(primitive.dash)
        lines = [f"{pad}<g{attrs}>"]
        for child in primitive.children:
            lines.extend(_element_lines(child, depth + 1))
        lines.append(f"{pad}</g>")
        return lines
    raise TypeError(f"Unsupported draw primitive: {type(primitive)!r}")


def render_svg(
    diagram: Diagram,
    *,
    view_box: ViewBox | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> str:
    """Return an SVG document where one user unit is one millimetre.

    ``view_box`` crops the document to a tile of the diagram; the physical
    ``width``/``height`` follow the crop so printing stays one-to-one.
    """

    box = view_box or diagram.view_box
    lines = [
        "<?xml version=\"1.0\" encoding=\"UTF-8\"?>",
        f"<svg xmlns=\"http://www.w3.org/2000/svg\" width=\"{_num(box.width)}mm\" "
        f"height=\"{_num(box.height)}mm\" viewBox=\"{_num(box.x)} {_num(box.y)} {_num(box.width)} {_num(box.height)}\">",
    ]
    if metadata:
        lines.insert(1, f"<!-- metadata: {_escape_svg_text(json.dumps(dict(metadata), sort_keys=True))} -->")
    if diagram.diagnostics:
        lines.insert(1, f"<!-- diagnostics: {_escape_svg_text(json.dumps(diagram.diagnostics))} -->")
    for primitive in diagram.primitives:
        lines.extend(_element_lines(primitive, 1))
    lines.append("</svg>")
    return "\n".join(lines)


def write_svg(
    diagram: Diagram,
    path: Path | str,
    *,
    view_box: ViewBox | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_svg(diagram, view_box=view_box, metadata=metadata), encoding="utf-8")
    return target
