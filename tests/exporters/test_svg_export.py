"""Tests for the millimetre-scaled SVG writer."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from bellows.assembler import generate
from bellows.geometry import AffineTransform
from bellows.params import BellowsParameters, Mode
from bellows.primitives import Diagram, Group, Line, Text, ViewBox
from exporters.svg import render_svg, write_svg

SVG_NS = "{http://www.w3.org/2000/svg}"


def _parse(svg: str) -> ET.Element:
    return ET.fromstring(svg.encode("utf-8"))


def test_standard_svg_is_one_to_one(reference_params: BellowsParameters) -> None:
    result = generate(reference_params)
    svg = render_svg(result.diagram)
    root = _parse(svg)

    assert root.get("width") == "240mm"
    assert root.get("height") == "327mm"
    assert root.get("viewBox") == "0 0 240 327"
    assert len(list(root.iter(f"{SVG_NS}polygon"))) == 2
    assert 'stroke-dasharray="6,4"' in svg
    assert 'stroke-dasharray="2,3"' in svg
    assert 'transform="rotate(-90 ' in svg
    assert any(group.get("id") == "page" for group in root.iter(f"{SVG_NS}g"))


def test_flat_pattern_groups_carry_translation(flat_params: BellowsParameters) -> None:
    result = generate(flat_params)
    root = _parse(render_svg(result.diagram))

    faces = [group for group in root.iter(f"{SVG_NS}g") if (group.get("id") or "").startswith("face-")]
    assert len(faces) == 4
    assert faces[0].get("transform") == "matrix(1 0 0 1 95 80)"
    assert len(faces[0].findall(f"{SVG_NS}line")) == 30
    assert root.get("viewBox") == "-30 -30 720 357"


def test_view_box_override_crops_document(flat_params: BellowsParameters) -> None:
    result = generate(flat_params)
    tile = ViewBox(160.0, -30.0, 190.0, 277.0)
    root = _parse(render_svg(result.diagram, view_box=tile))

    assert root.get("width") == "190mm"
    assert root.get("viewBox") == "160 -30 190 277"


def test_text_is_escaped_and_metadata_recorded() -> None:
    diagram = Diagram(
        primitives=[
            Group(
                AffineTransform.identity(),
                (Text((5.0, 5.0), "A < B & C"), Line((0.0, 0.0), (1.0, 1.0))),
                name="labels",
            )
        ],
        view_box=ViewBox(0.0, 0.0, 10.0, 10.0),
        diagnostics=["pleat fell back to origin"],
    )
    svg = render_svg(diagram, metadata={"mode": Mode.STANDARD.value})

    assert "A &lt; B &amp; C" in svg
    assert "<!-- metadata:" in svg
    assert "<!-- diagnostics:" in svg
    group = _parse(svg).find(f"{SVG_NS}g")
    assert group is not None
    assert group.get("transform") is None
    assert group.find(f"{SVG_NS}text").text == "A < B & C"


def test_write_svg_creates_parent_directories(tmp_path: Path, reference_params: BellowsParameters) -> None:
    result = generate(reference_params)
    target = write_svg(result.diagram, tmp_path / "nested" / "bellows.svg")

    assert target.exists()
    assert target.read_text(encoding="utf-8").startswith("<?xml")
