from __future__ import annotations

import logging
import math

import pytest

import bellows
from bellows.assembler import GENERATORS, generate
from bellows.params import BellowsParameters, FocalGeometryInput, Mode


def test_every_mode_has_a_generator() -> None:
    assert set(GENERATORS) == set(Mode)


@pytest.mark.parametrize("mode", list(Mode))
def test_generate_dispatches_on_mode(reference_params: BellowsParameters, mode: Mode) -> None:
    result = generate(reference_params.with_updates(mode=mode))

    assert result.mode is mode
    assert result.view_box == result.diagram.view_box
    assert result.diagram.primitives
    assert result.summary


def test_mode_strings_are_accepted(reference_params: BellowsParameters) -> None:
    result = generate(reference_params.with_updates(mode="flat_pattern"))

    assert result.mode is Mode.FLAT_PATTERN
    assert result.summary.startswith("Front inner:")


def test_focal_mode_uses_camera_inputs(reference_params: BellowsParameters) -> None:
    params = reference_params.with_updates(
        mode=Mode.FOCAL_GEOMETRY,
        focal=FocalGeometryInput(front_std_size=150.0, rear_std_size=160.0),
    )

    assert generate(params).summary.startswith("Front: 150.0mm | Rear: 160.0mm")


def test_nan_input_does_not_raise(reference_params: BellowsParameters) -> None:
    result = generate(reference_params.with_updates(front_width=math.nan))

    assert "nan" in result.summary


def test_diagnostics_are_logged(reference_params: BellowsParameters, caplog: pytest.LogCaptureFixture) -> None:
    params = reference_params.with_updates(
        mode=Mode.FOCAL_GEOMETRY,
        focal=FocalGeometryInput(camera_focal_distance=50.0, flex_factor=0.5, rear_std_size=400.0),
    )
    with caplog.at_level(logging.DEBUG, logger="bellows"):
        generate(params)

    assert any("clamped to 0" in record.getMessage() for record in caplog.records)


def test_package_exposes_lazy_attributes() -> None:
    assert bellows.generate is generate
    assert bellows.Mode is Mode
    with pytest.raises(AttributeError):
        getattr(bellows, "does_not_exist")
