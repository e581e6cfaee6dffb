from __future__ import annotations

import math

import numpy as np
import pytest

from bellows.geometry import (
    AffineTransform,
    BoundsAccumulator,
    IntersectionKind,
    ieee_div,
    intersect,
    ray_from,
    slope,
)


def test_intersect_crossing_diagonals() -> None:
    result = intersect(((0.0, 0.0), (10.0, 10.0)), ((0.0, 10.0), (10.0, 0.0)))

    assert result.kind is IntersectionKind.POINT
    assert not result.is_parallel
    assert result.point == pytest.approx((5.0, 5.0))


def test_intersect_extends_segments_to_infinite_lines() -> None:
    result = intersect(((0.0, 0.0), (1.0, 0.0)), ((5.0, -1.0), (5.0, -2.0)))

    assert result.point == pytest.approx((5.0, 0.0))


def test_parallel_lines_fall_back_to_origin() -> None:
    result = intersect(((0.0, 0.0), (10.0, 0.0)), ((0.0, 5.0), (10.0, 5.0)))

    assert result.is_parallel
    assert result.point == (0.0, 0.0)


def test_nearly_parallel_lines_are_treated_as_parallel() -> None:
    result = intersect(((0.0, 0.0), (1.0, 0.0)), ((0.0, 1.0), (1.0, 1.0 + 1e-5)))

    assert result.kind is IntersectionKind.PARALLEL


def test_slope_and_ray_from() -> None:
    assert slope(((0.0, 0.0), (0.0, 5.0))) == pytest.approx(math.pi / 2)
    assert slope(((0.0, 0.0), (-1.0, 0.0))) == pytest.approx(math.pi)

    start, end = ray_from((1.0, 2.0), 0.0, -3.0)
    assert start == (1.0, 2.0)
    assert end == pytest.approx((-2.0, 2.0))


def test_ieee_div_propagates_non_finite_values() -> None:
    assert ieee_div(6.0, 3.0) == 2.0
    assert ieee_div(1.0, 0.0) == math.inf
    assert ieee_div(-1.0, 0.0) == -math.inf
    assert ieee_div(1.0, -0.0) == -math.inf
    assert math.isnan(ieee_div(0.0, 0.0))
    assert math.isnan(ieee_div(math.nan, 0.0))
    assert ieee_div(math.inf, 2.0) == math.inf
    assert isinstance(ieee_div(3, 0), float)


def test_translate_accumulates() -> None:
    matrix = AffineTransform.identity().translate(5.0, 7.0).translate(1.0, 1.0)

    assert matrix.is_translation()
    assert matrix.apply((0.0, 0.0)) == pytest.approx((6.0, 8.0))
    assert matrix.to_svg() == "matrix(1 0 0 1 6 8)"


def test_compose_applies_right_operand_first() -> None:
    scale = AffineTransform(a=2.0, d=2.0)
    shift = AffineTransform.identity().translate(10.0, 0.0)

    combined = scale.compose(shift)

    assert combined.apply((1.0, 1.0)) == pytest.approx((22.0, 2.0))
    assert np.allclose(combined.as_array(), scale.as_array() @ shift.as_array())


def test_bounds_accumulator_tracks_sheet_space_extent() -> None:
    bounds = BoundsAccumulator()
    assert bounds.is_empty

    matrix = AffineTransform.identity().translate(100.0, 50.0)
    bounds.extend(matrix, (-10.0, -5.0), (10.0, 5.0))
    bounds.extend(AffineTransform.identity(), (0.0, 200.0), (1.0, 201.0))

    assert not bounds.is_empty
    assert bounds.as_tuple() == pytest.approx((0.0, 45.0, 110.0, 201.0))
    assert bounds.width == pytest.approx(110.0)
    assert bounds.height == pytest.approx(156.0)
