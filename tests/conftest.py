from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bellows.params import BellowsParameters, Mode  # noqa: E402


@pytest.fixture()
def reference_params() -> BellowsParameters:
    """100 mm front, 120 mm rear, 8 folds of 15 mm."""

    return BellowsParameters(
        front_width=100.0,
        front_height=100.0,
        rear_width=120.0,
        rear_height=120.0,
        folds=8,
        fold_depth=15.0,
    )


@pytest.fixture()
def flat_params(reference_params: BellowsParameters) -> BellowsParameters:
    return reference_params.with_updates(mode=Mode.FLAT_PATTERN)
