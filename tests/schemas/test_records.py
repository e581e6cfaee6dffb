from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from bellows.params import DEFAULT_PARAMETERS, BellowsParameters, FocalGeometryInput, Mode, PageSize
from bellows.primitives import ViewBox
from schemas.records import (
    UnrecognizedPayloadError,
    detect_shape,
    from_payload,
    load_parameters,
    save_snapshot,
    snapshot,
    to_record,
)
from schemas.validators import SchemaValidationError, load_payload, load_schema, validate_file


@pytest.fixture()
def custom_params() -> BellowsParameters:
    return BellowsParameters(
        front_width=82.5,
        front_height=91.0,
        rear_width=140.25,
        rear_height=133.0,
        folds=11,
        fold_depth=12.5,
        show_annotations=False,
        page_size=PageSize.B4,
        mode=Mode.FLAT_PATTERN,
        use_five_faces=True,
        seam_allowance=7.5,
        focal=FocalGeometryInput(
            camera_focal_distance=210.0,
            front_std_size=95.0,
            rear_std_size=150.0,
            fold_distance=21.0,
            flex_factor=1.75,
        ),
    )


def test_record_uses_designer_keys(custom_params: BellowsParameters) -> None:
    record = to_record(custom_params)

    assert record["frontWidth"] == 82.5
    assert record["pageSize"] == "B4"
    assert record["mode"] == "flat-pattern"
    assert record["useGeneratorMode"] is True
    assert record["useBdMode"] is False
    assert record["bdData"] == {
        "cameraFocalDist": 210.0,
        "frontStdSize": 95.0,
        "rearStdSize": 150.0,
        "foldDist": 21.0,
        "flexFactor": 1.75,
    }


def test_snapshot_round_trip_is_identical(tmp_path: Path, custom_params: BellowsParameters) -> None:
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    target = save_snapshot(custom_params, ViewBox(-30.0, -30.0, 720.0, 357.0), tmp_path / "bellows_config.json", export_date=stamp)

    document = json.loads(target.read_text(encoding="utf-8"))
    assert set(document) == {"params", "viewBox", "exportDate"}
    assert document["viewBox"] == {"x": -30.0, "y": -30.0, "width": 720.0, "height": 357.0}
    assert document["exportDate"] == "2024-05-01T12:00:00+00:00"

    assert load_parameters(target) == custom_params


@pytest.mark.parametrize("mode", list(Mode))
def test_mode_survives_round_trip(mode: Mode) -> None:
    params = DEFAULT_PARAMETERS.with_updates(mode=mode)

    assert from_payload(snapshot(params, ViewBox(0.0, 0.0, 1.0, 1.0))) == params


def test_flat_record_fills_missing_optionals() -> None:
    params = from_payload(
        {"frontWidth": 90, "frontHeight": 80, "rearWidth": 130, "rearHeight": 120, "folds": 6, "foldDepth": 20}
    )

    assert params.front_width == 90.0
    assert params.folds == 6
    assert params.mode is Mode.STANDARD
    assert params.page_size is PageSize.A4
    assert params.focal == DEFAULT_PARAMETERS.focal


def test_legacy_flags_select_mode() -> None:
    base = to_record(DEFAULT_PARAMETERS)
    del base["mode"]

    assert from_payload({**base, "useBdMode": True}).mode is Mode.FOCAL_GEOMETRY
    assert from_payload({**base, "useGeneratorMode": True}).mode is Mode.FLAT_PATTERN
    assert from_payload({**base, "useBdMode": True, "useGeneratorMode": True}).mode is Mode.FLAT_PATTERN


def test_fractional_folds_round_half_up() -> None:
    record = {**to_record(DEFAULT_PARAMETERS), "folds": 6.5}

    assert from_payload(record).folds == 7


def test_designer_record_uses_defaults_for_falsy_values() -> None:
    params = from_payload({"cameraFocalDist": 0, "frontStdSize": 110, "numFolds": None, "foldDist": 20})

    assert params.mode is Mode.FOCAL_GEOMETRY
    assert params.show_annotations is True
    assert params.page_size is PageSize.A4
    assert (params.front_width, params.front_height) == (110.0, 110.0)
    assert (params.rear_width, params.rear_height) == (120.0, 120.0)
    assert params.folds == 8
    assert params.fold_depth == 20.0
    assert params.focal == FocalGeometryInput(
        camera_focal_distance=120.0,
        front_std_size=110.0,
        rear_std_size=120.0,
        fold_distance=20.0,
        flex_factor=2.0,
    )


def test_designer_record_without_fold_distance() -> None:
    params = from_payload({"cameraFocalDist": 150})

    assert params.fold_depth == 15.0
    assert params.focal.fold_distance == 18.5
    assert params.focal.camera_focal_distance == 150.0


def test_shape_detection() -> None:
    assert detect_shape({"params": {}}) == "snapshot"
    assert detect_shape({"frontWidth": 1}) == "flat"
    assert detect_shape({"cameraFocalDist": 1}) == "designer"


@pytest.mark.parametrize("payload", [{"width": 100}, [1, 2, 3], {"params": [1]}])
def test_unrecognised_payloads_raise(payload) -> None:
    with pytest.raises(UnrecognizedPayloadError):
        from_payload(payload)


def test_invalid_parameter_types_raise_schema_error() -> None:
    with pytest.raises(SchemaValidationError) as excinfo:
        from_payload({"frontWidth": "wide", "frontHeight": 80, "rearWidth": 130, "rearHeight": 120, "folds": 6})

    message = str(excinfo.value)
    assert "[frontWidth]" in message
    assert "'foldDepth' is a required property" in message
    assert len(excinfo.value.errors) == 2


def test_yaml_parameter_files_are_supported(tmp_path: Path) -> None:
    path = tmp_path / "params.yaml"
    path.write_text(
        yaml.safe_dump({"frontWidth": 70, "frontHeight": 70, "rearWidth": 90, "rearHeight": 90, "folds": 5, "foldDepth": 10}),
        encoding="utf-8",
    )

    assert load_parameters(path).rear_width == 90.0
    assert validate_file(path)["folds"] == 5


def test_load_payload_rejects_unknown_suffix(tmp_path: Path) -> None:
    path = tmp_path / "params.txt"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported payload extension"):
        load_payload(path)
    with pytest.raises(FileNotFoundError):
        load_payload(tmp_path / "missing.json")


def test_schemas_ship_with_the_package() -> None:
    assert load_schema()["title"] == "Bellows parameter record"
    assert "cameraFocalDist" in load_schema("bellows_designer.yaml")["required"]
