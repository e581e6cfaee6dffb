from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from bellows.params import Mode
from bellowsdesigner.__main__ import main
from bellowsdesigner.logging_config import NAMESPACES, setup_logging
from schemas.records import load_parameters


@pytest.fixture(autouse=True)
def _reset_loggers():
    yield
    for namespace in NAMESPACES:
        logger = logging.getLogger(namespace)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)


def test_summary_prints_standard_dimensions(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["summary"]) == 0

    out = capsys.readouterr().out
    assert "Front: 100.0x100.0mm | Rear: 120.0x120.0mm | Folds: 8 | Depth: 15.0mm | Length: 120.0mm" in out


def test_cli_clamps_out_of_range_values(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["summary", "--folds", "100", "--fold-depth", "2", "--log-level", "WARNING"]) == 0

    out = capsys.readouterr().out
    assert "Folds: 40" in out
    assert "Depth: 5.0mm" in out


def test_generate_writes_requested_formats(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(
        [
            "generate",
            "--mode",
            "flat-pattern",
            "--output",
            str(tmp_path),
            "--formats",
            "svg",
            "json",
        ]
    )

    assert exit_code == 0
    assert (tmp_path / "bellows.svg").exists()
    config = json.loads((tmp_path / "bellows_config.json").read_text(encoding="utf-8"))
    assert config["params"]["mode"] == "flat-pattern"
    assert config["viewBox"]["width"] == pytest.approx(720.0)
    assert not (tmp_path / "bellows.png").exists()

    out = capsys.readouterr().out
    assert "Front inner: 100.0x100.0mm" in out
    assert f"Wrote SVG to {tmp_path / 'bellows.svg'}" in out


def test_generate_splits_png_into_strips(tmp_path: Path) -> None:
    exit_code = main(
        [
            "generate",
            "--mode",
            "flat-pattern",
            "--output",
            str(tmp_path),
            "--formats",
            "png",
            "--split-pages",
            "--pages",
            "2",
        ]
    )

    assert exit_code == 0
    assert sorted(path.name for path in tmp_path.glob("*.png")) == ["bellows-01.png", "bellows-02.png"]


def test_params_file_is_overridden_by_options(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    params_path = tmp_path / "params.json"
    params_path.write_text(
        json.dumps({"frontWidth": 90, "frontHeight": 80, "rearWidth": 130, "rearHeight": 120, "folds": 6, "foldDepth": 20}),
        encoding="utf-8",
    )

    assert main(["summary", "--params", str(params_path), "--front-width", "150"]) == 0

    out = capsys.readouterr().out
    assert "Front: 150.0x80.0mm | Rear: 130.0x120.0mm | Folds: 6" in out


def test_import_normalises_designer_records(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    legacy = tmp_path / "camera.json"
    legacy.write_text(json.dumps({"cameraFocalDist": 150, "frontStdSize": 90, "rearStdSize": 110}), encoding="utf-8")
    output = tmp_path / "bellows_config.json"

    assert main(["import", str(legacy), "--output", str(output)]) == 0

    params = load_parameters(output)
    assert params.mode is Mode.FOCAL_GEOMETRY
    assert params.focal.camera_focal_distance == 150.0
    assert params.front_width == 90.0
    assert "Front: 90.0mm | Rear: 110.0mm" in capsys.readouterr().out


def test_unknown_format_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["generate", "--output", str(tmp_path), "--formats", "dxf"])


def test_log_file_receives_messages(tmp_path: Path) -> None:
    log_file = tmp_path / "bellows.log"

    assert main(["summary", "--log-level", "DEBUG", "--log-file", str(log_file)]) == 0

    text = log_file.read_text(encoding="utf-8")
    assert "bellowsdesigner - INFO - Logging initialized." in text
    assert "Generated standard diagram" in text


def test_repeated_setup_closes_previous_file_handler(tmp_path: Path) -> None:
    setup_logging("INFO", str(tmp_path / "first.log"))
    first = next(
        handler for handler in logging.getLogger("bellows").handlers if isinstance(handler, logging.FileHandler)
    )

    setup_logging("INFO", str(tmp_path / "second.log"))

    assert first.stream is None
    for namespace in NAMESPACES:
        handlers = logging.getLogger(namespace).handlers
        assert first not in handlers
        assert len(handlers) == 2
