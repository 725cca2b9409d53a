from __future__ import annotations

import json
from pathlib import Path

import pytest
from loguru import logger

from ceiling_toolbox.core.settings import load_settings, save_settings

from .main import EXIT_FAILED, EXIT_OK, main


@pytest.fixture(autouse=True)
def _user_data(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    yield
    # main() installs app-level sinks bound to this test's tmp dir and captured stderr
    logger.remove()


def _stdout_json(capsys):
    return json.loads(capsys.readouterr().out)


def test_list(capsys) -> None:
    assert main(["list"]) == EXIT_OK
    assert "rst_clip_spacing" in capsys.readouterr().out


def test_defaults(capsys) -> None:
    assert main(["defaults", "rst_clip_spacing"]) == EXIT_OK
    data = _stdout_json(capsys)
    assert data["area_ft2"] == 400.0
    assert data["channel_spacings_in"] == [12.0, 16.0, 24.0]


def test_unknown_tool() -> None:
    assert main(["defaults", "nope"]) == EXIT_FAILED


def test_run_no_export_with_overrides(capsys) -> None:
    rc = main(
        [
            "run",
            "rst_clip_spacing",
            "--no-export",
            "--set",
            "channel_spacings_in=[16, 24]",
            "--set",
            "clip_spacings_in=[48]",
            "--set",
            "include_osb=false",
            "--set",
            "drywall_layers=1",
            "--set",
            "insulation_psf=0",
            "--set",
            "misc_psf=2.4",
        ]
    )
    assert rc == EXIT_OK
    out = _stdout_json(capsys)
    # q_grid = 2.5 + 2.4 = 4.9 psf -> 24x48 fails at 39.2 lb, 16x48 passes
    assert out["grid_psf"] == pytest.approx(4.9)
    assert (out["channel_spacing_in"], out["clip_spacing_in"]) == (16.0, 48.0)
    assert [c["passes"] for c in out["combos"]] == [False, True]
    assert load_settings()["recent_tools"] == ["rst_clip_spacing"]


def test_run_uses_settings_and_inputs_file(tmp_path, capsys) -> None:
    save_settings({"tool_defaults": {"rst_clip_spacing": {"area_ft2": 0.0}}})
    f = tmp_path / "inputs.json"
    f.write_text(json.dumps({"mount_mode": "dedicated", "cloud_4x1_count": 2}), encoding="utf-8")
    assert main(["run", "rst_clip_spacing", "--no-export", "--inputs", str(f)]) == EXIT_OK
    out = _stdout_json(capsys)
    assert out["grid_clips"] == 0
    assert out["dedicated_clips"] == 8
    assert len(out["dedicated_checks"]) == 4


def test_run_validation_error(capsys) -> None:
    assert main(["run", "rst_clip_spacing", "--set", "area_ft2=-5"]) == EXIT_FAILED
    assert capsys.readouterr().out == ""


def test_run_bad_override_syntax() -> None:
    assert main(["run", "rst_clip_spacing", "--set", "area_ft2"]) == EXIT_FAILED


def test_run_batch_writes_package(capsys) -> None:
    assert main(["run", "rst_clip_spacing"]) == EXIT_OK
    out = _stdout_json(capsys)
    assert out["ok"] is True
    assert Path(out["report_html"]).exists()
