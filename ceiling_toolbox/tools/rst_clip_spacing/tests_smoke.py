from __future__ import annotations

import json
from pathlib import Path

import pytest

from .tool import TOOL

ARTIFACTS = ("report.html", "report.pdf", "calc_trace.json", "results.json", "results.xlsx", "combos.csv", "run.log")


@pytest.fixture(autouse=True)
def _user_data(tmp_path, monkeypatch):
    # force run packages into a temp user data root
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))


def _check_outputs(run_dir: Path) -> None:
    missing = [f for f in ARTIFACTS if not (run_dir / f).exists()]
    assert not missing, f"Missing artifacts in {run_dir}: {missing}"


def test_smoke_defaults(tmp_path) -> None:
    res = TOOL.run_batch(TOOL.default_inputs())
    assert res["ok"] is True
    run_dir = Path(res["run_dir"])
    assert tmp_path in run_dir.parents
    _check_outputs(run_dir)

    assert (res["channel_spacing_in"], res["clip_spacing_in"]) == (16.0, 40.0)
    saved = json.loads((run_dir / "results.json").read_text(encoding="utf-8"))
    assert saved["input_hash"] == res["input_hash"]
    assert "Recommended spacing" in (run_dir / "report.html").read_text(encoding="utf-8")
    assert "Starting RST clip spacing batch run" in (run_dir / "run.log").read_text(encoding="utf-8")


def test_smoke_dedicated_clouds_on_structure() -> None:
    inputs = TOOL.default_inputs()
    inputs.update(
        {
            "mount_mode": "dedicated",
            "cloud_4x2_count": 3,
            "cloud_4x4_count": 1,
            "constrain_to_structure": True,
            "structure_spacing_in": 24.0,
        }
    )
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    assert res["clip_spacing_in"] == 24.0
    assert res["dedicated_clips"] == 16
    assert res["total_clips"] == res["grid_clips"] + 16
    run_dir = Path(res["run_dir"])
    _check_outputs(run_dir)
    assert "Dedicated Cloud Clip Check" in (run_dir / "report.html").read_text(encoding="utf-8")


def test_smoke_no_passing_spacing() -> None:
    inputs = TOOL.default_inputs()
    inputs.update({"misc_psf": 150.0})
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    assert res["solver_feasible"] is False
    assert res["grid_clips"] == 0
    html = (Path(res["run_dir"]) / "report.html").read_text(encoding="utf-8")
    assert "No passing spacing combination with current constraints." in html


def test_calculate_writes_nothing(tmp_path) -> None:
    out = TOOL.calculate({"area_ft2": 0.0, "channel_spacings_in": []})
    assert out["ok"] is True
    assert out["combos"] == []
    assert out["solver_feasible"] is False
    assert out["total_clips"] == 0
    assert not (tmp_path / "CeilingToolbox" / "rst_clip_spacing").exists()
