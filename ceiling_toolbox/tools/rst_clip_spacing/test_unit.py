from __future__ import annotations

import math

import pytest

from .accounting import account_fasteners, check_dedicated_classes
from .calc_trace import CalcTrace, compute_input_hash
from .combos import enumerate_combinations, evaluate_combo
from .engine import evaluate
from .evaluation import trace_evaluation
from .loads import base_assembly_psf, compose_grid_load, max_area_per_clip_ft2, max_spacing_product_in2
from .models import AssemblyConfig, CloudInventory, MountMode, RstClipInputs, SpacingConstraints
from .solver import NO_PASSING_MESSAGE, select_recommendation

NO_LOAD = AssemblyConfig(include_board_layer=False, finish_layer_count=0, insulation_psf=0.0, misc_psf=0.0)


def _constraints(channels, clips, constrain=False, structure=48.0) -> SpacingConstraints:
    return SpacingConstraints(
        channel_spacings_in=tuple(channels),
        clip_spacings_in=tuple(clips),
        constrain_to_structure=constrain,
        structure_spacing_in=structure,
    )


# ---- Load composition


def test_base_assembly_default_build_up() -> None:
    # 2.7 OSB + 2 x 2.5 drywall + 0.2 insulation
    assert base_assembly_psf(AssemblyConfig()) == pytest.approx(7.9)


def test_board_layer_excluded() -> None:
    a = AssemblyConfig(include_board_layer=False, board_psf=99.0)
    assert base_assembly_psf(a) == pytest.approx(5.2)


def test_distributed_clouds_add_average_psf() -> None:
    clouds = CloudInventory(c4x1=1, c4x2=1, c4x3=1, c4x4=1)  # 150 lb
    q = compose_grid_load(NO_LOAD, clouds, MountMode.DISTRIBUTED, 100.0, 0.5)
    assert q == pytest.approx(1.5 + 0.5)


def test_dedicated_clouds_add_no_grid_load() -> None:
    clouds = CloudInventory(c4x4=10)
    q = compose_grid_load(AssemblyConfig(), clouds, MountMode.DEDICATED, 400.0, 0.0)
    assert q == pytest.approx(7.9)


def test_zero_area_distributed_has_no_cloud_contribution() -> None:
    clouds = CloudInventory(c4x4=4)  # 240 lb
    assert clouds.total_weight_lb() == 240.0
    q = compose_grid_load(NO_LOAD, clouds, MountMode.DISTRIBUTED, 0.0, 0.0)
    assert q == 0.0
    assert math.isfinite(q)


def test_misc_defaults_to_assembly_value() -> None:
    a = AssemblyConfig(include_board_layer=False, finish_layer_count=0, insulation_psf=0.0, misc_psf=1.25)
    assert compose_grid_load(a, CloudInventory(), MountMode.DISTRIBUTED, 100.0) == pytest.approx(1.25)
    assert compose_grid_load(a, CloudInventory(), MountMode.DISTRIBUTED, 100.0, 0.0) == 0.0


def test_capacity_envelope() -> None:
    assert max_area_per_clip_ft2(4.5) == pytest.approx(8.0)
    assert max_spacing_product_in2(4.5) == pytest.approx(1152.0)
    assert max_area_per_clip_ft2(0.0) == math.inf


# ---- Enumeration / selection


def test_scenario_widest_fails_next_passes() -> None:
    combos = enumerate_combinations(4.9, _constraints([16, 24], [48]))
    assert [(c.channel_in, c.clip_in) for c in combos] == [(24.0, 48.0), (16.0, 48.0)]

    wide, narrow = combos
    assert wide.trib_area_ft2 == pytest.approx(8.0)
    assert wide.load_per_clip_lb == pytest.approx(39.2)
    assert wide.passes is False
    assert narrow.trib_area_ft2 == pytest.approx(5.3333, abs=1e-4)
    assert narrow.load_per_clip_lb == pytest.approx(26.1333, abs=1e-4)
    assert narrow.passes is True
    assert narrow.safety_factor == pytest.approx(36.0 / narrow.load_per_clip_lb)

    assert select_recommendation(combos) is narrow


def test_full_cross_product_and_dedup() -> None:
    combos = enumerate_combinations(5.0, _constraints([16, 12, 16, 24], [24, 48, 24]))
    assert len(combos) == 3 * 2
    assert {(c.channel_in, c.clip_in) for c in combos} == {
        (ch, cl) for ch in (12.0, 16.0, 24.0) for cl in (24.0, 48.0)
    }


def test_ordering_widest_first() -> None:
    combos = enumerate_combinations(3.0, _constraints([12, 16, 24], [24, 32, 40, 48]))
    products = [c.spacing_product_in2 for c in combos]
    assert all(a >= b for a, b in zip(products, products[1:]))


def test_equal_products_keep_construction_order() -> None:
    # 16x48 == 24x32 == 768; construction order is ascending channel
    combos = enumerate_combinations(1.0, _constraints([16, 24], [32, 48]))
    ties = [(c.channel_in, c.clip_in) for c in combos if c.spacing_product_in2 == 768.0]
    assert ties == [(16.0, 48.0), (24.0, 32.0)]


def test_structure_constraint_collapses_clip_spacing() -> None:
    combos = enumerate_combinations(4.0, _constraints([12, 16, 24], [24, 32, 36, 48], constrain=True, structure=48.0))
    assert len(combos) == 3
    assert all(c.clip_in == 48.0 for c in combos)


def test_structure_constraint_ignores_empty_clip_list() -> None:
    combos = enumerate_combinations(4.0, _constraints([16], [], constrain=True, structure=19.2))
    assert [(c.channel_in, c.clip_in) for c in combos] == [(16.0, 19.2)]


def test_empty_channels_give_no_recommendation() -> None:
    combos = enumerate_combinations(4.0, _constraints([], [24, 48]))
    assert combos == []
    rec = select_recommendation(combos)
    assert rec is None
    summary = account_fasteners(rec, 400.0, MountMode.DISTRIBUTED, CloudInventory())
    assert summary.grid_clips == 0
    assert summary.total_clips == 0


def test_no_passing_combo() -> None:
    combos = enumerate_combinations(100.0, _constraints([12, 16], [24]))
    assert combos and not any(c.passes for c in combos)
    assert select_recommendation(combos) is None


def test_selector_does_not_resort() -> None:
    combos = enumerate_combinations(1.0, _constraints([12, 24], [48]))
    assert select_recommendation(list(reversed(combos))).channel_in == 12.0


def test_zero_load_combo() -> None:
    c = evaluate_combo(16.0, 48.0, 0.0)
    assert c.load_per_clip_lb == 0.0
    assert c.passes is True
    assert c.safety_factor == math.inf


def test_negative_load_passes() -> None:
    c = evaluate_combo(16.0, 48.0, -2.0)
    assert c.load_per_clip_lb < 0.0
    assert c.passes is True
    assert c.safety_factor == math.inf


def test_non_finite_load_fails_and_is_kept() -> None:
    combos = enumerate_combinations(math.inf, _constraints([16], [24]))
    assert len(combos) == 1
    assert combos[0].passes is False
    assert combos[0].safety_factor == math.inf

    nan_combo = evaluate_combo(16.0, 24.0, math.nan)
    assert nan_combo.passes is False
    assert not math.isnan(nan_combo.safety_factor)


def test_first_pass_is_widest_passing() -> None:
    combos = enumerate_combinations(6.0, _constraints([12, 16, 24], [24, 32, 40, 48]))
    rec = select_recommendation(combos)
    assert rec is not None
    assert rec.passes
    assert not any(c.passes and c.spacing_product_in2 > rec.spacing_product_in2 for c in combos)


def test_monotonic_in_grid_load() -> None:
    cons = _constraints([12, 16, 24], [24, 32, 40, 48])
    loads = [0.5, 2.0, 4.9, 7.9, 12.0, 30.0]
    for lo, hi in zip(loads, loads[1:]):
        a = {(c.channel_in, c.clip_in): c for c in enumerate_combinations(lo, cons)}
        b = {(c.channel_in, c.clip_in): c for c in enumerate_combinations(hi, cons)}
        for key, c_lo in a.items():
            c_hi = b[key]
            assert not (c_hi.passes and not c_lo.passes)
            assert c_hi.safety_factor <= c_lo.safety_factor


def test_deterministic() -> None:
    cons = _constraints([24, 12, 16], [48, 24, 40, 32])
    assert enumerate_combinations(7.9, cons) == enumerate_combinations(7.9, cons)


# ---- Fastener accounting


def test_grid_clip_count_rounds_up() -> None:
    rec = evaluate_combo(24.0, 48.0, 4.0)  # 8 ft^2 per clip
    summary = account_fasteners(rec, 404.0, MountMode.DISTRIBUTED, CloudInventory(c4x1=3))
    assert summary.grid_clips == 51
    assert summary.dedicated_clips == 0
    assert summary.total_clips == 51


def test_dedicated_clips_added_to_total() -> None:
    rec = evaluate_combo(24.0, 48.0, 1.0)  # 8 ft^2
    summary = account_fasteners(rec, 100.0, MountMode.DEDICATED, CloudInventory(c4x1=1, c4x3=2))
    assert summary.grid_clips == 13
    assert summary.dedicated_clips == 12
    assert summary.total_clips == summary.grid_clips + summary.dedicated_clips


def test_zero_area_has_no_grid_clips() -> None:
    rec = evaluate_combo(24.0, 48.0, 1.0)
    assert account_fasteners(rec, 0.0, MountMode.DISTRIBUTED, CloudInventory()).grid_clips == 0


def test_dedicated_class_checks_fixed() -> None:
    rows = check_dedicated_classes()
    assert [r.label for r in rows] == ["4x1 (15 lb)", "4x2 (30 lb)", "4x3 (45 lb)", "4x4 (60 lb)"]
    assert [r.per_clip_lb for r in rows] == [3.75, 7.5, 11.25, 15.0]
    assert all(r.passes for r in rows)
    assert rows[3].safety_factor == pytest.approx(2.4)


def test_dedicated_class_checks_against_low_capacity() -> None:
    rows = check_dedicated_classes(capacity_lb=10.0)
    assert [r.passes for r in rows] == [True, True, False, False]


# ---- Pipeline


def test_evaluate_defaults() -> None:
    result = evaluate(RstClipInputs())
    assert result.grid_psf == pytest.approx(7.9)
    rec = result.recommendation
    assert rec is not None
    # 16x40 = 4.44 ft^2 -> 35.11 lb passes; 16x48 and 24x32 (768 in^2) give 42.13 lb
    assert (rec.channel_in, rec.clip_in) == (16.0, 40.0)
    assert rec.load_per_clip_lb == pytest.approx(35.1111, abs=1e-4)
    assert result.fastening.grid_clips == math.ceil(400.0 / rec.trib_area_ft2)
    assert result.dedicated_checks == ()


def test_evaluate_dedicated_zero_clouds_still_checks_classes() -> None:
    result = evaluate(RstClipInputs(mount_mode=MountMode.DEDICATED))
    assert result.fastening.dedicated_clips == 0
    assert len(result.dedicated_checks) == 4
    assert [r.per_clip_lb for r in result.dedicated_checks] == [3.75, 7.5, 11.25, 15.0]


def test_evaluate_no_passing_message() -> None:
    result = evaluate(RstClipInputs(misc_psf=200.0))
    assert result.recommendation is None
    assert result.message == NO_PASSING_MESSAGE
    assert result.fastening.grid_clips == 0


def test_result_dict_is_json_safe() -> None:
    result = evaluate(RstClipInputs(include_osb=False, drywall_layers=0, insulation_psf=0.0))
    d = result.to_dict()
    assert d["max_area_per_clip_ft2"] is None
    assert d["recommendation"]["safety_factor"] is None


def test_inputs_reject_bad_values() -> None:
    with pytest.raises(ValueError):
        RstClipInputs(channel_spacings_in=[16.0, 0.0])
    with pytest.raises(ValueError):
        RstClipInputs(cloud_4x2_count=-1)
    with pytest.raises(ValueError):
        RstClipInputs(unknown_field=1)


# ---- Calc trace


def test_input_hash_deterministic() -> None:
    a = {"b": 2.0, "a": [12.0, 16.0]}
    b = {"a": [12.0, 16.0], "b": 2.0}
    assert compute_input_hash(a) == compute_input_hash(b)
    assert compute_input_hash(a) != compute_input_hash({"a": [12.0, 24.0], "b": 2.0})


def test_trace_records_governing_steps() -> None:
    model = RstClipInputs(mount_mode=MountMode.DEDICATED, cloud_4x4_count=2)
    inputs = model.model_dump(mode="json")
    trace = CalcTrace.new(tool_id="rst_clip_spacing", tool_version="test", inputs=inputs, defaults=RstClipInputs().model_dump(mode="json"))
    result = evaluate(model)
    trace_evaluation(trace, model, result)

    ids = [s.id for s in trace.steps]
    assert ids[:4] == ["L1", "L2", "L3", "L4"]
    assert {"S1", "S2", "C1", "D1", "D4"} <= set(ids)
    assert trace.step("S2").checks[0].pass_fail == "PASS"
    assert trace.step("C1").value == result.fastening.grid_clips
    assert len(trace.tables["combos"]) == 12
    assert sum(1 for r in trace.tables["combos"] if r["recommended"]) == 1
    assert trace.tables["fastening"]["dedicated_clips"] == 8

    sources = {i.id: i.source for i in trace.inputs}
    assert sources["cloud_4x4_count"] == "user"
    assert sources["area_ft2"] == "default"
