from __future__ import annotations

import traceback
from typing import Any, Dict

from ceiling_toolbox.core.tool_base import ToolMeta

from .calc_trace import Assumption, CalcTrace, compute_input_hash, json_safe
from .constants import DEFAULT_UNITS_SYSTEM
from .engine import SpacingResult, evaluate
from .evaluation import trace_evaluation
from .exports import export_all
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import RstClipInputs
from .paths import create_run_dir

ASSUMPTIONS = (
    Assumption(id="A1", text="Assembly, cloud and misc loads act as a uniform load over the clip grid."),
    Assumption(id="A2", text="Each clip carries the tributary area channel spacing x clip spacing; rated capacity 36 lb/clip."),
    Assumption(
        id="A3",
        text="Distributed clouds are smeared over the full ceiling area; dedicated clouds hang from 4 clips each and add no grid load.",
    ),
    Assumption(id="A4", text="Computed loads are not floored at zero; a negative net load passes the capacity check."),
)


def _summary(result: SpacingResult) -> Dict[str, Any]:
    rec = result.recommendation
    return json_safe({
        "solver_feasible": rec is not None,
        "solver_message": result.message,
        "channel_spacing_in": rec.channel_in if rec else None,
        "clip_spacing_in": rec.clip_in if rec else None,
        "trib_area_ft2": rec.trib_area_ft2 if rec else None,
        "load_per_clip_lb": rec.load_per_clip_lb if rec else None,
        "safety_factor": rec.safety_factor if rec else None,
        "base_assembly_psf": result.base_assembly_psf,
        "misc_psf": result.misc_psf,
        "cloud_weight_lb": result.cloud_weight_lb,
        "cloud_avg_psf": result.cloud_avg_psf,
        "grid_psf": result.grid_psf,
        "capacity_lb": result.capacity_lb,
        "max_area_per_clip_ft2": result.max_area_per_clip_ft2,
        "max_spacing_product_in2": result.max_spacing_product_in2,
        "grid_clips": result.fastening.grid_clips,
        "dedicated_clips": result.fastening.dedicated_clips,
        "total_clips": result.fastening.total_clips,
    })


class RstClipSpacingTool:
    """RST clip spacing calculator.

    - calculate(): pure pipeline, no files. Hosts call it on every input change.
    - run_batch(): calculation + full calc package (HTML/PDF/JSON/Excel/CSV) in a run directory.
    """

    meta = ToolMeta(
        id="rst_clip_spacing",
        name="RST Clip Spacing",
        category="Acoustic Ceilings",
        version="0.3.0",
        description="Widest furring channel / isolation clip spacing that keeps every clip under 36 lb, with clip counts and cloud checks.",
    )

    InputModel = RstClipInputs

    def default_inputs(self) -> Dict[str, Any]:
        return self.InputModel().model_dump(mode="json")

    def calculate(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        model = self.InputModel.model_validate(inputs)
        result = evaluate(model)
        out: Dict[str, Any] = {"ok": True}
        out.update(_summary(result))
        full = result.to_dict()
        out["combos"] = full["combos"]
        out["dedicated_checks"] = full["dedicated_checks"]
        return out

    # ------------------------------
    # Batch calculation API (headless)
    # ------------------------------
    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Run the calculation, write the calc package and return key results.

        Safe to execute in a background thread.
        """
        model = self.InputModel.model_validate(inputs)
        inputs_norm = model.model_dump(mode="json")
        input_hash = compute_input_hash(inputs_norm)
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, sink_id = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            log.info("Starting RST clip spacing batch run")
            log.info(f"Inputs (validated): {inputs_norm}")

            trace = CalcTrace.new(
                tool_id=self.meta.id,
                tool_version=self.meta.version,
                units_system=DEFAULT_UNITS_SYSTEM,
                basis="Uniform load / tributary area per clip vs rated clip capacity",
                inputs=inputs_norm,
                defaults=self.default_inputs(),
                input_hash=input_hash,
            )
            trace.assumptions.extend(ASSUMPTIONS)

            result = evaluate(model)
            trace_evaluation(trace, model, result)
            trace.summary = _summary(result)

            if result.recommendation is None:
                log.warning(result.message)
            else:
                log.info(f"Recommended: {result.message}; total clips {result.fastening.total_clips}")

            results: Dict[str, Any] = {"ok": True, "run_dir": str(run_dir), "input_hash": input_hash}
            results.update(trace.summary)

            out_paths = export_all(trace, run_dir, results)
            results["outputs"] = {k: str(v) for k, v in out_paths.items()}
            results["report_html"] = results["outputs"]["html"]

            log.info("Batch run complete")
            return results

        except Exception as e:
            log.exception("Batch run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(sink_id)

    def run(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Host entry point. There is no interactive window; always a batch run."""
        return self.run_batch(inputs)


TOOL = RstClipSpacingTool()
