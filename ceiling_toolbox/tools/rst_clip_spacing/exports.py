from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from .calc_trace import CalcTrace, dump_trace_json, json_safe
from .report_renderer import render_report_html

COMBO_COLUMNS = ("channel_in", "clip_in", "spacing_product_in2", "trib_area_ft2", "load_per_clip_lb", "passes", "safety_factor", "recommended")


def _autosize(ws) -> None:
    for col in ws.columns:
        col_letter = get_column_letter(col[0].column)
        max_len = max((len("" if cell.value is None else str(cell.value)) for cell in col), default=0)
        ws.column_dimensions[col_letter].width = min(80, max(10, max_len + 2))


def export_html(trace: CalcTrace, out_dir: Path) -> Path:
    p = out_dir / "report.html"
    p.write_text(render_report_html(trace), encoding="utf-8")
    return p


def export_pdf(trace: CalcTrace, out_dir: Path) -> Path:
    """
    One-page summary PDF: recommendation, clip counts, hash/version. Full detail is in report.html.
    """
    p = out_dir / "report.pdf"
    summary = json_safe(trace.summary)
    c = canvas.Canvas(str(p), pagesize=letter)
    w, h = letter
    y = h - 72
    c.setFont("Helvetica-Bold", 14)
    c.drawString(72, y, "RST Clip Spacing - Calculation Package (Summary)")
    y -= 24
    c.setFont("Helvetica", 10)
    c.drawString(72, y, f"Tool: {trace.meta.tool_id} v{trace.meta.tool_version}")
    y -= 14
    c.drawString(72, y, f"Input hash: {trace.meta.input_hash}")
    y -= 14
    c.drawString(72, y, f"Generated: {trace.meta.timestamp}")
    y -= 22
    c.setFont("Helvetica-Bold", 10)
    c.drawString(72, y, "Key outputs:")
    y -= 14
    c.setFont("Helvetica", 9)
    for k, v in summary.items():
        if y < 72:
            c.showPage()
            y = h - 72
            c.setFont("Helvetica", 9)
        c.drawString(84, y, f"{k}: {'-' if v is None else v}")
        y -= 12
    y -= 10
    c.setFont("Helvetica", 8)
    c.drawString(72, max(y, 48), "Uniform grid loads; capacity 36 lb/clip. Verify with manufacturer data and structure.")
    c.showPage()
    c.save()
    return p


def export_json(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    p1 = out_dir / "calc_trace.json"
    dump_trace_json(trace, p1)

    p2 = out_dir / "results.json"
    p2.write_text(json.dumps(json_safe(results), indent=2, ensure_ascii=True), encoding="utf-8")
    return {"calc_trace": p1, "results": p2}


def export_combos_csv(trace: CalcTrace, out_dir: Path) -> Path:
    p = out_dir / "combos.csv"
    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(COMBO_COLUMNS)
        for row in json_safe(trace.tables.get("combos", [])):
            w.writerow(["-" if row.get(k) is None else row.get(k) for k in COMBO_COLUMNS])
    return p


def export_excel(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Path:
    data = trace.to_dict()
    wb = Workbook()

    ws = wb.active
    ws.title = "Inputs"
    ws.append(["id", "label", "value", "units", "source"])
    for i in data["inputs"]:
        v = i["value"]
        ws.append([i["id"], i["label"], json.dumps(v) if isinstance(v, list) else v, i["units"], i["source"]])
    _autosize(ws)

    ws2 = wb.create_sheet("Assumptions")
    ws2.append(["id", "text"])
    for a in data["assumptions"]:
        ws2.append([a["id"], a["text"]])
    _autosize(ws2)

    ws3 = wb.create_sheet("Calcs")
    ws3.append(["id", "section", "title", "equation", "substitution", "result", "units", "checks"])
    for s in data["steps"]:
        checks = "; ".join(f"{c['label']}: {c['pass_fail']}" for c in s["checks"])
        ws3.append([s["id"], s["section"], s["title"], s["equation"], s["substitution"], s["value_rounded"], s["units"], checks])
    _autosize(ws3)

    ws4 = wb.create_sheet("Combos")
    ws4.append(list(COMBO_COLUMNS))
    for row in data["tables"].get("combos", []):
        ws4.append(["-" if row.get(k) is None else row.get(k) for k in COMBO_COLUMNS])
    _autosize(ws4)

    ws5 = wb.create_sheet("Results")
    ws5.append(["key", "value"])
    for k, v in json_safe(results).items():
        ws5.append([k, json.dumps(v, ensure_ascii=False) if isinstance(v, (dict, list)) else v])
    _autosize(ws5)

    p = out_dir / "results.xlsx"
    wb.save(p)
    return p


def export_all(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    outputs: Dict[str, Path] = {}
    outputs["html"] = export_html(trace, out_dir)
    outputs["pdf"] = export_pdf(trace, out_dir)
    outputs.update(export_json(trace, out_dir, results))
    outputs["excel"] = export_excel(trace, out_dir, results)
    outputs["combos_csv"] = export_combos_csv(trace, out_dir)
    return outputs
