from __future__ import annotations

import html
from typing import Any, Dict, List

from ceiling_toolbox.blocks.capacity import fmt2

from .calc_trace import CalcTrace

CSS = """
@page { size: letter; margin: 0.6in; }
body { font-family: Arial, Helvetica, sans-serif; font-size: 10.5pt; color: #111; }
h1 { font-size: 16pt; margin: 0 0 6px 0; }
h2 { font-size: 12.5pt; margin: 16px 0 6px 0; border-bottom: 1px solid #ccc; padding-bottom: 2px; }
h3 { font-size: 11pt; margin: 12px 0 4px 0; }
.meta { font-size: 9pt; color: #333; }
.box { border: 1px solid #999; padding: 8px; margin: 6px 0; }
.rec { border: 1px solid #0a6; background: #ecfdf5; padding: 8px; margin: 6px 0; }
.none { border: 1px solid #b00; background: #fff1f2; padding: 8px; margin: 6px 0; color: #b00; }
.eq { font-family: "Courier New", monospace; background: #f7f7f7; padding: 6px; white-space: pre-wrap; }
table { border-collapse: collapse; width: 100%; margin: 6px 0 10px 0; }
th, td { border: 1px solid #bbb; padding: 4px 6px; vertical-align: top; }
th { background: #f1f1f1; text-align: left; }
tr.recommended td { background: #ecfdf5; }
.pass { color: #0a6; font-weight: bold; }
.fail { color: #b00; font-weight: bold; }
.note { font-size: 8.5pt; color: #555; }
"""


def _h(s: Any) -> str:
    return html.escape(str(s))


def _num(x: Any) -> str:
    # None stands in for +inf / NaN after json-safe conversion
    return "-" if x is None else fmt2(float(x))


def _status(passes: bool, safety: Any) -> str:
    if passes:
        return f"<span class='pass'>PASS x{_h(_num(safety))}</span>"
    return "<span class='fail'>FAIL</span>"


def _recommendation(summary: Dict[str, Any]) -> str:
    if not summary.get("solver_feasible"):
        return f"<div class='none'>{_h(summary.get('solver_message', ''))}</div>"
    return (
        "<div class='rec'>"
        "<div><b>Recommended spacing</b></div>"
        f"<div style='font-size:13pt;'>Channels: {summary['channel_spacing_in']:g}\" OC &middot; "
        f"Clips: {summary['clip_spacing_in']:g}\" OC</div>"
        f"<div>Load/clip: <b>{_num(summary['load_per_clip_lb'])} lb</b> &nbsp; "
        f"Safety factor: <b>x{_num(summary['safety_factor'])}</b></div>"
        "</div>"
    )


def _combos_table(rows: List[Dict[str, Any]]) -> str:
    if not rows:
        return "<div class='box'>No spacing combinations selected.</div>"
    parts = [
        "<table><tr><th>Channels (OC)</th><th>Clips (OC)</th><th>Trib. area</th>"
        "<th>Load/clip</th><th>Status</th></tr>"
    ]
    for r in rows:
        cls = " class='recommended'" if r.get("recommended") else ""
        parts.append(
            f"<tr{cls}><td>{r['channel_in']:g}\"</td><td>{r['clip_in']:g}\"</td>"
            f"<td>{_num(r['trib_area_ft2'])} ft^2</td><td>{_num(r['load_per_clip_lb'])} lb</td>"
            f"<td>{_status(r['passes'], r['safety_factor'])}</td></tr>"
        )
    parts.append("</table>")
    parts.append("<div class='note'>Sorted from widest to densest; the first PASS is recommended.</div>")
    return "".join(parts)


def _dedicated_table(rows: List[Dict[str, Any]]) -> str:
    parts = ["<table><tr><th>Type</th><th>Load/clip</th><th>Status</th></tr>"]
    for r in rows:
        parts.append(
            f"<tr><td>{_h(r['label'])}</td><td>{_num(r['per_clip_lb'])} lb</td>"
            f"<td>{_status(r['passes'], r['safety_factor'])}</td></tr>"
        )
    parts.append("</table>")
    return "".join(parts)


def render_report_html(trace: CalcTrace) -> str:
    # render from the json-safe view so +inf values arrive as None
    data = trace.to_dict()
    meta = data["meta"]
    summary = data["summary"]
    tables = data["tables"]

    out: List[str] = []
    out.append("<!doctype html><html><head><meta charset='utf-8'>")
    out.append(f"<title>RST Clip Spacing - {_h(meta['input_hash'])}</title>")
    out.append(f"<style>{CSS}</style></head><body>")

    out.append("<h1>RST Clip Spacing - Calculation Package</h1>")
    out.append(
        "<div class='meta'>"
        f"<div><b>Tool:</b> {_h(meta['tool_id'])} v{_h(meta['tool_version'])}</div>"
        f"<div><b>Report Version:</b> {_h(meta['report_version'])}</div>"
        f"<div><b>Timestamp:</b> {_h(meta['timestamp'])}</div>"
        f"<div><b>Units System:</b> {_h(meta['units_system'])}</div>"
        f"<div><b>Input Hash:</b> {_h(meta['input_hash'])}</div>"
        "</div>"
    )

    out.append("<h2>Recommendation</h2>")
    out.append(_recommendation(summary))
    fastening = tables.get("fastening", {})
    out.append(
        "<table>"
        f"<tr><th>Grid load</th><td>{_num(summary.get('grid_psf'))} psf</td>"
        f"<th>Clip capacity</th><td>{_num(summary.get('capacity_lb'))} lb</td></tr>"
        f"<tr><th>Estimated clips on grid</th><td>{_h(fastening.get('grid_clips', 0))}</td>"
        f"<th>+ Cloud clips</th><td>{_h(fastening.get('dedicated_clips', 0))}</td></tr>"
        f"<tr><th>Total estimated clips</th><td>{_h(fastening.get('total_clips', 0))}</td>"
        f"<th>Max spacing product</th><td>{_num(summary.get('max_spacing_product_in2'))} in^2</td></tr>"
        "</table>"
    )

    out.append("<h2>Inputs</h2>")
    out.append("<table><tr><th>ID</th><th>Label</th><th>Value</th><th>Units</th><th>Source</th></tr>")
    for i in data["inputs"]:
        out.append(
            f"<tr><td>{_h(i['id'])}</td><td>{_h(i['label'])}</td><td>{_h(i['value'])}</td>"
            f"<td>{_h(i['units'])}</td><td>{_h(i['source'])}</td></tr>"
        )
    out.append("</table>")

    out.append("<h2>Assumptions &amp; Limitations</h2>")
    if data["assumptions"]:
        out.append("<ul>")
        for a in data["assumptions"]:
            out.append(f"<li><b>{_h(a['id'])}</b>: {_h(a['text'])}</li>")
        out.append("</ul>")
    else:
        out.append("<div class='box'>None.</div>")

    out.append("<h2>Calculations</h2>")
    for s in data["steps"]:
        out.append(f"<h3>{_h(s['id'])} - {_h(s['title'])}</h3>")
        out.append("<div class='box'>")
        out.append(f"<div class='eq'>{_h(s['equation'])}\n{_h(s['substitution'])}</div>")
        if s["variables"]:
            out.append("<table><tr><th>Symbol</th><th>Description</th><th>Value</th><th>Units</th></tr>")
            for v in s["variables"]:
                out.append(
                    f"<tr><td>{_h(v['symbol'])}</td><td>{_h(v['description'])}</td>"
                    f"<td>{_h(v['value'])}</td><td>{_h(v['units'])}</td></tr>"
                )
            out.append("</table>")
        for c in s["checks"]:
            cls = "pass" if c["pass_fail"] == "PASS" else "fail"
            out.append(
                f"<div>{_h(c['label'])}: {_num(c['demand'])} / {_num(c['capacity'])} = {_num(c['ratio'])} "
                f"<span class='{cls}'>{_h(c['pass_fail'])}</span></div>"
            )
        out.append("</div>")

    out.append("<h2>All Evaluated Combos</h2>")
    out.append(_combos_table(tables.get("combos", [])))

    if tables.get("dedicated_checks"):
        out.append("<h2>Dedicated Cloud Clip Check (per clip)</h2>")
        out.append(_dedicated_table(tables["dedicated_checks"]))
        out.append("<div class='note'>Assumes 4 clips per cloud.</div>")

    out.append(
        "<div class='note'>Assumptions: uniform grid loads; capacity 36 lb/clip. "
        "Always verify with manufacturer data and structure.</div>"
    )
    out.append("</body></html>")
    return "".join(out)
