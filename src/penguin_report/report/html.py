from __future__ import annotations

import base64
import html
from pathlib import Path

import pandas as pd

from ..aggregate import summary_frame
from .markdown import (
    DIAGNOSTIC_PLOTS,
    DISTRIBUTION_PLOTS,
    PLOT_CAPTIONS,
    REPORT_TITLE,
    ReportInputs,
    format_cell,
    anova_table,
    coefficient_table,
    data_paragraph,
    groups_paragraph,
    means_paragraph,
    model_paragraph,
    species_means_table,
)

_STYLE = (
    "<style>"
    "body{font-family:system-ui,Segoe UI,Arial,sans-serif;margin:24px;line-height:1.35;max-width:1000px;}"
    "h1,h2,h3{margin:0.6em 0 0.2em 0;}"
    "table{border-collapse:collapse;margin:12px 0;}"
    "th,td{border:1px solid #ddd;padding:6px 8px;font-size:13px;vertical-align:top;}"
    "th{background:#f6f8fa;text-align:left;}"
    "td.num{text-align:right;font-variant-numeric:tabular-nums;}"
    ".note{background:#fff6d6;border:1px solid #f3d27a;padding:10px 12px;border-radius:8px;}"
    ".img{max-width:100%;height:auto;border:1px solid #eee;border-radius:6px;}"
    "</style>"
)


def _dataframe_table(df: pd.DataFrame, *, digits: int = 2) -> str:
    buf: list[str] = []
    buf.append("<table><thead><tr>")
    for c in df.columns:
        buf.append(f"<th>{html.escape(str(c))}</th>")
    buf.append("</tr></thead><tbody>")
    for row in df.itertuples(index=False):
        buf.append("<tr>")
        for v in row:
            cls = " class='num'" if isinstance(v, (int, float)) else ""
            buf.append(f"<td{cls}>{html.escape(format_cell(v, digits))}</td>")
        buf.append("</tr>")
    buf.append("</tbody></table>")
    return "".join(buf)


def _img_tag(path: Path, caption: str) -> str:
    b64 = base64.b64encode(path.read_bytes()).decode("ascii")
    return (
        f"<figure><img class='img' alt='{html.escape(caption)}' src='data:image/png;base64,{b64}' />"
        f"<figcaption>{html.escape(caption)}</figcaption></figure>"
    )


def _para(text: str) -> str:
    return f"<p>{html.escape(text)}</p>" if text else ""


def build_report_html(inputs: ReportInputs) -> str:
    """Single-file HTML rendering of the report; plots are embedded as base64 PNGs."""
    parts: list[str] = []
    parts.append("<!doctype html>")
    parts.append("<html><head><meta charset='utf-8'>")
    parts.append(f"<title>{html.escape(REPORT_TITLE)}</title>")
    parts.append(_STYLE)
    parts.append("</head><body>")
    parts.append(f"<h1>{html.escape(REPORT_TITLE)}</h1>")
    if inputs.run_id:
        parts.append(f"<p><i>Run {html.escape(inputs.run_id)}</i></p>")

    parts.append("<h2>Data</h2>")
    parts.append(_para(data_paragraph(inputs)))

    parts.append("<h2>Group Means</h2>")
    parts.append(_para(groups_paragraph(inputs)))
    parts.append(_dataframe_table(summary_frame(inputs.summaries), digits=1))

    distribution = inputs.available_plots(DISTRIBUTION_PLOTS)
    if distribution:
        parts.append("<h2>Distributions</h2>")
        for name in distribution:
            parts.append(_img_tag(inputs.plots_dir / name, PLOT_CAPTIONS[name]))

    parts.append("<h2>Linear Model</h2>")
    parts.append(_para(model_paragraph(inputs)))
    parts.append("<h3>Null model: body_mass_g ~ 1</h3>")
    parts.append(_dataframe_table(coefficient_table(inputs.null_fit)))
    parts.append("<h3>Species model: body_mass_g ~ species</h3>")
    parts.append(_dataframe_table(coefficient_table(inputs.full_fit)))
    parts.append("<h3>Model comparison</h3>")
    parts.append(_dataframe_table(anova_table(inputs.comparison)))
    parts.append("<h3>Species means</h3>")
    parts.append(_para(means_paragraph(inputs)))
    parts.append(_dataframe_table(species_means_table(inputs), digits=1))

    diagnostics = inputs.available_plots(DIAGNOSTIC_PLOTS)
    if diagnostics:
        parts.append("<h2>Diagnostics</h2>")
        for name in diagnostics:
            parts.append(_img_tag(inputs.plots_dir / name, PLOT_CAPTIONS[name]))

    if inputs.warnings:
        parts.append("<h2>Warnings</h2>")
        parts.append("<div class='note'><ul>")
        parts.extend(f"<li>{html.escape(w)}</li>" for w in inputs.warnings)
        parts.append("</ul></div>")

    parts.append("</body></html>")
    return "\n".join(parts)


def write_report_html(inputs: ReportInputs, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(build_report_html(inputs), encoding="utf-8")
    return output_path
