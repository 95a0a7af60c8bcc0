"""
Dashboard HTML generation utilities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import re
from pathlib import Path
from typing import List, Optional, Sequence

from ..report import DailyHealthReport, ExposureRecord, risk_description
from ..risk import ChecklistItem, ClimateData, RiskProfile, TimeWindow
from ..util import ensure_directory, write_text_file


@dataclass
class DashboardPage:
    destination: Path
    display_name: str
    issue_time: str
    climate: ClimateData
    report: DailyHealthReport
    risk_profile: RiskProfile
    checklist: Sequence[ChecklistItem] = field(default_factory=list)
    time_windows: Sequence[TimeWindow] = field(default_factory=list)
    history: Sequence[ExposureRecord] = field(default_factory=list)
    model_label: Optional[str] = None


def render_dashboard_page(page: DashboardPage) -> Path:
    """
    Render the supplied dashboard page to disk.
    """
    ensure_directory(page.destination.parent)

    display_name = _escape(page.display_name)
    summary = page.report.daily_summary
    score = summary.personal_health_risk_score

    body_parts = [
        f"<h1>StepSafe dashboard for {display_name}</h1>",
        f"<h3>Issued: {_escape(page.issue_time)}</h3>",
        f"""<div id="score-card" class="card">
  <div class="score score-{_escape(risk_description(score).lower())}">{score}</div>
  <div>
    <div class="score-label">Personal health risk: {_escape(risk_description(score))}</div>
    <p>{_escape(summary.quick_insight)}</p>
  </div>
</div>""",
        _render_conditions(page.climate, summary.what_changed.temp_change, summary.what_changed.aqi_change),
        "<h2>Risk profile</h2>",
        _render_risk_cards(page.risk_profile),
        "<h2>Safety advisory</h2>",
        f'<div id="advisory-content" class="card">{_markdown_to_html(page.report.safety_advisory.advisory)}</div>',
    ]

    if page.checklist:
        body_parts.append("<h2>Checklist</h2>")
        body_parts.append(_render_checklist(page.checklist))

    body_parts.append("<h2>Time windows</h2>")
    body_parts.append(_render_safe_windows(page.report, page.time_windows))

    if page.report.daily_guidance.phases:
        body_parts.append("<h2>Your day</h2>")
        body_parts.append(_render_phases(page.report))

    if page.history:
        body_parts.append("<h2>Recent history</h2>")
        body_parts.append(_render_history(page.history))

    source_note = "synthetic estimate (no LLM)" if page.report.source == "synthetic" else "LLM-generated guidance"
    if page.model_label and page.report.source == "llm":
        source_note = f"{source_note} using {_escape(page.model_label)}"
    body_parts.extend(
        [
            '<p><a href="../index.html">Return to Menu</a></p>',
            f"""<div class="footer-note">
  Report produced by StepSafe ({source_note}).
  Data courtesy of <a href="https://open-meteo.com/" target="_blank" rel="noopener">open-meteo.com</a>.
  This guidance is informational and is not medical advice.
</div>""",
        ]
    )

    html_doc = f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <link rel="icon" href="../favicon.svg" type="image/svg+xml" sizes="any">
  <title>StepSafe dashboard for {display_name}</title>
  {_STYLE_BLOCK}
</head>
<body>
{chr(10).join(body_parts)}
</body>
</html>
"""
    write_text_file(page.destination, html_doc)
    return page.destination


def _escape(value: object) -> str:
    return html.escape(str(value), quote=True)


def _format_change(value: float, unit: str) -> str:
    if abs(value) < 0.05:
        return "no change"
    arrow = "▲" if value > 0 else "▼"
    return f"{arrow} {abs(value):.1f}{unit}"


def _render_conditions(climate: ClimateData, temp_change: float, aqi_change: float) -> str:
    rows = [
        ("Temperature", f"{climate.temperature:g}°F", _format_change(temp_change, "°F")),
        ("Humidity", f"{climate.humidity:g}%", ""),
        ("UV index", f"{climate.uv_index:g}", ""),
        ("AQI", f"{climate.aqi:g}", _format_change(aqi_change, "")),
        ("Rain probability", f"{climate.rain_probability:g}%", ""),
    ]
    cells = "\n".join(
        f"    <tr><th>{label}</th><td>{value}</td><td class=\"change\">{_escape(change)}</td></tr>"
        for label, value, change in rows
    )
    return f"""<table id="conditions">
  <thead><tr><th>Today</th><th>Value</th><th>Since yesterday</th></tr></thead>
  <tbody>
{cells}
  </tbody>
</table>"""


def _render_risk_cards(profile: RiskProfile) -> str:
    cards = "\n".join(
        f"""  <div class="risk-card level-{_escape(risk.level.lower())}" data-icon="{_escape(risk.icon)}">
    <div class="risk-name">{_escape(risk.name)}</div>
    <div class="risk-level">{_escape(risk.level)}</div>
    <p>{_escape(risk.explanation)}</p>
  </div>"""
        for risk in profile
    )
    return f'<div id="risk-cards">\n{cards}\n</div>'


def _render_checklist(items: Sequence[ChecklistItem]) -> str:
    entries = "\n".join(
        f'  <li data-icon="{_escape(item.icon)}"><strong>{_escape(item.recommendation)}</strong> {_escape(item.details)}</li>'
        for item in items
    )
    return f'<ul id="checklist" class="card">\n{entries}\n</ul>'


def _render_safe_windows(report: DailyHealthReport, windows: Sequence[TimeWindow]) -> str:
    rows: List[str] = []
    for window in report.daily_summary.safe_windows:
        label = "Safer" if window.is_safe else "Unsafe"
        rows.append(
            f'  <li class="window-{label.lower()}">{_escape(window.start)} - {_escape(window.end)}: {label}</li>'
        )
    for window in windows:
        rows.append(
            f'  <li class="window-{_escape(window.level.lower())}">{_escape(window.period)}: '
            f"{_escape(window.level)}. {_escape(window.reason)}</li>"
        )
    if not rows:
        return "<p>No time windows available.</p>"
    return '<ul id="time-windows" class="card">\n' + "\n".join(rows) + "\n</ul>"


def _render_phases(report: DailyHealthReport) -> str:
    sections: List[str] = []
    for phase in report.daily_guidance.phases:
        risks = phase.risks
        badges = " ".join(
            f'<span class="badge level-{_escape(level.lower())}">{label}: {_escape(level)}</span>'
            for label, level in (
                ("Heat", risks.heat_risk),
                ("UV", risks.uv_risk),
                ("AQI", risks.aqi_risk),
                ("Rain", risks.rain_exposure),
            )
        )
        recommendations = "\n".join(f"    <li>{_escape(item)}</li>" for item in phase.recommendations)
        sections.append(
            f"""<div class="phase card">
  <h3>{_escape(phase.phase)} ({_escape(phase.start_time)} - {_escape(phase.end_time)})</h3>
  <p>{badges}</p>
  <p>{_escape(phase.summary)}</p>
  <ul>
{recommendations}
  </ul>
</div>"""
        )
    return "\n".join(sections)


def _render_history(records: Sequence[ExposureRecord]) -> str:
    rows = "\n".join(
        f"    <tr><td>{_escape(record.date)}</td><td>{record.personal_health_risk_score}</td>"
        f"<td>{record.max_heat:g}°F</td><td>{record.max_aqi:g}</td><td>{record.max_uv:g}</td></tr>"
        for record in records
    )
    return f"""<table id="history">
  <thead><tr><th>Date</th><th>Score</th><th>Max heat</th><th>Max AQI</th><th>Max UV</th></tr></thead>
  <tbody>
{rows}
  </tbody>
</table>"""


def _markdown_to_html(text: str) -> str:
    bullet_regex = re.compile(r"^([*\-•])\s+(.*)")

    lines: List[str] = []
    in_list = False
    for line in html.escape(text or "", quote=True).splitlines():
        match = bullet_regex.match(line.strip())
        if match:
            if not in_list:
                lines.append("<ul>")
                in_list = True
            lines.append(f"<li>{match.group(2).strip()}</li>")
            continue
        if in_list:
            lines.append("</ul>")
            in_list = False
        lines.append(line)
    if in_list:
        lines.append("</ul>")

    html_output = "\n".join(lines)
    html_output = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", html_output)
    html_output = re.sub(r"\*(.+?)\*", r"<em>\1</em>", html_output)
    html_output = html_output.replace("\n", "<br>")
    html_output = re.sub(r"<br>(\s*<ul>)", r"\1", html_output)
    html_output = re.sub(r"(<ul>)<br>", r"\1", html_output)
    html_output = re.sub(r"</li><br><li>", r"</li><li>", html_output)
    html_output = re.sub(r"</li><br>(\s*</ul>)", r"</li>\1", html_output)
    html_output = re.sub(r"(</ul>)<br>", r"\1", html_output)
    return html_output.strip()


_STYLE_BLOCK = """<style>
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; background: #f8f9fa; color: #212529; margin: 1em auto; padding: 0 1em; max-width: 860px; line-height: 1.6; }
h1 { color: #343a40; border-bottom: 2px solid #dee2e6; padding-bottom: 0.5em; margin-top: 1em; margin-bottom: 1em; font-size: 1.8em; }
h2 { color: #343a40; margin-top: 1.5em; margin-bottom: 0.8em; font-size: 1.4em; }
h3 { color: #495057; font-size: 1.1em; font-weight: 600; margin-top: 0.8em; margin-bottom: 0.4em; }
.card { background: #ffffff; padding: 1.2em 1.6em; border: 1px solid #dee2e6; border-radius: 6px; box-shadow: 0 2px 4px rgba(0,0,0,0.05); margin-bottom: 1.2em; }
#score-card { display: flex; align-items: center; gap: 1.2em; }
.score { font-size: 2.4em; font-weight: 700; width: 2.4em; height: 2.4em; border-radius: 50%; display: flex; align-items: center; justify-content: center; color: #ffffff; flex-shrink: 0; }
.score-low { background: #198754; }
.score-moderate { background: #ffc107; color: #212529; }
.score-elevated { background: #fd7e14; }
.score-high { background: #dc3545; }
.score-label { font-weight: 600; }
table { width: 100%; border-collapse: collapse; background: #ffffff; margin-bottom: 1.2em; }
th, td { text-align: left; padding: 0.4em 0.8em; border-bottom: 1px solid #dee2e6; }
td.change { color: #6c757d; }
#risk-cards { display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 1em; }
.risk-card { background: #ffffff; border: 1px solid #dee2e6; border-left-width: 6px; border-radius: 6px; padding: 0.8em 1em; }
.risk-name { font-weight: 600; }
.risk-level { font-size: 0.9em; text-transform: uppercase; letter-spacing: 0.05em; }
.level-low { border-left-color: #198754; }
.level-medium { border-left-color: #ffc107; }
.level-high { border-left-color: #fd7e14; }
.level-extreme { border-left-color: #dc3545; }
.badge { display: inline-block; padding: 0.1em 0.6em; border-radius: 4px; background: #e9ecef; font-size: 0.85em; margin-right: 0.3em; }
.badge.level-high, .badge.level-extreme { background: #f8d7da; }
.window-unsafe { color: #dc3545; }
.window-safer { color: #198754; }
a { color: #0d6efd; text-decoration: none; font-weight: 500; }
a:hover { text-decoration: underline; color: #0a58ca; }
.footer-note { margin-top: 2.5em; padding-top: 1em; border-top: 1px solid #dee2e6; font-size: 0.9em; color: #6c757d; text-align: center; }
.footer-note a { font-weight: normal; }
@media (max-width: 600px) { body { margin: 0.5em; padding: 0 0.8em; } h1 { font-size: 1.5em; } .card { padding: 1em 1.2em; } h2 { font-size: 1.2em;} }
</style>"""
