from datetime import date

from stepsafe.render import DashboardPage, render_dashboard_page
from stepsafe.render.html import _markdown_to_html
from stepsafe.report import ExposureRecord, generate_synthetic_report
from stepsafe.risk import ClimateData, analyze_risks, generate_checklist, generate_time_windows

CLIMATE = ClimateData(temperature=95, humidity=60, uv_index=9, aqi=120, rain_probability=20)


def test_dashboard_contains_every_section(tmp_path, walker) -> None:
    report = generate_synthetic_report(walker, day=date(2026, 7, 15))
    risk_profile = analyze_risks(CLIMATE)
    destination = tmp_path / "site" / "walker" / "index.html"

    render_dashboard_page(
        DashboardPage(
            destination=destination,
            display_name="Phoenix <AZ>",
            issue_time="2026-07-15 07:00 MST",
            climate=CLIMATE,
            report=report,
            risk_profile=risk_profile,
            checklist=generate_checklist(risk_profile),
            time_windows=generate_time_windows(risk_profile),
            history=[ExposureRecord(date="2026-07-14", personal_health_risk_score=33, max_heat=88, max_aqi=40, max_uv=6)],
        )
    )

    html = destination.read_text(encoding="utf-8")
    assert "Phoenix &lt;AZ&gt;" in html
    assert "Phoenix <AZ>" not in html
    assert f">{report.daily_summary.personal_health_risk_score}<" in html
    for risk in risk_profile:
        assert risk.name in html
    assert "Apply SPF 30+ sunscreen" in html
    assert "11:00 AM - 4:00 PM" in html
    assert "Morning Commute (07:30 - 08:30)" in html
    assert "2026-07-14" in html
    assert "synthetic estimate" in html
    assert '<a href="../index.html">Return to Menu</a>' in html


def test_markdown_to_html_lists_and_emphasis() -> None:
    converted = _markdown_to_html("**Heads up**\n- Drink water\n- Find shade")

    assert converted.startswith("<strong>Heads up</strong>")
    assert "<ul><li>Drink water</li><li>Find shade</li></ul>" in converted
