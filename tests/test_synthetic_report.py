from datetime import date

from stepsafe.config import UserProfile
from stepsafe.report import generate_synthetic_report, risk_description, seeded_random
from stepsafe.report.synthetic import daily_seed, risk_level_from_fraction


def test_seeded_random_is_repeatable_and_bounded() -> None:
    for seed in (0.5, 12.0, -86.19, 1000.25):
        value = seeded_random(seed)
        assert 0 <= value < 1
        assert value == seeded_random(seed)


def test_risk_description_thresholds() -> None:
    assert risk_description(76) == "High"
    assert risk_description(75) == "Elevated"
    assert risk_description(51) == "Elevated"
    assert risk_description(50) == "Moderate"
    assert risk_description(26) == "Moderate"
    assert risk_description(25) == "Low"


def test_risk_level_from_fraction() -> None:
    assert risk_level_from_fraction(0.81) == "Extreme"
    assert risk_level_from_fraction(0.8) == "High"
    assert risk_level_from_fraction(0.5) == "Medium"
    assert risk_level_from_fraction(0.4) == "Low"


def test_seed_uses_default_coordinates_when_missing() -> None:
    profile = UserProfile.model_validate({"location": {"city": "Nowhere"}})

    assert daily_seed(profile, date(2026, 3, 10)) == 10 + 2 + 34.05 + -118.24


def test_synthetic_report_is_deterministic_per_day(walker) -> None:
    day = date(2026, 7, 15)

    first = generate_synthetic_report(walker, day=day)
    second = generate_synthetic_report(walker, day=day)

    assert first == second
    assert first.source == "synthetic"
    assert 20 <= first.daily_summary.personal_health_risk_score <= 89
    assert -5 <= first.daily_summary.what_changed.temp_change < 5
    assert -20 <= first.daily_summary.what_changed.aqi_change < 20


def test_synthetic_report_follows_routine(walker) -> None:
    report = generate_synthetic_report(walker, day=date(2026, 7, 15))

    phases = report.daily_guidance.phases
    assert [phase.phase for phase in phases] == ["Morning Commute", "Work Hours", "Evening Commute"]
    assert (phases[0].start_time, phases[0].end_time) == ("07:30", "08:30")
    assert (phases[2].start_time, phases[2].end_time) == ("17:30", "18:00")
    assert "Consider a light mask if you are sensitive to air quality." in phases[0].recommendations

    windows = report.daily_summary.safe_windows
    assert windows[0].start == "00:00"
    assert windows[-1].end == "23:59"
    midday = windows[2]
    assert midday.is_safe == (report.daily_summary.personal_health_risk_score <= 50)


def test_driver_commute_gets_car_advice() -> None:
    profile = UserProfile.model_validate({"location": {"city": "Houston"}, "commute_type": "Drive"})

    report = generate_synthetic_report(profile, day=date(2026, 7, 15))

    assert "Ensure your car's air filter is clean." in report.daily_guidance.phases[0].recommendations
