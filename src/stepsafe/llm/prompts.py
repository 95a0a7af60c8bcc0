"""
System prompt templates and user prompt builders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from ..config import UserProfile
from ..risk import ClimateData, RiskProfile

if TYPE_CHECKING:
    from ..report.models import LifePhaseWindow


SYSTEM_PROMPT_ADVISORY = """
You are a public health safety advisor. You will receive risk levels for different climate factors, and must summarize the overall risk and provide clear, professional, non-alarming advice to the user.

#OUTPUT
- Write one short advisory paragraph of 3-4 lines.
- Summarize the risks that matter and recommend precautions.
- Be professional, clear and reassuring.
- No greetings, no bullet points, no headings, no exclamation points.
"""

SYSTEM_PROMPT_DAILY_REPORT = """
You are StepSafe AI, a personal climate-health and human-security companion. Your goal is to provide a complete, personalized and easy-to-understand daily risk assessment in a single response.

Analyze the user's profile and today's climate data and return ONE JSON object with exactly these keys:

{
  "daily_summary": {
    "personal_health_risk_score": <integer 0-100>,
    "quick_insight": "<1-2 sentences>",
    "what_changed": {"temp_change": <number>, "aqi_change": <number>},
    "safe_windows": [{"start": "HH:MM", "end": "HH:MM", "is_safe": <true|false>}]
  },
  "safety_advisory": {"advisory": "<3-4 lines>"},
  "daily_guidance": {
    "phases": [
      {
        "phase": "<phase name>",
        "start_time": "HH:MM",
        "end_time": "HH:MM",
        "risks": {"heat_risk": "<level>", "uv_risk": "<level>", "aqi_risk": "<level>", "rain_exposure": "<level>"},
        "summary": "<1-2 sentences>",
        "recommendations": ["<2-4 items>"]
      }
    ]
  }
}

Levels are one of Low, Medium, High, Extreme.

#DAILY SUMMARY
- personal_health_risk_score is the MOST IMPORTANT output. 0 is a perfect day, 100 is extremely dangerous, around 50 is a moderately risky day.
- Base the score on the raw climate data (temperature, AQI and UV index are the primary drivers) and weight it heavily by the user's sensitivities. A user with High heat sensitivity or AQI sensitivity must get a clearly HIGHER score than a Low/No user under the same conditions.
- quick_insight is a human-friendly summary of the score, e.g. "Your personal health risk is moderate today, mainly due to high afternoon heat."
- what_changed must repeat the temp_change and aqi_change values given in the input.
- safe_windows: 3-4 contiguous windows covering the whole day starting at "00:00". Midday (e.g. 12:00-16:00) is usually unsafe when heat or UV is elevated. The final window must end at "23:59"; never use "24:00".

#SAFETY ADVISORY
- A concise, professional and reassuring paragraph (3-4 lines) summarizing the day's risks and the top precautions.

#DAILY GUIDANCE
- One entry per life phase given in the input, using the exact phase names and times.
- risks: use the overall risk levels provided.
- summary: the key points for THAT phase.
- recommendations: 2-4 actionable items tailored to the commute type. A Walk or Bike commuter needs different advice than a Drive commuter.

#STYLE
- Professional, calm and reassuring. No exclamation points.
- Return only the JSON object, without markdown fences or commentary.
"""


def build_advisory_user_prompt(profile: RiskProfile) -> str:
    """List the five risk levels for the advisory prompt."""
    return "\n".join(
        [
            "Here are the risk levels:",
            f"Heat Risk: {profile.heat_risk.level}",
            f"UV Risk: {profile.uv_risk.level}",
            f"AQI Risk: {profile.aqi_risk.level}",
            f"Humidity Discomfort: {profile.humidity_discomfort.level}",
            f"Rain Exposure: {profile.rain_exposure.level}",
            "",
            "Provide the advisory paragraph now.",
        ]
    )


def build_daily_report_user_prompt(
    user: UserProfile,
    today: ClimateData,
    *,
    temp_change: float,
    aqi_change: float,
    risk_profile: RiskProfile,
    phases: Iterable["LifePhaseWindow"],
) -> str:
    """
    Assemble the data block for the daily report prompt.
    """
    health = user.health_profile
    lines = [
        "**User Profile:**",
        f"- Location: {user.location.city}",
        f"- Heat Sensitivity: {user.sensitivities.heat}",
        f"- AQI Sensitive: {user.sensitivities.aqi}",
        f"- Commute Type: {user.commute_type}",
        f"- Morning Commute: {user.routine.morning_commute_start}",
        f"- Evening Commute: {user.routine.evening_commute_start}",
    ]
    if health is not None:
        lines.append(
            "- Health Profile: "
            f"Age {_or_unknown(health.age_range)}, "
            f"Skin Type {_or_unknown(health.skin_type)}, "
            f"Respiratory Health {_or_unknown(health.respiratory_health)}"
        )

    lines.extend(
        [
            "",
            "**Today's Climate:**",
            f"- Temperature: {_format_number(today.temperature)}°F",
            f"- Humidity: {_format_number(today.humidity)}%",
            f"- UV Index: {_format_number(today.uv_index)}",
            f"- AQI: {_format_number(today.aqi)}",
            f"- Rain Probability: {_format_number(today.rain_probability)}%",
            f"- Heat Risk: {risk_profile.heat_risk.level}",
            f"- UV Risk: {risk_profile.uv_risk.level}",
            f"- AQI Risk: {risk_profile.aqi_risk.level}",
            f"- Rain Exposure: {risk_profile.rain_exposure.level}",
            "",
            "**Changes from Yesterday:**",
            f"- temp_change: {_format_number(temp_change)}",
            f"- aqi_change: {_format_number(aqi_change)}",
            "",
            "**Life Phases for Today:**",
        ]
    )
    for window in phases:
        lines.append(f"- Phase: {window.phase}, Start: {window.start_time}, End: {window.end_time}")
    return "\n".join(lines)


def _or_unknown(value: Optional[str]) -> str:
    return value or "not provided"


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"
