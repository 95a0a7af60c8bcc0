"""
Threshold-based risk classification and the checklist/time windows derived from it.

Each climate factor is classified independently onto the Low/Medium/High/Extreme
scale. The tables below are ordered from the most to the least severe band; the
first matching band wins.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .models import (
    ChecklistItem,
    ClimateData,
    Risk,
    RiskLevel,
    RiskProfile,
    TimeWindow,
    UserInput,
    is_elevated,
)

logger = logging.getLogger(__name__)

# (predicate, level, explanation)
Band = Tuple[Callable[[float], bool], RiskLevel, str]

HEAT_BANDS: Sequence[Band] = (
    (lambda hi: hi >= 103, "Extreme", "Dangerous heat. Avoid outdoor activity."),
    (lambda hi: hi >= 90, "High", "High heat. Limit exertion and stay hydrated."),
    (lambda hi: hi >= 80, "Medium", "Warm conditions. Take breaks in the shade."),
)
HEAT_DEFAULT = "Pleasant conditions. Enjoy your time outdoors."

UV_BANDS: Sequence[Band] = (
    (lambda uv: uv >= 11, "Extreme", "Extreme risk of harm from unprotected sun exposure."),
    (lambda uv: uv >= 8, "Extreme", "Very high risk of harm from unprotected sun exposure."),
    (lambda uv: uv >= 6, "High", "High risk of harm from unprotected sun exposure."),
    (lambda uv: uv >= 3, "Medium", "Moderate risk of harm from unprotected sun exposure."),
)
UV_DEFAULT = "Low danger from the sun's UV rays for the average person."

AQI_BANDS: Sequence[Band] = (
    (lambda aqi: aqi > 200, "Extreme", "Health alert: everyone may experience more serious health effects."),
    (
        lambda aqi: aqi > 150,
        "High",
        "Everyone may begin to experience health effects; members of sensitive groups may experience more serious health effects.",
    ),
    (
        lambda aqi: aqi > 100,
        "High",
        "Members of sensitive groups may experience health effects. The general public is not likely to be affected.",
    ),
    (
        lambda aqi: aqi > 50,
        "Medium",
        "Air quality is acceptable; however, for some pollutants there may be a moderate health concern for a very small number of people.",
    ),
)
AQI_DEFAULT = "Air quality is considered satisfactory, and air pollution poses little or no risk."

HUMIDITY_BANDS: Sequence[Band] = (
    (lambda rh: rh > 70, "High", "High humidity can make it feel warmer and may cause discomfort."),
    (lambda rh: rh > 60, "Medium", "Humidity is noticeable and may feel slightly muggy."),
)
HUMIDITY_DEFAULT = "Comfortable humidity levels."

RAIN_BANDS: Sequence[Band] = (
    (lambda pop: pop > 70, "High", "High probability of rain. Pack an umbrella."),
    (lambda pop: pop > 40, "Medium", "Moderate chance of scattered showers."),
)
RAIN_DEFAULT = "Low chance of rain. Clear skies expected."


def heat_index(temperature_f: float, humidity: float) -> float:
    """
    Rothfusz regression for the NWS heat index, in degrees Fahrenheit.

    Applied across the whole input range; no low-temperature adjustment.
    """
    t = temperature_f
    rh = humidity
    return (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * rh
        - 0.22475541 * t * rh
        - 6.83783e-3 * t * t
        - 5.481717e-2 * rh * rh
        + 1.22874e-3 * t * t * rh
        + 8.5282e-4 * t * rh * rh
        - 1.99e-6 * t * t * rh * rh
    )


def _classify(value: float, bands: Sequence[Band], default: str) -> Tuple[RiskLevel, str]:
    for predicate, level, explanation in bands:
        if predicate(value):
            return level, explanation
    return "Low", default


def heat_risk(temperature_f: float, humidity: float) -> Risk:
    level, explanation = _classify(heat_index(temperature_f, humidity), HEAT_BANDS, HEAT_DEFAULT)
    return Risk(name="Heat Risk", level=level, explanation=explanation, icon="thermometer")


def uv_risk(uv_index: float) -> Risk:
    level, explanation = _classify(uv_index, UV_BANDS, UV_DEFAULT)
    return Risk(name="UV Risk", level=level, explanation=explanation, icon="sun")


def aqi_risk(aqi: float) -> Risk:
    level, explanation = _classify(aqi, AQI_BANDS, AQI_DEFAULT)
    return Risk(name="Air Quality (AQI)", level=level, explanation=explanation, icon="wind")


def humidity_discomfort(humidity: float) -> Risk:
    level, explanation = _classify(humidity, HUMIDITY_BANDS, HUMIDITY_DEFAULT)
    return Risk(name="Humidity Comfort", level=level, explanation=explanation, icon="droplets")


def rain_exposure(rain_probability: float) -> Risk:
    level, explanation = _classify(rain_probability, RAIN_BANDS, RAIN_DEFAULT)
    return Risk(name="Rain Exposure", level=level, explanation=explanation, icon="cloudy")


def analyze_risks(climate: ClimateData, user_input: Optional[UserInput] = None) -> RiskProfile:
    """
    Classify every factor of a climate snapshot.

    Args:
        climate: Current conditions.
        user_input: Wizard details. Accepted for call-site symmetry; the
            thresholds are the same for every user.

    Returns:
        The five-factor RiskProfile.
    """
    profile = RiskProfile(
        heat_risk=heat_risk(climate.temperature, climate.humidity),
        uv_risk=uv_risk(climate.uv_index),
        aqi_risk=aqi_risk(climate.aqi),
        humidity_discomfort=humidity_discomfort(climate.humidity),
        rain_exposure=rain_exposure(climate.rain_probability),
    )
    logger.debug("Risk levels for %s: %s", user_input.city if user_input else "input", profile.levels())
    return profile


def generate_checklist(profile: RiskProfile) -> List[ChecklistItem]:
    """
    Build the personal checklist: water, clothing, sunscreen, rain gear and mask.

    Water and clothing are always present; the others only when the matching
    factor is at least Medium (sunscreen, rain) or High (mask).
    """
    checklist: List[ChecklistItem] = []
    hot = is_elevated(profile.heat_risk.level)

    if hot:
        checklist.append(
            ChecklistItem("water", "Stay extra hydrated", "Drink at least 3-4 liters of water throughout the day.", "glass-water")
        )
        checklist.append(
            ChecklistItem("clothing", "Wear light, breathable clothing", "Choose loose-fitting, light-colored fabrics.", "shirt")
        )
    else:
        checklist.append(ChecklistItem("water", "Standard hydration", "Aim for 2 liters of water today.", "glass-water"))
        checklist.append(
            ChecklistItem(
                "clothing", "Dress for comfort", "Standard clothing is appropriate for today's temperature.", "shirt"
            )
        )

    if is_elevated(profile.uv_risk.level):
        checklist.append(
            ChecklistItem("sunscreen", "Apply SPF 30+ sunscreen", "Reapply every 2 hours, especially if sweating.", "sunscreen")
        )
    elif profile.uv_risk.level == "Medium":
        checklist.append(
            ChecklistItem("sunscreen", "Consider using sunscreen", "Sun protection is advisable, even on cloudy days.", "sunscreen")
        )

    if profile.rain_exposure.level == "High":
        checklist.append(ChecklistItem("rain", "Bring an umbrella or raincoat", "Rain is highly likely today.", "cloud-rain"))
    elif profile.rain_exposure.level == "Medium":
        checklist.append(ChecklistItem("rain", "Pack an umbrella", "There's a chance of scattered showers.", "umbrella"))

    if is_elevated(profile.aqi_risk.level):
        checklist.append(
            ChecklistItem(
                "mask", "Wear a high-quality mask (N95/KN95)", "Limit outdoor time due to poor air quality.", "mask"
            )
        )

    return checklist


def generate_time_windows(profile: RiskProfile) -> List[TimeWindow]:
    """
    Split the day into safer and unsafe periods for outdoor activity.

    Midday is unsafe whenever UV or heat is High or Extreme. Windows are sorted
    by their period label.
    """
    windows: List[TimeWindow] = []
    if is_elevated(profile.uv_risk.level) or is_elevated(profile.heat_risk.level):
        windows.append(TimeWindow("11:00 AM - 4:00 PM", "Unsafe", "Peak UV and heat levels. Best to stay indoors."))
        windows.append(TimeWindow("Before 11:00 AM", "Safer", "Cooler temperatures and lower UV exposure."))
        windows.append(TimeWindow("After 4:00 PM", "Safer", "Sun is less intense and temperatures start to drop."))
    else:
        windows.append(
            TimeWindow("All Day", "Safer", "Conditions are favorable for outdoor activities throughout the day.")
        )
    return sorted(windows, key=lambda window: window.period.casefold())
