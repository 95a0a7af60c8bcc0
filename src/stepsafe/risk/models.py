"""
Value records for climate inputs and derived risks.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterator, Literal, Optional, Tuple

RiskLevel = Literal["Low", "Medium", "High", "Extreme"]
WindowLevel = Literal["Safer", "Unsafe"]
AgeGroup = Literal["Child", "Adult", "Elderly"]
ActivityLevel = Literal["Low", "Medium", "High"]

RISK_LEVELS: Tuple[RiskLevel, ...] = ("Low", "Medium", "High", "Extreme")


def risk_rank(level: RiskLevel) -> int:
    """Ordinal position of a level (Low=0 .. Extreme=3)."""
    return RISK_LEVELS.index(level)


def is_elevated(level: RiskLevel) -> bool:
    """True for High and Extreme."""
    return risk_rank(level) >= risk_rank("High")


@dataclass(frozen=True)
class ClimateData:
    """
    Snapshot of current conditions at a location.

    Attributes:
        temperature: Air temperature in degrees Fahrenheit.
        humidity: Relative humidity in percent.
        uv_index: UV index.
        aqi: US Air Quality Index.
        rain_probability: Chance of rain in percent.
    """
    temperature: float
    humidity: float
    uv_index: float
    aqi: float
    rain_probability: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class UserInput:
    """Details entered in the quick check wizard."""

    city: str
    age_group: Optional[AgeGroup] = None
    activity_level: Optional[ActivityLevel] = None


@dataclass(frozen=True)
class Risk:
    name: str
    level: RiskLevel
    explanation: str
    icon: str


@dataclass(frozen=True)
class RiskProfile:
    heat_risk: Risk
    uv_risk: Risk
    aqi_risk: Risk
    humidity_discomfort: Risk
    rain_exposure: Risk

    def __iter__(self) -> Iterator[Risk]:
        yield self.heat_risk
        yield self.uv_risk
        yield self.aqi_risk
        yield self.humidity_discomfort
        yield self.rain_exposure

    def levels(self) -> Dict[str, RiskLevel]:
        """Map of factor key to level, in the order used by prompts and reports."""
        return {
            "heat_risk": self.heat_risk.level,
            "uv_risk": self.uv_risk.level,
            "aqi_risk": self.aqi_risk.level,
            "humidity_discomfort": self.humidity_discomfort.level,
            "rain_exposure": self.rain_exposure.level,
        }


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    recommendation: str
    details: str
    icon: str


@dataclass(frozen=True)
class TimeWindow:
    period: str
    level: WindowLevel
    reason: str
