"""
Pydantic models for the daily health report and exposure records.

The report is produced either by the LLM (validated against these models) or
by the synthetic generator, so both paths share one schema.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

from ..config.models import HHMM_PATTERN
from ..risk import RiskLevel

ReportSource = Literal["llm", "synthetic"]


@dataclass(frozen=True)
class LifePhaseWindow:
    """A named segment of the user's routine."""

    phase: str
    start_time: str
    end_time: str


class SafeWindow(BaseModel):
    start: str = Field(pattern=HHMM_PATTERN)
    end: str = Field(pattern=HHMM_PATTERN)
    is_safe: bool

    @field_validator("start", "end", mode="before")
    @classmethod
    def _clamp_midnight(cls, value: object) -> object:
        if value == "24:00":
            return "23:59"
        return value


class WhatChanged(BaseModel):
    temp_change: float
    aqi_change: float


class DailySummary(BaseModel):
    personal_health_risk_score: int = Field(ge=0, le=100)
    quick_insight: str
    what_changed: WhatChanged
    safe_windows: List[SafeWindow] = Field(default_factory=list)

    @field_validator("personal_health_risk_score", mode="before")
    @classmethod
    def _round_score(cls, value: object) -> object:
        if isinstance(value, float):
            return int(round(value))
        return value


class SafetyAdvisory(BaseModel):
    advisory: str


class PhaseRisks(BaseModel):
    heat_risk: RiskLevel
    uv_risk: RiskLevel
    aqi_risk: RiskLevel
    rain_exposure: RiskLevel


class PhaseGuidance(BaseModel):
    phase: str
    start_time: str
    end_time: str
    risks: PhaseRisks
    summary: str
    recommendations: List[str] = Field(default_factory=list)


class DailyGuidance(BaseModel):
    phases: List[PhaseGuidance] = Field(default_factory=list)


class DailyHealthReport(BaseModel):
    """
    Everything the dashboard shows for one profile and one day.

    Attributes:
        daily_summary: Score, quick insight, change since yesterday and safe windows.
        safety_advisory: Short advisory paragraph.
        daily_guidance: Per-phase risks, summary and recommendations.
        source: "llm" when generated by a model, "synthetic" for the fallback.
    """
    daily_summary: DailySummary
    safety_advisory: SafetyAdvisory
    daily_guidance: DailyGuidance
    source: ReportSource = "llm"


class ExposureRecord(BaseModel):
    """One day of exposure history for a profile."""

    date: str
    personal_health_risk_score: int
    max_heat: float
    max_aqi: float
    max_uv: float
