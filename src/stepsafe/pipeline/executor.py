"""
Pipeline executor ties together API clients, report generation, history and rendering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from ..api import (
    ClimateRequest,
    cleanup_climate_cache,
    fetch_current_conditions,
    fetch_yesterday_conditions,
    geocode_name,
)
from ..api.open_meteo import ARCHIVE_CACHE_TTL_MINUTES
from ..config import AppConfig, UserProfile, resolve_data_dir
from ..history import record_exposure
from ..llm import LLMSettings, consume_last_cost_cents, resolve_llm_settings
from ..render import DashboardPage, render_dashboard_page
from ..report import DailyHealthReport, ExposureRecord, exposure_record, generate_daily_health_report
from ..risk import ClimateData, analyze_risks, generate_checklist, generate_time_windows
from ..util import get_local_now
from ..web import ScaffoldReport, generate_site_structure, profile_slug, resolve_web_root

logger = logging.getLogger(__name__)

HISTORY_DAYS_SHOWN = 7

_COST_TRACKER: Dict[str, float] = {}


def _reset_cost_tracker() -> None:
    _COST_TRACKER.clear()


def _record_cost(profile_id: str, cents: float) -> None:
    _COST_TRACKER[profile_id] = _COST_TRACKER.get(profile_id, 0.0) + cents


def _log_cost_summary() -> None:
    if not _COST_TRACKER:
        logger.info("LLM cost summary: no tracked costs this run.")
        return

    label_header = "Profile"
    label_width = max(len(label_header), max(len(label) for label in _COST_TRACKER), 24)
    header = f"{label_header:<{label_width}} {'Report':>12}"
    lines = [header, "-" * len(header)]
    for label in sorted(_COST_TRACKER):
        lines.append(f"{label:<{label_width}} {_COST_TRACKER[label]:>12.2f}")
    lines.append("-" * len(header))
    lines.append(f"{'TOTAL':<{label_width}} {sum(_COST_TRACKER.values()):>12.2f}")
    logger.info("LLM cost summary (USD cents):\n%s", "\n".join(lines))


@dataclass
class ProfilePayload:
    """
    Inputs gathered for one profile before the report is generated.

    Attributes:
        profile: The profile, with coordinates and timezone filled in.
        today: Current conditions.
        yesterday: Yesterday's conditions.
        timezone: IANA timezone used for the report date and issue time.
        used_fallback_data: True if either fetch fell back to default values.
    """
    profile: UserProfile
    today: ClimateData
    yesterday: ClimateData
    timezone: str
    used_fallback_data: bool = False


@dataclass
class ProfileResult:
    profile_id: str
    report: DailyHealthReport
    record: ExposureRecord
    destination: Optional[Path] = None
    used_fallback_data: bool = False


@dataclass
class PipelineResult:
    """
    Outcome of a full run.

    Attributes:
        results: One entry per profile that produced a report.
        skipped: Ids of profiles that could not be located.
        scaffold: Menu/placeholder changes (None on dry runs).
    """
    results: List[ProfileResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    scaffold: Optional[ScaffoldReport] = None


def execute_pipeline(
    config: AppConfig,
    *,
    use_llm: Optional[bool] = None,
    dry_run: bool = False,
    day: Optional[date] = None,
) -> PipelineResult:
    """
    Run the daily report pipeline for every configured profile.

    For each profile: geocode if needed, fetch today's and yesterday's conditions,
    generate the report (LLM or synthetic), append the exposure record and render
    the dashboard. Finally refresh the menu.

    Args:
        config: The loaded AppConfig.
        use_llm: Overrides `config.use_llm` when not None.
        dry_run: Generate reports without writing history or HTML.
        day: Report date; defaults to today in each profile's timezone.
    """
    result = PipelineResult()
    if not config.profiles:
        logger.info("No profiles configured; nothing to do.")
        return result

    _reset_cost_tracker()
    data_dir = resolve_data_dir(config.data_dir)
    llm_settings = _resolve_settings(config, use_llm)

    for profile in config.profiles:
        outcome = _process_profile(profile, config, data_dir, llm_settings, dry_run=dry_run, day=day)
        if outcome is None:
            result.skipped.append(profile.id)
        else:
            result.results.append(outcome)

    if not dry_run:
        scores = {item.profile_id: item.record.personal_health_risk_score for item in result.results}
        result.scaffold = generate_site_structure(config, scores=scores)
        removed = cleanup_climate_cache(data_dir / "cache" / "climate")
        if removed:
            logger.debug("Removed %d stale climate cache files", removed)

    if llm_settings is not None:
        _log_cost_summary()
    return result


def _resolve_settings(config: AppConfig, use_llm: Optional[bool]) -> Optional[LLMSettings]:
    enabled = config.use_llm if use_llm is None else use_llm
    if not enabled:
        logger.info("LLM disabled; reports will be synthetic.")
        return None
    try:
        settings = resolve_llm_settings(config)
    except RuntimeError as exc:
        logger.warning("LLM unavailable (%s); reports will be synthetic.", exc)
        return None
    logger.info("Using LLM %s (%s)", settings.model, settings.provider)
    return settings


def _process_profile(
    profile: UserProfile,
    config: AppConfig,
    data_dir: Path,
    llm_settings: Optional[LLMSettings],
    *,
    dry_run: bool,
    day: Optional[date],
) -> Optional[ProfileResult]:
    """Drive the fetch/report/history/render workflow for a single profile."""
    logger.info("Processing profile '%s' (%s)", profile.id, profile.location.city)
    payload = _collect_profile_payload(profile, config=config, data_dir=data_dir, day=day)
    if payload is None:
        return None

    local_now = get_local_now(payload.timezone)
    report_day = day or local_now.date()
    report = generate_daily_health_report(
        payload.profile,
        payload.today,
        payload.yesterday,
        settings=llm_settings,
        day=report_day,
    )
    if llm_settings is not None:
        _record_cost(profile.id, consume_last_cost_cents())

    record = exposure_record(report, payload.today, report_day)
    outcome = ProfileResult(
        profile_id=profile.id,
        report=report,
        record=record,
        used_fallback_data=payload.used_fallback_data,
    )
    if dry_run:
        logger.info("Dry run: skipping history and dashboard for '%s'", profile.id)
        return outcome

    try:
        history = record_exposure(data_dir, profile.id, record)
    except OSError as exc:
        logger.error("Exposure history for '%s' not updated: %s", profile.id, exc)
        history = [record]
    risk_profile = analyze_risks(payload.today)
    destination = _build_destination_path(config, profile)
    render_dashboard_page(
        DashboardPage(
            destination=destination,
            display_name=payload.profile.location.city,
            issue_time=local_now.strftime("%Y-%m-%d %H:%M %Z"),
            climate=payload.today,
            report=report,
            risk_profile=risk_profile,
            checklist=generate_checklist(risk_profile),
            time_windows=generate_time_windows(risk_profile),
            history=history[-HISTORY_DAYS_SHOWN:],
            model_label=llm_settings.model if llm_settings is not None else None,
        )
    )
    logger.info("Rendered dashboard for '%s' → %s", profile.id, destination)
    outcome.destination = destination
    return outcome


def _collect_profile_payload(
    profile: UserProfile,
    *,
    config: AppConfig,
    data_dir: Path,
    day: Optional[date] = None,
) -> Optional[ProfilePayload]:
    """Resolve coordinates and gather today's and yesterday's conditions."""
    location = profile.location
    timezone_name = location.timezone
    if not location.has_coordinates:
        logger.info("Geocoding '%s'", location.city)
        geocode = geocode_name(location.city, cache_path=data_dir / "cache" / "geocode" / "search_cache.json")
        if not geocode:
            logger.warning("Unable to geocode '%s'; skipping profile '%s'.", location.city, profile.id)
            return None
        location = location.model_copy(
            update={
                "lat": geocode.latitude,
                "lon": geocode.longitude,
                "timezone": timezone_name or geocode.timezone,
            }
        )
        profile = profile.model_copy(update={"location": location})
        timezone_name = location.timezone

    cache_dir = data_dir / "cache" / "climate"
    logger.info("Fetching climate data for '%s' (%.4f, %.4f)", location.city, location.lat, location.lon)
    today = fetch_current_conditions(
        ClimateRequest(
            latitude=location.lat,
            longitude=location.lon,
            cache_ttl_minutes=config.climate_cache_minutes,
            cache_dir=cache_dir,
        )
    )
    report_day = day or get_local_now(timezone_name).date()
    yesterday = fetch_yesterday_conditions(
        ClimateRequest(
            latitude=location.lat,
            longitude=location.lon,
            cache_ttl_minutes=ARCHIVE_CACHE_TTL_MINUTES,
            cache_dir=cache_dir,
        ),
        today=report_day,
    )
    if today.fallback or yesterday.fallback:
        logger.warning("Using default climate values for '%s'", profile.id)

    return ProfilePayload(
        profile=profile,
        today=today.data,
        yesterday=yesterday.data,
        timezone=timezone_name or "UTC",
        used_fallback_data=today.fallback or yesterday.fallback,
    )


def _build_destination_path(config: AppConfig, profile: UserProfile) -> Path:
    """Resolve the filesystem path for a profile's rendered dashboard."""
    return resolve_web_root(config) / profile_slug(profile) / "index.html"
