"""
Client for Open-Meteo current conditions, air quality and archive endpoints.

Responses are reduced to ClimateData snapshots and cached as small JSON files.
Failures never propagate: callers always get a snapshot, falling back to
fixed default conditions when the APIs cannot be reached.
"""

from __future__ import annotations

import json
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from ..risk import ClimateData
from ..util import (
    ensure_directory,
    format_request_exception,
    is_file_stale,
    read_json_file,
    safe_unlink,
    write_text_file,
    yesterday_of,
)

logger = logging.getLogger(__name__)

FORECAST_BASE_URL = "https://api.open-meteo.com/v1/forecast"
AIR_QUALITY_BASE_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"
ARCHIVE_BASE_URL = "https://archive-api.open-meteo.com/v1/archive"

CURRENT_WEATHER_FIELDS = "temperature_2m,relative_humidity_2m,rain,uv_index"
CURRENT_AIR_QUALITY_FIELDS = "us_aqi"
ARCHIVE_DAILY_FIELDS = "temperature_2m_max,relative_humidity_2m_mean,uv_index_max"

DEFAULT_CACHE_DIR = Path("stepsafe_data/cache/climate")
CURRENT_CACHE_TTL_MINUTES = 10
ARCHIVE_CACHE_TTL_MINUTES = 24 * 60
MAX_ATTEMPTS = 3
REQUEST_TIMEOUT_SECONDS = 20

# Returned when live conditions cannot be fetched.
DEFAULT_CURRENT_CONDITIONS = ClimateData(temperature=75, humidity=50, uv_index=5, aqi=50, rain_probability=10)
DEFAULT_YESTERDAY_CONDITIONS = ClimateData(temperature=72, humidity=55, uv_index=4, aqi=70, rain_probability=0)
# The archive has no air quality and no rain probability.
YESTERDAY_AQI = 70
YESTERDAY_RAIN_PROBABILITY = 0


@dataclass(frozen=True)
class ClimateRequest:
    """
    Parameters for a climate lookup.

    Attributes:
        latitude: Target latitude.
        longitude: Target longitude.
        cache_ttl_minutes: How long a cached snapshot stays valid; 0 disables caching.
        cache_dir: Directory holding cache files.
    """
    latitude: float
    longitude: float
    cache_ttl_minutes: int = CURRENT_CACHE_TTL_MINUTES
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR)


@dataclass
class ClimateResponse:
    """
    A climate snapshot and where it came from.

    Attributes:
        data: The snapshot.
        from_cache: True if served from the local cache.
        fallback: True if the defaults were used because fetching failed.
    """
    data: ClimateData
    from_cache: bool = False
    fallback: bool = False


def get_climate_data(
    latitude: float,
    longitude: float,
    *,
    cache_dir: Optional[Path] = None,
    cache_ttl_minutes: int = CURRENT_CACHE_TTL_MINUTES,
) -> ClimateData:
    """Return current conditions for a coordinate pair (defaults on failure)."""
    request = ClimateRequest(
        latitude=latitude,
        longitude=longitude,
        cache_ttl_minutes=cache_ttl_minutes,
        cache_dir=cache_dir or DEFAULT_CACHE_DIR,
    )
    return fetch_current_conditions(request).data


def get_yesterday_climate_data(
    latitude: float,
    longitude: float,
    *,
    today: Optional[date] = None,
    cache_dir: Optional[Path] = None,
) -> ClimateData:
    """Return yesterday's daily maxima for a coordinate pair (defaults on failure)."""
    request = ClimateRequest(
        latitude=latitude,
        longitude=longitude,
        cache_ttl_minutes=ARCHIVE_CACHE_TTL_MINUTES,
        cache_dir=cache_dir or DEFAULT_CACHE_DIR,
    )
    return fetch_yesterday_conditions(request, today=today).data


def fetch_current_conditions(request: ClimateRequest) -> ClimateResponse:
    """
    Fetch current weather and air quality in parallel and merge them.

    Temperature is requested in Fahrenheit. Rain probability is derived from the
    current rain amount: 100 when it is raining, otherwise 0.
    """
    cache_path = _cache_path(request, f"current_{_coordinate_key(request)}")
    cached = _load_cache(cache_path, request.cache_ttl_minutes)
    if cached is not None:
        logger.debug("Loaded climate cache %s", cache_path.name)
        return ClimateResponse(data=cached, from_cache=True)

    coords = {"latitude": request.latitude, "longitude": request.longitude}
    weather_params = {**coords, "current": CURRENT_WEATHER_FIELDS, "temperature_unit": "fahrenheit"}
    air_params = {**coords, "current": CURRENT_AIR_QUALITY_FIELDS}

    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            weather_future = pool.submit(_get_json, FORECAST_BASE_URL, weather_params, "weather")
            air_future = pool.submit(_get_json, AIR_QUALITY_BASE_URL, air_params, "air quality")
            weather = weather_future.result()
            air_quality = air_future.result()
        data = parse_current_conditions(weather, air_quality)
    except (RuntimeError, ValueError) as exc:
        logger.error("Failed to fetch real-time climate data: %s", exc)
        return ClimateResponse(data=DEFAULT_CURRENT_CONDITIONS, fallback=True)

    _write_cache(cache_path, data, request.cache_ttl_minutes)
    return ClimateResponse(data=data)


def fetch_yesterday_conditions(request: ClimateRequest, *, today: Optional[date] = None) -> ClimateResponse:
    """
    Fetch yesterday's daily maximum temperature, mean humidity and maximum UV.

    AQI and rain probability are not available from the archive and are set to
    fixed values.
    """
    day = yesterday_of(today or date.today()).isoformat()
    cache_path = _cache_path(request, f"archive_{day}_{_coordinate_key(request)}")
    cached = _load_cache(cache_path, request.cache_ttl_minutes)
    if cached is not None:
        logger.debug("Loaded archive cache %s", cache_path.name)
        return ClimateResponse(data=cached, from_cache=True)

    params = {
        "latitude": request.latitude,
        "longitude": request.longitude,
        "start_date": day,
        "end_date": day,
        "daily": ARCHIVE_DAILY_FIELDS,
        "temperature_unit": "fahrenheit",
    }
    try:
        data = parse_archive_day(_get_json(ARCHIVE_BASE_URL, params, "archive"))
    except (RuntimeError, ValueError) as exc:
        logger.error("Failed to fetch historical climate data: %s", exc)
        return ClimateResponse(data=DEFAULT_YESTERDAY_CONDITIONS, fallback=True)

    _write_cache(cache_path, data, request.cache_ttl_minutes)
    return ClimateResponse(data=data)


def parse_current_conditions(weather: Dict[str, Any], air_quality: Dict[str, Any]) -> ClimateData:
    """
    Build a ClimateData snapshot from the forecast and air-quality payloads.

    Temperature and humidity are required. UV, AQI and rain may be null
    (no air-quality coverage, for instance) and then read as 0.
    """
    current = _section(weather, "current", "weather")
    aqi_current = _section(air_quality, "current", "air quality")
    rain = _optional_number(current, "rain")
    return ClimateData(
        temperature=round_half_up(_number(current, "temperature_2m")),
        humidity=round_half_up(_number(current, "relative_humidity_2m")),
        uv_index=round_half_up(_optional_number(current, "uv_index")),
        aqi=round_half_up(_optional_number(aqi_current, "us_aqi")),
        rain_probability=100 if rain > 0 else 0,
    )


def parse_archive_day(payload: Dict[str, Any]) -> ClimateData:
    """Build a ClimateData snapshot from the first day of an archive payload."""
    daily = _section(payload, "daily", "archive")
    return ClimateData(
        temperature=round_half_up(_first(daily, "temperature_2m_max")),
        humidity=round_half_up(_first(daily, "relative_humidity_2m_mean")),
        uv_index=round_half_up(_first(daily, "uv_index_max", required=False)),
        aqi=YESTERDAY_AQI,
        rain_probability=YESTERDAY_RAIN_PROBABILITY,
    )


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching what the dashboard shows."""
    return int(math.floor(value + 0.5))


def _section(payload: Any, key: str, label: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"Open-Meteo {label} response must be a JSON object.")
    section = payload.get(key)
    if not isinstance(section, dict):
        raise ValueError(f"Open-Meteo {label} response missing '{key}' data.")
    return section


def _number(section: Dict[str, Any], key: str) -> float:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Open-Meteo value '{key}' missing or not numeric: {value!r}")
    return float(value)


def _optional_number(section: Dict[str, Any], key: str) -> float:
    """Like `_number`, but a null or missing value reads as 0."""
    value = section.get(key)
    if value is None:
        logger.warning("Open-Meteo value '%s' is null; using 0.", key)
        return 0.0
    return _number(section, key)


def _first(section: Dict[str, Any], key: str, *, required: bool = True) -> float:
    values = section.get(key)
    if not isinstance(values, list) or not values:
        if required:
            raise ValueError(f"Open-Meteo series '{key}' missing or empty.")
        values = [None]
    if required:
        return _number({key: values[0]}, key)
    return _optional_number({key: values[0]}, key)


def _get_json(url: str, params: Dict[str, Any], label: str) -> Dict[str, Any]:
    """GET with basic retries; raise RuntimeError after the last failed attempt."""
    last_error: Optional[str] = None
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            response = requests.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
            response.raise_for_status()
            data = response.json()
            logger.info("Fetched Open-Meteo %s (%s)", label, getattr(response, "url", url))
            return data
        except requests.RequestException as exc:
            last_error = f"HTTP error calling Open-Meteo {label}: {format_request_exception(exc)}"
        except ValueError as exc:
            last_error = f"Invalid JSON from Open-Meteo {label}: {exc}"
        logger.warning("%s (attempt %s/%s)", last_error, attempt, MAX_ATTEMPTS)
        if attempt < MAX_ATTEMPTS:
            time.sleep(2 ** (attempt - 1))
    raise RuntimeError(last_error or f"Failed to fetch Open-Meteo {label}.")


def _coordinate_key(request: ClimateRequest) -> str:
    lat_suffix = "N" if request.latitude >= 0 else "S"
    lon_suffix = "E" if request.longitude >= 0 else "W"
    return f"{abs(request.latitude):.4f}{lat_suffix}_{abs(request.longitude):.4f}{lon_suffix}"


def _cache_path(request: ClimateRequest, key: str) -> Path:
    return Path(request.cache_dir).expanduser().resolve() / f"{key}.json"


def _load_cache(path: Path, ttl_minutes: int) -> Optional[ClimateData]:
    if ttl_minutes <= 0 or is_file_stale(path, max_age_minutes=ttl_minutes):
        return None
    payload = read_json_file(path)
    if payload is None:
        return None
    try:
        return ClimateData(**{key: float(payload[key]) for key in ClimateData.__dataclass_fields__})
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Invalid climate cache %s (%s). Deleting.", path, exc)
        safe_unlink(path, base_dir=path.parent)
        return None


def _write_cache(path: Path, data: ClimateData, ttl_minutes: int) -> None:
    if ttl_minutes <= 0:
        return
    try:
        ensure_directory(path.parent)
        write_text_file(path, json.dumps(data.to_dict()))
    except OSError as exc:
        logger.warning("Failed to write climate cache %s (%s).", path, exc)


def cleanup_climate_cache(cache_dir: Path, max_age_hours: int = 48) -> int:
    """Delete cached snapshots older than the threshold and return how many were removed."""
    directory = Path(cache_dir).expanduser().resolve()
    if max_age_hours <= 0 or not directory.exists():
        return 0
    cutoff = time.time() - (max_age_hours * 3600)
    removed = 0
    for path in directory.glob("*.json"):
        try:
            if path.stat().st_mtime < cutoff and safe_unlink(path, base_dir=directory):
                removed += 1
        except OSError:
            continue
    return removed
