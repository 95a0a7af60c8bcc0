"""
City-name geocoding via the Open-Meteo API, with an optional Google fallback.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import requests
from timezonefinder import TimezoneFinder

from ..config.settings import get_secrets
from ..util import file_lock, format_request_exception, read_json_file, safe_unlink, write_text_file

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
GOOGLE_GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/json"
DEFAULT_CACHE_PATH = Path("stepsafe_data/cache/geocode/search_cache.json")

_tz_finder: Optional[TimezoneFinder] = None


@dataclass
class GeocodeResult:
    """
    Resolved location data.

    Attributes:
        name: The formatted name of the location.
        latitude: Latitude coordinate.
        longitude: Longitude coordinate.
        timezone: Timezone identifier (e.g., "America/Los_Angeles").
        country_code: ISO 3166-1 alpha-2 country code.
    """
    name: str
    latitude: float
    longitude: float
    timezone: str
    country_code: Optional[str] = None


def geocode_name(name: str, *, language: str = "en", cache_path: Optional[Path] = None) -> Optional[GeocodeResult]:
    """
    Resolve a city name into coordinates.

    Tries the Open-Meteo Geocoding API first and falls back to Google Geocoding
    when GOOGLE_API_KEY is set. Successful lookups are cached on disk.

    Args:
        name: The place name to search for (e.g., "Phoenix, AZ").
        language: Preferred language for the results.
        cache_path: Override for the JSON cache file.

    Returns:
        A GeocodeResult if found, otherwise None.
    """
    path = Path(cache_path or DEFAULT_CACHE_PATH).expanduser().resolve()
    normalized = name.strip().lower()
    if not normalized:
        return None

    with file_lock(path):
        cached = _read_cache(path).get(normalized)
    if cached:
        logger.info("Geocode cache hit for '%s' (lat=%.4f, lon=%.4f)", name, cached["latitude"], cached["longitude"])
        return GeocodeResult(**cached)

    result = _open_meteo_geocode(name, language)
    if result is None:
        api_key = get_secrets().google_api_key
        if not api_key:
            logger.warning("GOOGLE_API_KEY not set; unable to fall back to Google geocoding for '%s'.", name)
            return None
        result = _google_geocode(name, api_key)
        if result is None:
            return None

    with file_lock(path):
        cache = _read_cache(path)
        cache[normalized] = asdict(result)
        try:
            write_text_file(path, json.dumps(cache, indent=2), lock=False)
        except OSError:
            logger.debug("Failed to update geocode cache %s", path)
    return result


def _open_meteo_geocode(name: str, language: str) -> Optional[GeocodeResult]:
    # "Phoenix, AZ" style names: Open-Meteo only matches the place itself.
    query = name.split(",", 1)[0].strip() or name
    params = {"name": query, "count": 1, "language": language, "format": "json"}
    try:
        resp = requests.get(GEOCODING_URL, params=params, timeout=20)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as exc:
        logger.warning("Open-Meteo geocoding failed for %s: %s", name, format_request_exception(exc))
        return None
    except ValueError as exc:
        logger.warning("Open-Meteo geocoding returned invalid JSON for %s: %s", name, exc)
        return None

    results = (payload.get("results") if isinstance(payload, dict) else None) or []
    if not results:
        logger.info("No Open-Meteo geocoding results for %s", name)
        return None
    entry = results[0]
    result = GeocodeResult(
        name=entry.get("name", name),
        latitude=float(entry["latitude"]),
        longitude=float(entry["longitude"]),
        timezone=entry.get("timezone") or "UTC",
        country_code=entry.get("country_code"),
    )
    logger.info("Geocode resolved via Open-Meteo for '%s' (lat=%.4f, lon=%.4f)", name, result.latitude, result.longitude)
    return result


def _google_geocode(address: str, api_key: str) -> Optional[GeocodeResult]:
    """Fallback to Google Geocoding when Open-Meteo has no result."""
    try:
        logger.info("Fallback geocoding '%s' via Google", address)
        response = requests.get(GOOGLE_GEOCODING_URL, params={"address": address, "key": api_key}, timeout=15)
        response.raise_for_status()
        data = response.json()
        if data.get("status") != "OK" or not data.get("results"):
            logger.warning("Google Geocoding returned %s for '%s'", data.get("status"), address)
            return None
        entry = data["results"][0]
        lat = float(entry["geometry"]["location"]["lat"])
        lon = float(entry["geometry"]["location"]["lng"])
        return GeocodeResult(
            name=entry.get("formatted_address", address),
            latitude=lat,
            longitude=lon,
            timezone=_timezone_at(lat, lon),
            country_code=_extract_country_code(entry),
        )
    except requests.RequestException as exc:
        logger.error("Google geocoding request failed for %s: %s", address, format_request_exception(exc))
        return None
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        logger.error("Unexpected Google geocoding failure for %s: %s", address, exc, exc_info=True)
        return None


def _timezone_at(lat: float, lon: float) -> str:
    global _tz_finder
    if _tz_finder is None:
        _tz_finder = TimezoneFinder()
    return _tz_finder.timezone_at(lat=lat, lng=lon) or "UTC"


def _extract_country_code(result_entry: dict) -> Optional[str]:
    for component in result_entry.get("address_components", []):
        if "country" in component.get("types", []):
            return component.get("short_name")
    return None


def _read_cache(path: Path) -> dict:
    data = read_json_file(path)
    if data is None:
        return {}
    if not isinstance(data, dict) or not all(_is_valid_cache_entry(value) for value in data.values()):
        logger.warning("Invalid geocode cache %s (schema mismatch). Deleting.", path)
        safe_unlink(path, base_dir=path.parent)
        return {}
    return data


def _is_valid_cache_entry(entry: object) -> bool:
    if not isinstance(entry, dict):
        return False
    if not {"name", "latitude", "longitude", "timezone"}.issubset(entry.keys()):
        return False
    if not isinstance(entry.get("name"), str) or not isinstance(entry.get("timezone"), str):
        return False
    if not isinstance(entry.get("latitude"), (int, float)) or not isinstance(entry.get("longitude"), (int, float)):
        return False
    country = entry.get("country_code")
    return country is None or isinstance(country, str)
