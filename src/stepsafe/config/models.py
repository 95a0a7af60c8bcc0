"""
Pydantic models for validating and hashing user profile configuration files.
"""

from __future__ import annotations

import hashlib
import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..util import slugify

logger = logging.getLogger(__name__)

HHMM_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

CommuteType = Literal["Walk", "Public Transport", "Bike", "Drive"]
YesNo = Literal["Yes", "No"]


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


class Location(BaseModel):
    """
    Where the user lives or works.

    Attributes:
        city: Free-text place name, used for geocoding and display.
        lat: Latitude; resolved by geocoding when omitted.
        lon: Longitude; resolved by geocoding when omitted.
        timezone: IANA timezone, filled in by geocoding when omitted.
    """
    model_config = ConfigDict(extra="forbid")

    city: str = Field(min_length=1)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    timezone: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        # 0/0 is what unfinished profile forms used to store.
        return bool(self.lat) and bool(self.lon)


class Routine(BaseModel):
    """Daily routine start times as HH:MM strings."""

    model_config = ConfigDict(extra="forbid")

    morning_commute_start: str = Field(default="08:00", pattern=HHMM_PATTERN)
    work_hours_start: str = Field(default="09:00", pattern=HHMM_PATTERN)
    evening_commute_start: str = Field(default="17:00", pattern=HHMM_PATTERN)

    @field_validator("morning_commute_start", "work_hours_start", "evening_commute_start")
    @classmethod
    def _zero_pad(cls, value: str) -> str:
        hour, minute = value.split(":", 1)
        return f"{int(hour):02d}:{minute}"


class Sensitivities(BaseModel):
    model_config = ConfigDict(extra="forbid")

    heat: Literal["Low", "Medium", "High"] = "Medium"
    aqi: YesNo = "No"

    @field_validator("aqi", mode="before")
    @classmethod
    def _coerce_legacy_aqi(cls, value: Any) -> Any:
        # Older profiles stored AQI sensitivity on the Low/Medium/High scale.
        if value in ("Medium", "High"):
            return "Yes"
        if value == "Low":
            return "No"
        if isinstance(value, bool):
            return "Yes" if value else "No"
        return value


class HealthProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    age_range: Optional[Literal["18-29", "30-49", "50-64", "65+"]] = None
    skin_type: Optional[Literal["Very Fair", "Fair", "Medium", "Olive", "Brown", "Black"]] = None
    respiratory_health: Optional[Literal["Good", "Moderate", "Sensitive"]] = None


class UserProfile(BaseModel):
    """
    A user's location, routine and sensitivities.

    Attributes:
        id: Stable identifier, defaulting to the slug of the city.
        location: Location record.
        routine: Start times for the day's phases.
        commute_type: How the user gets to work.
        sensitivities: Heat sensitivity and AQI sensitivity.
        health_profile: Optional age range, skin type and respiratory health.
    """
    model_config = ConfigDict(extra="forbid")

    id: str
    location: Location
    routine: Routine = Field(default_factory=Routine)
    commute_type: CommuteType = "Public Transport"
    sensitivities: Sensitivities = Field(default_factory=Sensitivities)
    health_profile: Optional[HealthProfile] = None

    @model_validator(mode="before")
    @classmethod
    def _default_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            location = data.get("location")
            city = location.get("city") if isinstance(location, dict) else getattr(location, "city", None)
            if city:
                data = {**data, "id": slugify(city)}
        return data

    @model_validator(mode="after")
    def _check_routine_order(self) -> "UserProfile":
        routine = self.routine
        if not (routine.morning_commute_start <= routine.work_hours_start <= routine.evening_commute_start):
            logger.warning(
                "Routine for profile '%s' is not in chronological order (%s, %s, %s).",
                self.id,
                routine.morning_commute_start,
                routine.work_hours_start,
                routine.evening_commute_start,
            )
        return self


class AppConfig(BaseModel):
    """
    Top-level configuration for StepSafe.

    Attributes:
        profiles: User profiles to produce daily reports for.
        output_root: Directory where HTML dashboards are written.
        data_dir: Directory for caches and the exposure history.
        llm: LLM model identifier (e.g., "gemini-2.5-flash", "gpt-4o-mini", "or:<model>").
        use_llm: When false, reports are generated without any LLM call.
        climate_cache_minutes: How long current conditions are reused per location.
    """
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    profiles: List[UserProfile] = Field(default_factory=list)
    output_root: Optional[Path] = None
    data_dir: Optional[Path] = None
    llm: Optional[str] = None
    use_llm: bool = True
    climate_cache_minutes: int = Field(default=10, ge=0)

    @property
    def hash(self) -> str:
        """
        Deterministic hash of the normalized config, used to detect changes.
        """
        payload = self.model_dump(mode="json", round_trip=True)
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(blob).hexdigest()

    def find_profile(self, profile_id: str) -> Optional[UserProfile]:
        wanted = profile_id.strip().lower()
        for profile in self.profiles:
            if profile.id.lower() == wanted:
                return profile
        return None


def load_config(path: Path | str) -> AppConfig:
    """
    Load and validate a TOML config file into an AppConfig instance.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        A validated AppConfig object.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    raw_data = _normalize_toml_schema(raw_data)

    try:
        config = AppConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    _warn_duplicate_ids(config)
    return config


def _normalize_toml_schema(data: Any) -> Dict[str, Any]:
    """
    Map TOML conveniences onto the internal config model.

    Accepts `[[profile]]` table arrays (singular) and inline `city`/`lat`/`lon`
    keys inside a profile as shorthand for its `location` table.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a TOML table/object.")
    if "profiles" in data:
        raise ConfigError("Use [[profile]] blocks (singular) instead of [[profiles]].")

    normalized = dict(data)
    profiles = _coerce_table_array(normalized.pop("profile", None), "profile")
    for profile in profiles:
        inline = _extract_inline_location(profile)
        if inline:
            if "location" in profile:
                raise ConfigError("Use either inline city/lat/lon keys or a [profile.location] table, not both.")
            profile["location"] = inline
    normalized["profiles"] = profiles
    return normalized


def _coerce_table_array(value: Any, label: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise ConfigError(f"Each [[{label}]] entry must be a table/object.")
        return value
    raise ConfigError(f"Invalid [{label}] block; expected a table or array of tables.")


_LOCATION_KEYS = ("city", "lat", "lon", "timezone")


def _extract_inline_location(payload: dict) -> Dict[str, Any]:
    location: Dict[str, Any] = {}
    for key in _LOCATION_KEYS:
        if key in payload:
            location[key] = payload.pop(key)
    return location


def _warn_duplicate_ids(config: AppConfig) -> None:
    seen: set[str] = set()
    for profile in config.profiles:
        key = profile.id.lower()
        if key in seen:
            logger.warning("Profile id '%s' is used more than once; later entries overwrite earlier reports.", profile.id)
        seen.add(key)
