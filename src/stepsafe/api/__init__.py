"""
External API clients used by StepSafe.
"""

from .open_meteo import (
    ClimateRequest,
    ClimateResponse,
    DEFAULT_CURRENT_CONDITIONS,
    DEFAULT_YESTERDAY_CONDITIONS,
    cleanup_climate_cache,
    fetch_current_conditions,
    fetch_yesterday_conditions,
    get_climate_data,
    get_yesterday_climate_data,
)
from .geocode import GeocodeResult, geocode_name
from .mock import mock_climate_for_city

__all__ = [
    "ClimateRequest",
    "ClimateResponse",
    "DEFAULT_CURRENT_CONDITIONS",
    "DEFAULT_YESTERDAY_CONDITIONS",
    "cleanup_climate_cache",
    "fetch_current_conditions",
    "fetch_yesterday_conditions",
    "get_climate_data",
    "get_yesterday_climate_data",
    "GeocodeResult",
    "geocode_name",
    "mock_climate_for_city",
]
