"""
Deterministic stand-in conditions for the quick check when live data is not requested.
"""

from __future__ import annotations

from ..risk import ClimateData


def city_hash(city: str) -> int:
    """
    Sum of the UTF-16 code units of the city name.

    Characters outside the Basic Multilingual Plane count as their surrogate pair.
    """
    encoded = city.encode("utf-16-le")
    return sum(int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2))


def mock_climate_for_city(city: str) -> ClimateData:
    """
    Derive plausible conditions from the city name.

    The same name always yields the same snapshot: 70-104 °F, 40-89 % humidity,
    UV 1-11, AQI 10-259 and 0-99 % rain probability.
    """
    value = city_hash(city)
    return ClimateData(
        temperature=70 + value % 35,
        humidity=40 + value % 50,
        uv_index=1 + value % 11,
        aqi=10 + value % 250,
        rain_probability=value % 100,
    )
