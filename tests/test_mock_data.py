from stepsafe.api import mock
from stepsafe.risk import analyze_risks


def test_mock_climate_is_deterministic_per_city() -> None:
    assert mock.mock_climate_for_city("Phoenix") == mock.mock_climate_for_city("Phoenix")
    assert mock.mock_climate_for_city("Phoenix") != mock.mock_climate_for_city("Seattle")


def test_mock_climate_values_follow_city_hash() -> None:
    assert mock.city_hash("Phoenix") == 731

    climate = mock.mock_climate_for_city("Phoenix")

    assert climate.temperature == 101
    assert climate.humidity == 71
    assert climate.uv_index == 6
    assert climate.aqi == 241
    assert climate.rain_probability == 31
    assert analyze_risks(climate).heat_risk.level == "Extreme"


def test_mock_climate_stays_in_range() -> None:
    for city in ("A", "Zanzibar", "São Paulo", "Reykjavík", "Los Angeles, CA"):
        climate = mock.mock_climate_for_city(city)
        assert 70 <= climate.temperature <= 104
        assert 40 <= climate.humidity <= 89
        assert 1 <= climate.uv_index <= 11
        assert 10 <= climate.aqi <= 259
        assert 0 <= climate.rain_probability <= 99


def test_city_hash_counts_surrogate_pairs() -> None:
    # U+1F600 is stored as 0xD83D 0xDE00
    assert mock.city_hash("\U0001F600") == 0xD83D + 0xDE00
    assert mock.city_hash("São Paulo") == sum(ord(char) for char in "São Paulo")
