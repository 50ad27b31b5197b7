"""Unit tests for weather equivalence (garden_xp/gamification/weather.py)"""
import pytest

from garden_xp.gamification.weather import are_equivalent, normalize_weather
from garden_xp.models.achievement import WeatherCategory


@pytest.mark.parametrize("raw,expected", [
    ("Clear", WeatherCategory.SUNNY),
    ("Clouds", WeatherCategory.CLOUDY),
    ("Rain", WeatherCategory.RAINY),
    ("Drizzle", WeatherCategory.RAINY),
    ("Mist", WeatherCategory.RAINY),
    ("Snow", WeatherCategory.SNOWY),
    ("Thunderstorm", WeatherCategory.THUNDERSTORM),
    ("  clouds ", WeatherCategory.CLOUDY),
    ("sunny", WeatherCategory.SUNNY),
])
def test_normalize_weather_known_labels(raw, expected):
    assert normalize_weather(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "Tornado"])
def test_normalize_weather_unknown(raw):
    assert normalize_weather(raw) is None


def test_clouds_equivalent_to_cloudy():
    assert are_equivalent("Clouds", "cloudy") is True
    assert are_equivalent("Clouds", WeatherCategory.CLOUDY) is True


def test_clear_not_equivalent_to_cloudy():
    assert are_equivalent("Clear", "cloudy") is False


def test_snow_is_its_own_category():
    """Snow no longer collapses into rainy"""
    assert are_equivalent("Snow", "snowy") is True
    assert are_equivalent("Snow", "rainy") is False


def test_unknown_values_never_equivalent():
    assert are_equivalent("", "cloudy") is False
    assert are_equivalent(None, "cloudy") is False
    assert are_equivalent("Clouds", "overcast") is False
    assert are_equivalent("Tornado", "Tornado") is False
