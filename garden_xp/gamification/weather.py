"""
Weather Equivalence

Maps weather-provider vocabulary (OpenWeather "main" groups such as "Clear",
"Clouds", "Drizzle") onto the closed category set used by weather
achievements: sunny, cloudy, rainy, snowy, thunderstorm.
"""

from typing import Dict, Optional

from garden_xp.models.achievement import WeatherCategory

WEATHER_EQUIVALENTS: Dict[str, WeatherCategory] = {
    # Provider labels
    "clear": WeatherCategory.SUNNY,
    "clouds": WeatherCategory.CLOUDY,
    "rain": WeatherCategory.RAINY,
    "drizzle": WeatherCategory.RAINY,
    "mist": WeatherCategory.RAINY,
    "fog": WeatherCategory.RAINY,
    "haze": WeatherCategory.RAINY,
    "snow": WeatherCategory.SNOWY,
    "thunderstorm": WeatherCategory.THUNDERSTORM,
    # Already-normalized categories pass through
    "sunny": WeatherCategory.SUNNY,
    "cloudy": WeatherCategory.CLOUDY,
    "rainy": WeatherCategory.RAINY,
    "snowy": WeatherCategory.SNOWY,
}


def normalize_weather(raw_condition: Optional[str]) -> Optional[WeatherCategory]:
    """
    Resolve a raw weather label to its achievement category

    Args:
        raw_condition: Provider label, case-insensitive (e.g. "Clouds")

    Returns:
        WeatherCategory, or None for empty/unknown labels
    """
    if not raw_condition:
        return None
    return WEATHER_EQUIVALENTS.get(raw_condition.strip().lower())


def are_equivalent(raw_condition: Optional[str], achievement_category: Optional[str]) -> bool:
    """
    Check whether a raw weather label satisfies an achievement's weather category

    Unknown or empty values on either side are never equivalent.
    """
    raw = normalize_weather(raw_condition)
    return raw is not None and raw == normalize_weather(achievement_category)
