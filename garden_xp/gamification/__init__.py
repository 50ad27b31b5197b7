"""
Gamification system for the garden app

This module implements the achievement and XP progression engine:
- Achievement catalog (daily, milestones, weather, social, collection)
- Progress calculation over the event ledger (count, unique, streak)
- Unlock + XP award coordination without duplicate awards
- XP awards and daily usage reward
"""

from garden_xp.gamification.catalog import AchievementCatalog, build_default_catalog
from garden_xp.gamification.weather import are_equivalent, normalize_weather
from garden_xp.gamification.progress import ProgressCalculator, calculate_streak
from garden_xp.gamification.achievement_engine import AchievementEngine
from garden_xp.gamification.xp_system import XPService, get_level_benefits

__all__ = [
    "AchievementCatalog",
    "build_default_catalog",
    "are_equivalent",
    "normalize_weather",
    "ProgressCalculator",
    "calculate_streak",
    "AchievementEngine",
    "XPService",
    "get_level_benefits",
]
