"""
Achievement Catalog

Immutable registry of achievement definitions. A catalog is built once at
startup (see ServiceContainer) and passed to whatever needs it; tests build
their own catalogs from hand-picked definitions.

Categories:
- daily: consecutive-day usage
- milestones: planting / harvesting totals
- collection: distinct plant types
- social: planting in friends' gardens
- weather: planting under a given weather category
"""

from types import MappingProxyType
from typing import Iterable, Iterator, List, Optional
import logging

from garden_xp.exceptions import CatalogError
from garden_xp.models.achievement import (
    Achievement,
    AchievementCategory,
    CountRequirement,
    FriendGardenConditions,
    StreakRequirement,
    UniquePlantConditions,
    UniqueRequirement,
    WeatherCategory,
    WeatherConditions,
)

logger = logging.getLogger(__name__)

# Action types recorded in the event ledger
PLANT_SEED = "plant_seed"
HARVEST_PLANT = "harvest_plant"
DAILY_USE = "daily_use"
SOCIAL_PLANTING = "social_planting"
ACHIEVEMENT_UNLOCK = "achievement_unlock"


class AchievementCatalog:
    """Read-only, ordered collection of achievements keyed by id"""

    def __init__(self, achievements: Iterable[Achievement]):
        ordered = tuple(achievements)
        index = {}
        for achievement in ordered:
            if achievement.id in index:
                raise CatalogError(
                    f"Duplicate achievement id: {achievement.id}",
                    achievement_id=achievement.id,
                )
            index[achievement.id] = achievement

        self._achievements = ordered
        self._by_id = MappingProxyType(index)
        logger.debug(f"Achievement catalog built with {len(ordered)} achievements")

    def __len__(self) -> int:
        return len(self._achievements)

    def __iter__(self) -> Iterator[Achievement]:
        return iter(self._achievements)

    def __contains__(self, achievement_id: object) -> bool:
        return achievement_id in self._by_id

    def get(self, achievement_id: str) -> Optional[Achievement]:
        return self._by_id.get(achievement_id)

    def require(self, achievement_id: str) -> Achievement:
        """Get an achievement, raising CatalogError if the id is unknown"""
        achievement = self._by_id.get(achievement_id)
        if achievement is None:
            raise CatalogError(
                f"Unknown achievement: {achievement_id}",
                achievement_id=achievement_id,
            )
        return achievement

    def get_all(self) -> List[Achievement]:
        return list(self._achievements)

    def by_category(self, category: str) -> List[Achievement]:
        return [a for a in self._achievements if a.category == category]

    def for_action(self, action_type: str) -> List[Achievement]:
        """
        Achievements that listen to an action.

        Social achievements listen on both their own action and
        `social_planting`.
        """
        return [
            a for a in self._achievements
            if a.requirement.action == action_type
            or (a.category == AchievementCategory.SOCIAL and action_type == SOCIAL_PLANTING)
        ]


# ============================================
# Shipped achievement definitions
# ============================================

DEFAULT_ACHIEVEMENTS = (
    # Daily
    Achievement(
        id="daily_use",
        name="Daily Gardener",
        description="Use the app for 7 consecutive days",
        xp_reward=50,
        category=AchievementCategory.DAILY,
        requirement=StreakRequirement(action=DAILY_USE, target=7),
    ),

    # Planting milestones
    Achievement(
        id="first_seed",
        name="First Steps",
        description="Plant your first seed",
        xp_reward=50,
        category=AchievementCategory.MILESTONES,
        requirement=CountRequirement(action=PLANT_SEED, target=1),
    ),
    Achievement(
        id="plant_10_seeds",
        name="Getting the Hang of It",
        description="Plant 10 total seeds",
        xp_reward=100,
        category=AchievementCategory.MILESTONES,
        requirement=CountRequirement(action=PLANT_SEED, target=10),
    ),
    Achievement(
        id="plant_all_types",
        name="Plant Variety Master",
        description="Plant all 6 plant types",
        xp_reward=300,
        category=AchievementCategory.COLLECTION,
        requirement=UniqueRequirement(
            action=PLANT_SEED,
            target=6,
            conditions=UniquePlantConditions(),
        ),
    ),

    # Harvesting milestones
    Achievement(
        id="first_harvest",
        name="First Harvest",
        description="Harvest your first mature plant",
        xp_reward=150,
        category=AchievementCategory.MILESTONES,
        requirement=CountRequirement(action=HARVEST_PLANT, target=1),
    ),
    Achievement(
        id="harvest_25_plants",
        name="Dedicated Harvester",
        description="Harvest 25 total plants",
        xp_reward=400,
        category=AchievementCategory.MILESTONES,
        requirement=CountRequirement(action=HARVEST_PLANT, target=25),
    ),

    # Social
    Achievement(
        id="friend_garden_visit",
        name="Social Butterfly",
        description="Plant in your first friend's garden",
        xp_reward=200,
        category=AchievementCategory.SOCIAL,
        requirement=UniqueRequirement(
            action=PLANT_SEED,
            target=1,
            conditions=FriendGardenConditions(),
        ),
    ),
    Achievement(
        id="plant_3_friend_gardens",
        name="Community Gardener",
        description="Plant in 3 different friend gardens",
        xp_reward=300,
        category=AchievementCategory.SOCIAL,
        requirement=UniqueRequirement(
            action=PLANT_SEED,
            target=3,
            conditions=FriendGardenConditions(),
        ),
    ),

    # Weather
    Achievement(
        id="sunny_planting",
        name="Sun Seeker",
        description="Plant in sunny weather",
        xp_reward=50,
        category=AchievementCategory.WEATHER,
        requirement=CountRequirement(
            action=PLANT_SEED,
            target=1,
            conditions=WeatherConditions(weather=WeatherCategory.SUNNY),
        ),
    ),
    Achievement(
        id="rainy_planting",
        name="Rain Lover",
        description="Plant in rainy weather",
        xp_reward=50,
        category=AchievementCategory.WEATHER,
        requirement=CountRequirement(
            action=PLANT_SEED,
            target=1,
            conditions=WeatherConditions(weather=WeatherCategory.RAINY),
        ),
    ),
    Achievement(
        id="cloudy_planting",
        name="Cloud Watcher",
        description="Plant in cloudy weather",
        xp_reward=50,
        category=AchievementCategory.WEATHER,
        requirement=CountRequirement(
            action=PLANT_SEED,
            target=1,
            conditions=WeatherConditions(weather=WeatherCategory.CLOUDY),
        ),
    ),
)


def build_default_catalog() -> AchievementCatalog:
    """Build the catalog of shipped achievements"""
    return AchievementCatalog(DEFAULT_ACHIEVEMENTS)
