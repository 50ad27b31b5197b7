"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime


class AchievementCategory(str, Enum):
    """Achievement categories"""
    DAILY = "daily"
    MILESTONES = "milestones"
    WEATHER = "weather"
    SOCIAL = "social"
    COLLECTION = "collection"


class WeatherCategory(str, Enum):
    """Closed weather vocabulary used by achievement conditions"""
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"
    THUNDERSTORM = "thunderstorm"


# ==========================================
# Requirement conditions (one variant per kind)
# ==========================================

class WeatherConditions(BaseModel):
    """Only count actions performed in the given weather"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["weather"] = "weather"
    weather: WeatherCategory


class UniquePlantConditions(BaseModel):
    """Dedup events by plant identity"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["unique_plants"] = "unique_plants"


class FriendGardenConditions(BaseModel):
    """Dedup events by the owner of the garden the action happened in"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["friend_gardens"] = "friend_gardens"


UniqueConditions = Annotated[
    Union[UniquePlantConditions, FriendGardenConditions],
    Field(discriminator="kind"),
]


# ==========================================
# Requirements
# ==========================================

class _RequirementBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: str = Field(min_length=1)
    target: int = Field(ge=1)


class CountRequirement(_RequirementBase):
    """Number of qualifying events >= target"""
    type: Literal["count"] = "count"
    conditions: Optional[WeatherConditions] = None


class UniqueRequirement(_RequirementBase):
    """Number of distinct plant / friend-garden values >= target"""
    type: Literal["unique"] = "unique"
    conditions: UniqueConditions


class StreakRequirement(_RequirementBase):
    """Action performed on `target` consecutive UTC days ending today"""
    type: Literal["streak"] = "streak"


class CombinationRequirement(_RequirementBase):
    """Reserved for multi-condition rules; never makes progress"""
    type: Literal["combination"] = "combination"


Requirement = Annotated[
    Union[CountRequirement, UniqueRequirement, StreakRequirement, CombinationRequirement],
    Field(discriminator="type"),
]


class Achievement(BaseModel):
    """Achievement definition"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    description: str
    xp_reward: PositiveInt
    category: AchievementCategory
    requirement: Requirement


# ==========================================
# Per-user state
# ==========================================

class UnlockRecord(BaseModel):
    """User's unlocked achievement"""
    user_id: str
    achievement_id: str
    unlocked_at: datetime
    progress_data: dict = Field(default_factory=dict)


class AchievementProgress(BaseModel):
    """Progress toward one achievement, recomputed on every query"""
    achievement_id: str
    current_progress: int = Field(ge=0)
    max_progress: int
    is_unlocked: bool
    unlocked_at: Optional[datetime] = None


class AchievementCheckResult(BaseModel):
    """Outcome of evaluating one user action"""
    unlocked: List[str] = Field(default_factory=list)
    progress: List[AchievementProgress] = Field(default_factory=list)
    xp_awarded: int = 0

    @classmethod
    def empty(cls) -> "AchievementCheckResult":
        return cls()


class CategoryStats(BaseModel):
    """Completion counts for one category"""
    total: int = 0
    completed: int = 0


class UserAchievementOverview(BaseModel):
    """Progress for every catalog achievement plus category breakdown"""
    achievements: List[Achievement]
    progress: dict[str, AchievementProgress]
    category_stats: dict[str, CategoryStats]
