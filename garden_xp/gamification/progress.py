"""
Progress Calculator

Computes how close a user is to one achievement by aggregating their
event ledger records under the achievement's requirement:
- count: number of matching records (optionally weather-gated)
- unique: number of distinct plants / friend gardens
- streak: consecutive UTC days with the action, ending today
- combination: reserved, always 0

Progress is never persisted; it is recomputed on every call. Once the unlock
ledger has the achievement, progress is pinned at the target.
"""

from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Set, Union
import logging

from garden_xp.gamification.catalog import SOCIAL_PLANTING
from garden_xp.gamification.ledgers import EventLedger, UnlockLedger
from garden_xp.gamification.weather import are_equivalent, normalize_weather
from garden_xp.models.achievement import (
    Achievement,
    AchievementProgress,
    CombinationRequirement,
    CountRequirement,
    FriendGardenConditions,
    StreakRequirement,
    UniquePlantConditions,
    UniqueRequirement,
    WeatherCategory,
)
from garden_xp.models.event import ActionContext, EventRecord
from garden_xp.observability.metrics import track_error
from garden_xp.observability.sentry_config import capture_exception
from garden_xp.utils.datetime_helpers import now_utc, to_utc, utc_day_key

logger = logging.getLogger(__name__)

ContextInput = Union[ActionContext, Mapping[str, Any], None]


def as_action_context(context: ContextInput) -> ActionContext:
    """Coerce a caller-supplied context into ActionContext"""
    if isinstance(context, ActionContext):
        return context
    return ActionContext(**dict(context or {}))


def calculate_streak(timestamps: Iterable[Union[datetime, date]], today: date) -> int:
    """
    Count consecutive UTC days with at least one timestamp, ending today

    Args:
        timestamps: Event times (any order)
        today: Today's UTC date

    Returns:
        Streak length; 0 when there is no record today
    """
    active_days = {utc_day_key(ts) for ts in timestamps}

    streak = 0
    day = today
    while utc_day_key(day) in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def _event_weather(event: EventRecord) -> Optional[WeatherCategory]:
    data = event.context_data
    return normalize_weather(data.get("weather_condition") or data.get("weather"))


def _plant_key(user_id: str, data: Dict[str, Any]) -> Optional[str]:
    value = data.get("plant_id") or data.get("plantId")
    return str(value) if value else None


def _friend_garden_key(user_id: str, data: Dict[str, Any]) -> Optional[str]:
    owner = data.get("garden_owner_id")
    if not owner or str(owner) == str(user_id):
        # Own garden never counts as social
        return None
    return str(owner)


class ProgressCalculator:
    """Compute AchievementProgress for one (user, achievement) pair"""

    def __init__(
        self,
        event_ledger: EventLedger,
        unlock_ledger: UnlockLedger,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.event_ledger = event_ledger
        self.unlock_ledger = unlock_ledger
        self._clock = clock

    async def calculate_progress(
        self,
        user_id: str,
        achievement: Achievement,
        context: ContextInput = None,
        unlocked_ids: Optional[Set[str]] = None,
    ) -> AchievementProgress:
        """
        Calculate progress toward an achievement

        Never raises. A failing ledger call degrades to zero progress and is
        reported through the error channel.

        Args:
            user_id: User's UUID
            achievement: Catalog achievement
            context: Context of the triggering action (weather, plant, garden owner)
            unlocked_ids: Unlock ledger snapshot for the user; queried when omitted

        Returns:
            AchievementProgress with current_progress in [0, target]
        """
        target = achievement.requirement.target

        try:
            if unlocked_ids is not None:
                already_unlocked = achievement.id in unlocked_ids
            else:
                already_unlocked = await self.unlock_ledger.has_unlocked(user_id, achievement.id)

            if already_unlocked:
                return AchievementProgress(
                    achievement_id=achievement.id,
                    current_progress=target,
                    max_progress=target,
                    is_unlocked=True,
                )

            raw_progress = await self._raw_progress(
                user_id, achievement, as_action_context(context)
            )

        except Exception as e:
            logger.error(
                f"Error calculating progress for {achievement.id} (user {user_id}): {e}",
                exc_info=True
            )
            capture_exception(e, user_id=user_id, achievement_id=achievement.id, component="progress")
            track_error("progress")
            return AchievementProgress(
                achievement_id=achievement.id,
                current_progress=0,
                max_progress=target,
                is_unlocked=False,
            )

        current = max(0, min(raw_progress, target))
        return AchievementProgress(
            achievement_id=achievement.id,
            current_progress=current,
            max_progress=target,
            is_unlocked=current >= target,
        )

    async def _raw_progress(
        self,
        user_id: str,
        achievement: Achievement,
        context: ActionContext
    ) -> int:
        requirement = achievement.requirement

        if isinstance(requirement, CountRequirement):
            return await self._count_progress(user_id, requirement, context)
        elif isinstance(requirement, UniqueRequirement):
            return await self._unique_progress(user_id, requirement)
        elif isinstance(requirement, StreakRequirement):
            return await self._streak_progress(user_id, requirement)
        elif isinstance(requirement, CombinationRequirement):
            # Multi-condition rules are not defined yet
            return 0

        logger.warning(f"Unknown requirement type for {achievement.id}: {requirement!r}")
        return 0

    async def _count_progress(
        self,
        user_id: str,
        requirement: CountRequirement,
        context: ActionContext
    ) -> int:
        if requirement.conditions is None:
            return await self.event_ledger.count_events(user_id, requirement.action)

        required = requirement.conditions.weather

        # Gate on the triggering action's weather only
        if context.weather_condition and not are_equivalent(context.weather_condition, required):
            return 0

        events = await self.event_ledger.query_events(user_id, [requirement.action])
        return sum(1 for e in events if _event_weather(e) == required)

    async def _unique_progress(self, user_id: str, requirement: UniqueRequirement) -> int:
        conditions = requirement.conditions

        if isinstance(conditions, FriendGardenConditions):
            action_types = [requirement.action, SOCIAL_PLANTING]
            key_for = _friend_garden_key
        elif isinstance(conditions, UniquePlantConditions):
            action_types = [requirement.action]
            key_for = _plant_key
        else:
            return 0

        events = await self.event_ledger.query_events(user_id, action_types)

        unique_values = set()
        for event in events:
            key = key_for(user_id, event.context_data)
            if key is not None:
                unique_values.add(key)
        return len(unique_values)

    async def _streak_progress(self, user_id: str, requirement: StreakRequirement) -> int:
        events = await self.event_ledger.query_events(user_id, [requirement.action])
        today = to_utc(self._clock()).date()
        return calculate_streak((e.created_at for e in events), today)
