"""
Achievement Engine

On each user action:
1. Evaluate every catalog achievement listening to the action
2. Unlock the newly satisfied ones (recheck, then conditional write)
3. Credit each unlock's XP reward through the XP ledger

Evaluation never fails the action that triggered it: errors are logged,
reported and degraded to an empty result.

Features:
- Progress for every evaluated achievement, for display
- At most one unlock (and one XP credit) per user and achievement, even
  when the same action is evaluated concurrently
- Read views over a user's unlocks and completion statistics
"""

from typing import Any, Dict, List
import asyncio
import logging
import time

from garden_xp.config import ACHIEVEMENT_CONCURRENT_EVALUATION
from garden_xp.gamification.catalog import ACHIEVEMENT_UNLOCK, AchievementCatalog
from garden_xp.gamification.ledgers import UnlockLedger, XPLedger
from garden_xp.gamification.progress import ContextInput, ProgressCalculator
from garden_xp.models.achievement import (
    Achievement,
    AchievementCategory,
    AchievementCheckResult,
    AchievementProgress,
    CategoryStats,
    UnlockRecord,
    UserAchievementOverview,
)
from garden_xp.observability.metrics import (
    observe_check_duration,
    track_check,
    track_error,
    track_unlock,
    track_unlock_conflict,
)
from garden_xp.observability.sentry_config import capture_exception

logger = logging.getLogger(__name__)


class AchievementEngine:
    """Evaluate, unlock and reward achievements"""

    def __init__(
        self,
        catalog: AchievementCatalog,
        progress_calculator: ProgressCalculator,
        unlock_ledger: UnlockLedger,
        xp_ledger: XPLedger,
        concurrent: bool = ACHIEVEMENT_CONCURRENT_EVALUATION,
    ):
        self.catalog = catalog
        self.progress_calculator = progress_calculator
        self.unlock_ledger = unlock_ledger
        self.xp_ledger = xp_ledger
        self.concurrent = concurrent

    async def check_and_award_achievements(
        self,
        user_id: str,
        action_type: str,
        context: ContextInput = None
    ) -> AchievementCheckResult:
        """
        Check if a user unlocked any achievements with this action

        The action's own record must already be in the event ledger.

        Args:
            user_id: User's UUID
            action_type: What the user did ('plant_seed', 'harvest_plant', ...)
            context: Context of the action (e.g. {'weather_condition': 'Clouds',
                'plant_id': 'tomato', 'garden_owner_id': '...'})

        Returns:
            AchievementCheckResult:
            {
                'unlocked': [achievement_id, ...],
                'progress': [AchievementProgress, ...],
                'xp_awarded': int
            }
        """
        if not user_id or not action_type:
            return AchievementCheckResult.empty()

        started = time.perf_counter()
        track_check(action_type)

        try:
            result = await self._check(user_id, action_type, context)
        except Exception as e:
            logger.error(
                f"Error checking achievements for user {user_id} ({action_type}): {e}",
                exc_info=True
            )
            capture_exception(e, user_id=user_id, action_type=action_type, component="engine")
            track_error("engine")
            return AchievementCheckResult.empty()
        finally:
            observe_check_duration(action_type, time.perf_counter() - started)

        if result.unlocked:
            logger.info(
                f"User {user_id} unlocked {len(result.unlocked)} achievement(s) on {action_type}: "
                f"{', '.join(result.unlocked)} (+{result.xp_awarded} XP)"
            )
        return result

    async def _check(
        self,
        user_id: str,
        action_type: str,
        context: ContextInput
    ) -> AchievementCheckResult:
        candidates = self.catalog.for_action(action_type)
        if not candidates:
            return AchievementCheckResult.empty()

        unlocked_ids = await self.unlock_ledger.list_unlocked(user_id)

        if self.concurrent:
            progress_entries = list(await asyncio.gather(*[
                self.progress_calculator.calculate_progress(user_id, a, context, unlocked_ids)
                for a in candidates
            ]))
        else:
            progress_entries = []
            for achievement in candidates:
                progress_entries.append(
                    await self.progress_calculator.calculate_progress(
                        user_id, achievement, context, unlocked_ids
                    )
                )

        result = AchievementCheckResult(progress=progress_entries)

        # Unlock writes and XP credits stay sequential
        for achievement, progress in zip(candidates, progress_entries):
            if achievement.id in unlocked_ids or not progress.is_unlocked:
                continue

            if not await self._unlock(user_id, achievement, progress):
                continue

            result.unlocked.append(achievement.id)
            if await self._credit_reward(user_id, achievement):
                result.xp_awarded += achievement.xp_reward

        return result

    async def _unlock(
        self,
        user_id: str,
        achievement: Achievement,
        progress: AchievementProgress
    ) -> bool:
        """
        Recheck the unlock ledger, then write the unlock conditionally

        Returns False when another invocation got there first or the unlock
        ledger failed; nothing is awarded in either case.
        """
        try:
            if await self.unlock_ledger.has_unlocked(user_id, achievement.id):
                logger.debug(f"Achievement {achievement.id} already unlocked for user {user_id}")
                track_unlock_conflict()
                return False

            written = await self.unlock_ledger.write_unlock(
                user_id,
                achievement.id,
                {"progress": progress.current_progress, "target": progress.max_progress},
            )
        except Exception as e:
            logger.error(
                f"Unlock failed for {achievement.id} (user {user_id}): {e}",
                exc_info=True
            )
            capture_exception(e, user_id=user_id, achievement_id=achievement.id, component="unlock")
            track_error("unlock")
            return False

        if not written:
            logger.debug(f"Lost unlock race for {achievement.id} (user {user_id})")
            track_unlock_conflict()
        return written

    async def _credit_reward(self, user_id: str, achievement: Achievement) -> bool:
        """Credit the unlock's XP reward; failures are logged, never raised"""
        try:
            award = await self.xp_ledger.credit_xp(
                user_id,
                achievement.xp_reward,
                ACHIEVEMENT_UNLOCK,
                f"Achievement unlocked: {achievement.name}",
                {"achievement_id": achievement.id, "achievement_name": achievement.name},
            )
        except Exception as e:
            logger.error(
                f"XP credit failed for unlocked achievement {achievement.id} (user {user_id}): {e}",
                exc_info=True
            )
            capture_exception(e, user_id=user_id, achievement_id=achievement.id, component="xp")
            track_error("xp")
            return False

        if not award.success:
            logger.error(
                f"XP ledger rejected reward for {achievement.id} (user {user_id}): {award.error}"
            )
            track_error("xp")
            return False

        track_unlock(achievement.id, achievement.category.value, achievement.xp_reward)
        logger.info(
            f"User {user_id} unlocked achievement: {achievement.id} "
            f"({achievement.name}) +{achievement.xp_reward} XP"
        )
        return True

    # ============================================
    # Read views
    # ============================================

    async def get_user_achievements(self, user_id: str) -> List[UnlockRecord]:
        """
        Get user's unlocked achievements, newest first

        Returns [] on failure.
        """
        if not user_id:
            return []
        try:
            return await self.unlock_ledger.get_unlocks(user_id)
        except Exception as e:
            logger.error(f"Error getting achievements for user {user_id}: {e}", exc_info=True)
            track_error("unlock")
            return []

    async def has_achievement(self, user_id: str, achievement_id: str) -> bool:
        """Check if user has unlocked an achievement (False on failure)"""
        if not user_id or not achievement_id:
            return False
        try:
            return await self.unlock_ledger.has_unlocked(user_id, achievement_id)
        except Exception as e:
            logger.error(f"Error checking achievement {achievement_id} for user {user_id}: {e}", exc_info=True)
            track_error("unlock")
            return False

    def get_achievements_by_category(self, category: str) -> List[Achievement]:
        return self.catalog.by_category(category)

    async def get_user_progress(self, user_id: str) -> UserAchievementOverview:
        """
        Get progress for every catalog achievement

        Returns:
            UserAchievementOverview with progress keyed by achievement id and
            {total, completed} per category
        """
        achievements = self.catalog.get_all()
        records = await self.get_user_achievements(user_id)
        unlocked_at = {r.achievement_id: r.unlocked_at for r in records}

        progress: Dict[str, AchievementProgress] = {}
        for achievement in achievements:
            entry = await self.progress_calculator.calculate_progress(
                user_id, achievement, None, set(unlocked_at)
            )
            if entry.is_unlocked and achievement.id in unlocked_at:
                entry = entry.model_copy(update={"unlocked_at": unlocked_at[achievement.id]})
            progress[achievement.id] = entry

        category_stats: Dict[str, CategoryStats] = {}
        for achievement in achievements:
            stats = category_stats.setdefault(achievement.category.value, CategoryStats())
            stats.total += 1
            if achievement.id in unlocked_at:
                stats.completed += 1

        return UserAchievementOverview(
            achievements=achievements,
            progress=progress,
            category_stats=category_stats,
        )

    async def get_achievement_statistics(self, user_id: str) -> Dict[str, Any]:
        """
        Get user's achievement statistics

        Returns:
            {
                'total': int,
                'unlocked': int,
                'remaining': int,
                'completion_percentage': int,
                '<category>_total': int,
                '<category>_unlocked': int,
                ...
            }
            or {} on failure
        """
        try:
            unlocked_ids = await self.unlock_ledger.list_unlocked(user_id)
        except Exception as e:
            logger.error(f"Error getting achievement statistics for user {user_id}: {e}", exc_info=True)
            track_error("unlock")
            return {}

        all_achievements = self.catalog.get_all()
        total = len(all_achievements)
        unlocked = len([a for a in all_achievements if a.id in unlocked_ids])

        stats: Dict[str, Any] = {
            "total": total,
            "unlocked": unlocked,
            "remaining": total - unlocked,
            "completion_percentage": round(unlocked / total * 100) if total else 0,
        }

        for category in AchievementCategory:
            in_category = self.catalog.by_category(category)
            stats[f"{category.value}_total"] = len(in_category)
            stats[f"{category.value}_unlocked"] = len([a for a in in_category if a.id in unlocked_ids])

        return stats
