"""
GamificationService - Gamification Business Logic

Entry point for the app's action handlers: credits the base XP for an
action (which appends its record to the event ledger) and then runs the
achievement check against the updated ledger.
"""

import logging
from typing import Any, Dict, Optional

from garden_xp.gamification.achievement_engine import AchievementEngine
from garden_xp.gamification.catalog import DAILY_USE
from garden_xp.gamification.xp_system import XPService

logger = logging.getLogger(__name__)


class GamificationService:
    """
    Service for gamification features.

    Responsibilities:
    - XP awarding for user actions
    - Achievement checking and unlocking after each action
    - Daily usage reward
    """

    def __init__(self, xp_service: XPService, achievement_engine: AchievementEngine):
        """
        Initialize GamificationService.

        Args:
            xp_service: XPService instance
            achievement_engine: AchievementEngine instance
        """
        self.xp_service = xp_service
        self.achievement_engine = achievement_engine
        logger.debug("GamificationService initialized")

    async def record_action(
        self,
        user_id: str,
        action_type: str,
        xp_amount: int,
        description: str,
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Process gamification for one user action.

        Args:
            user_id: User's UUID
            action_type: plant_seed, harvest_plant, social_planting, ...
            xp_amount: Base XP for the action
            description: Human-readable description
            context: Action context (weather_condition, plant_id, garden_owner_id, ...)

        Returns:
            {
                'success': bool,
                'xp_awarded': int,  # base XP plus achievement rewards
                'level_up': bool,
                'new_level': int,
                'achievements_unlocked': list,
                'achievement_progress': list,
                'error': str | None
            }
        """
        result = self._empty_result()

        award = await self.xp_service.award_xp(user_id, xp_amount, action_type, description, context)
        if not award.success:
            logger.warning(f"Action {action_type} not credited for user {user_id}: {award.error}")
            result['error'] = award.error
            return result

        result['success'] = True
        result['xp_awarded'] = xp_amount
        result['level_up'] = award.leveled_up
        result['new_level'] = award.new_level

        await self._process_achievements(user_id, action_type, context, result)

        logger.info(
            f"Gamification processed for {action_type}: user={user_id}, "
            f"xp={result['xp_awarded']}, achievements={len(result['achievements_unlocked'])}"
        )
        return result

    async def record_daily_use(self, user_id: str) -> Dict[str, Any]:
        """
        Award the daily usage reward and check the daily streak achievement.

        Returns the same shape as record_action; success is False when the
        reward was already claimed today.
        """
        result = self._empty_result()

        award = await self.xp_service.award_daily_xp(user_id)
        if not award.success:
            result['error'] = award.error
            return result

        result['success'] = True
        result['xp_awarded'] = self.xp_service.daily_xp_amount
        result['level_up'] = award.leveled_up
        result['new_level'] = award.new_level

        await self._process_achievements(user_id, DAILY_USE, {}, result)
        return result

    async def _process_achievements(
        self,
        user_id: str,
        action_type: str,
        context: Optional[Dict[str, Any]],
        result: Dict[str, Any]
    ) -> None:
        """Run the achievement check and fold it into result"""
        check = await self.achievement_engine.check_and_award_achievements(user_id, action_type, context)

        result['achievements_unlocked'] = list(check.unlocked)
        result['achievement_progress'] = [p.model_dump() for p in check.progress]
        result['xp_awarded'] += check.xp_awarded

        if check.xp_awarded:
            # Achievement rewards can push the user over a level boundary
            summary = await self.xp_service.get_user_xp(user_id)
            if summary and result['new_level'] is not None and summary.current_level > result['new_level']:
                result['level_up'] = True
                result['new_level'] = summary.current_level

    def _empty_result(self) -> Dict[str, Any]:
        """Return empty result for failed credits"""
        return {
            'success': False,
            'xp_awarded': 0,
            'level_up': False,
            'new_level': None,
            'achievements_unlocked': [],
            'achievement_progress': [],
            'error': None
        }
