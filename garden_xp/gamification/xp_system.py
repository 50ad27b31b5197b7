"""
XP System

Credits XP through the XP ledger authority and reads back totals. Level
arithmetic belongs to the authority; this module only compares levels
before and after a credit.

XP Award Rules:
- Daily app use: DAILY_XP_AMOUNT XP, once per UTC day (feeds the daily streak)
- Planting / harvesting / social planting: amount chosen by the caller
- Achievement unlocks: the achievement's reward (see achievement_engine)

Level benefits unlock every 5 levels up to level 50.
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from garden_xp.config import DAILY_XP_AMOUNT
from garden_xp.gamification.catalog import DAILY_USE
from garden_xp.gamification.ledgers import EventLedger, XPLedger
from garden_xp.models.xp import XPAwardResult, XPSummary, XPTransaction
from garden_xp.observability.metrics import track_error
from garden_xp.utils.datetime_helpers import now_utc, to_utc, utc_day_bounds

logger = logging.getLogger(__name__)

# (level, feature) pairs; a level unlocks every feature at or below it
LEVEL_FEATURES = [
    (5, "4 planting slots"),
    (10, "5 planting slots"),
    (15, "Premium plants"),
    (20, "Garden themes"),
    (25, "Plant boosters"),
    (30, "Special events"),
    (35, "Garden sharing"),
    (40, "Weather control"),
    (45, "Plant breeding"),
    (50, "Master Gardener status"),
]

HISTORY_PAGE_SIZE = 500


def get_level_benefits(level: int) -> Dict[str, Any]:
    """
    Get benefits unlocked at a level

    Returns:
        {
            'level': int,
            'description': str,
            'unlocked_features': list
        }
    """
    return {
        "level": level,
        "description": f"Level {level} benefits",
        "unlocked_features": [feature for min_level, feature in LEVEL_FEATURES if level >= min_level],
    }


class XPService:
    """Award XP and query XP history"""

    def __init__(
        self,
        xp_ledger: XPLedger,
        event_ledger: EventLedger,
        daily_xp_amount: int = DAILY_XP_AMOUNT,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.xp_ledger = xp_ledger
        self.event_ledger = event_ledger
        self.daily_xp_amount = daily_xp_amount
        self._clock = clock

    async def award_xp(
        self,
        user_id: str,
        amount: int,
        action_type: str,
        description: str,
        context: Optional[Dict[str, Any]] = None
    ) -> XPAwardResult:
        """
        Award XP to user and check for level up

        Args:
            user_id: User's UUID
            amount: Amount of XP to award (positive)
            action_type: Type of action (plant_seed, harvest_plant, daily_use, ...)
            description: Human-readable description
            context: Action context stored with the record

        Returns:
            XPAwardResult; success=False with an error message on invalid
            input or ledger failure
        """
        if not user_id or not action_type or not description or amount is None or amount <= 0:
            return XPAwardResult(success=False, error="Invalid parameters for XP award")

        try:
            previous = await self.xp_ledger.get_summary(user_id)
            award = await self.xp_ledger.credit_xp(
                user_id, amount, action_type, description, context or {}
            )
        except Exception as e:
            logger.error(f"Error awarding {amount} XP to user {user_id}: {e}", exc_info=True)
            track_error("xp")
            return XPAwardResult(success=False, error=str(e))

        if not award.success:
            logger.warning(f"XP award rejected for user {user_id}: {award.error}")
            return award

        old_level = previous.current_level if previous else 1
        leveled_up = award.new_level is not None and award.new_level > old_level

        logger.info(
            f"Awarded {amount} XP to user {user_id} for {action_type}. "
            f"Total: {award.new_total_xp} XP, Level: {award.new_level}"
        )
        if leveled_up:
            logger.info(f"User {user_id} leveled up from {old_level} to {award.new_level}!")

        return award.model_copy(update={"leveled_up": leveled_up})

    async def get_user_xp(self, user_id: str) -> Optional[XPSummary]:
        """Get user's current XP and level information (None if unavailable)"""
        if not user_id:
            return None
        try:
            return await self.xp_ledger.get_summary(user_id)
        except Exception as e:
            logger.error(f"Error getting XP for user {user_id}: {e}", exc_info=True)
            return None

    async def get_xp_history(self, user_id: str, limit: int = 50, offset: int = 0) -> List[XPTransaction]:
        """
        Get XP transaction history, newest first

        Args:
            user_id: User's UUID
            limit: Number of transactions to return
            offset: Number of transactions to skip
        """
        if not user_id:
            return []
        try:
            return await self.xp_ledger.get_transactions(user_id, limit, offset)
        except Exception as e:
            logger.error(f"Error getting XP history for user {user_id}: {e}", exc_info=True)
            return []

    async def _all_transactions(self, user_id: str) -> List[XPTransaction]:
        transactions: List[XPTransaction] = []
        offset = 0
        while True:
            page = await self.xp_ledger.get_transactions(user_id, HISTORY_PAGE_SIZE, offset)
            transactions.extend(page)
            if len(page) < HISTORY_PAGE_SIZE:
                return transactions
            offset += HISTORY_PAGE_SIZE

    async def get_total_xp_for_action(self, user_id: str, action_type: str) -> int:
        """Sum of XP earned from one action type (0 on failure)"""
        if not user_id or not action_type:
            return 0
        try:
            transactions = await self._all_transactions(user_id)
        except Exception as e:
            logger.error(f"Error getting {action_type} XP for user {user_id}: {e}", exc_info=True)
            return 0
        return sum(t.amount for t in transactions if t.action_type == action_type)

    async def get_xp_statistics(self, user_id: str) -> Dict[str, int]:
        """
        Get XP earned per action type

        Returns:
            {action_type: total_xp}, or {} on failure
        """
        if not user_id:
            return {}
        try:
            transactions = await self._all_transactions(user_id)
        except Exception as e:
            logger.error(f"Error getting XP statistics for user {user_id}: {e}", exc_info=True)
            return {}

        stats: Dict[str, int] = defaultdict(int)
        for transaction in transactions:
            stats[transaction.action_type] += transaction.amount
        return dict(stats)

    async def can_receive_daily_xp(self, user_id: str) -> bool:
        """Check whether the daily reward is still available today (UTC)"""
        if not user_id:
            return False

        start, end = utc_day_bounds(to_utc(self._clock()).date())
        try:
            already = await self.event_ledger.has_event_between(user_id, DAILY_USE, start, end)
        except Exception as e:
            logger.error(f"Error checking daily XP for user {user_id}: {e}", exc_info=True)
            return False
        return not already

    async def award_daily_xp(self, user_id: str) -> XPAwardResult:
        """Award the once-per-day usage reward"""
        if not user_id:
            return XPAwardResult(success=False, error="No user_id provided")

        if not await self.can_receive_daily_xp(user_id):
            return XPAwardResult(success=False, error="Daily XP already awarded today")

        today = to_utc(self._clock()).date()
        return await self.award_xp(
            user_id,
            self.daily_xp_amount,
            DAILY_USE,
            "Daily app usage reward",
            {"date": today.isoformat()},
        )

    @staticmethod
    def get_level_benefits(level: int) -> Dict[str, Any]:
        return get_level_benefits(level)
