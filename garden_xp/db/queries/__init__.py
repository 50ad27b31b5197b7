"""
Database queries - Re-export all functions.

Module organization:
- events.py: Event ledger reads (action records in xp_transactions)
- achievements.py: Unlock ledger (user_achievements)
- xp.py: XP ledger authority (award_xp / get_user_xp_summary functions)
"""

from garden_xp.db.queries.events import (
    get_events,
    count_events,
)

from garden_xp.db.queries.achievements import (
    get_user_achievement_unlocks,
    has_user_unlocked_achievement,
    unlock_achievement,
)

from garden_xp.db.queries.xp import (
    award_xp,
    get_user_xp_summary,
    get_xp_transactions,
    has_action_between,
)

__all__ = [
    "get_events",
    "count_events",
    "get_user_achievement_unlocks",
    "has_user_unlocked_achievement",
    "unlock_achievement",
    "award_xp",
    "get_user_xp_summary",
    "get_xp_transactions",
    "has_action_between",
]
