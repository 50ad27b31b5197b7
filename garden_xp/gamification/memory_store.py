"""
In-memory ledger store

Implements EventLedger, UnlockLedger and XPLedger in one process for local
development and tests. Nothing is persisted.

Level math here is a flat 100 XP per level. The real leveling authority
lives in the database (get_user_xp_summary) and may use a different curve.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from garden_xp.models.achievement import UnlockRecord
from garden_xp.models.event import EventRecord
from garden_xp.models.xp import XPAwardResult, XPSummary, XPTransaction
from garden_xp.utils.datetime_helpers import now_utc, to_utc

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100


def _summary_for(total_xp: int) -> XPSummary:
    xp_progress = total_xp % XP_PER_LEVEL
    return XPSummary(
        total_xp=total_xp,
        current_level=total_xp // XP_PER_LEVEL + 1,
        xp_to_next_level=XP_PER_LEVEL - xp_progress,
        xp_progress=xp_progress,
    )


def _contains(context_data: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    """Top-level JSON containment, like `context_data @> filters`"""
    if not filters:
        return True
    return all(context_data.get(key) == value for key, value in filters.items())


class InMemoryLedgerStore:
    """Event, unlock and XP ledgers held in dicts"""

    def __init__(self, clock: Callable[[], datetime] = now_utc):
        self._clock = clock
        self._events: Dict[str, List[EventRecord]] = defaultdict(list)
        self._transactions: Dict[str, List[XPTransaction]] = defaultdict(list)
        self._unlocks: Dict[str, Dict[str, UnlockRecord]] = defaultdict(dict)
        self._totals: Dict[str, int] = defaultdict(int)
        self._ids = count(1)
        self._unlock_lock = asyncio.Lock()

    # ==========================================
    # Seeding helpers
    # ==========================================

    def record_event(
        self,
        user_id: str,
        action_type: str,
        context_data: Optional[Dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> EventRecord:
        """Append an action record without crediting XP"""
        event = EventRecord(
            user_id=user_id,
            action_type=action_type,
            context_data=dict(context_data or {}),
            created_at=to_utc(created_at) if created_at else self._clock(),
        )
        self._events[user_id].append(event)
        return event

    # ==========================================
    # EventLedger
    # ==========================================

    async def query_events(
        self,
        user_id: str,
        action_types: Sequence[str],
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[EventRecord]:
        wanted = set(action_types)
        matches = [
            e for e in self._events.get(user_id, [])
            if e.action_type in wanted and _contains(e.context_data, filters)
        ]
        return sorted(matches, key=lambda e: e.created_at, reverse=True)

    async def count_events(
        self,
        user_id: str,
        action_type: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        return sum(
            1 for e in self._events.get(user_id, [])
            if e.action_type == action_type and _contains(e.context_data, filters)
        )

    async def has_event_between(
        self,
        user_id: str,
        action_type: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        return any(
            e.action_type == action_type and start <= e.created_at < end
            for e in self._events.get(user_id, [])
        )

    # ==========================================
    # UnlockLedger
    # ==========================================

    async def list_unlocked(self, user_id: str) -> Set[str]:
        return set(self._unlocks.get(user_id, {}))

    async def get_unlocks(self, user_id: str) -> List[UnlockRecord]:
        records = self._unlocks.get(user_id, {}).values()
        return sorted(records, key=lambda r: r.unlocked_at, reverse=True)

    async def has_unlocked(self, user_id: str, achievement_id: str) -> bool:
        return achievement_id in self._unlocks.get(user_id, {})

    async def write_unlock(
        self,
        user_id: str,
        achievement_id: str,
        progress_snapshot: Dict[str, Any],
    ) -> bool:
        async with self._unlock_lock:
            user_unlocks = self._unlocks[user_id]
            if achievement_id in user_unlocks:
                return False
            user_unlocks[achievement_id] = UnlockRecord(
                user_id=user_id,
                achievement_id=achievement_id,
                unlocked_at=self._clock(),
                progress_data=dict(progress_snapshot),
            )
        logger.info(f"User {user_id} unlocked achievement {achievement_id}")
        return True

    # ==========================================
    # XPLedger
    # ==========================================

    async def credit_xp(
        self,
        user_id: str,
        amount: int,
        action_type: str,
        description: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> XPAwardResult:
        event = self.record_event(user_id, action_type, context)
        self._transactions[user_id].append(
            XPTransaction(
                id=str(next(self._ids)),
                user_id=user_id,
                amount=amount,
                action_type=action_type,
                description=description,
                context_data=event.context_data,
                created_at=event.created_at,
            )
        )
        self._totals[user_id] += amount

        summary = _summary_for(self._totals[user_id])
        return XPAwardResult(
            success=True,
            new_total_xp=summary.total_xp,
            new_level=summary.current_level,
        )

    async def get_summary(self, user_id: str) -> Optional[XPSummary]:
        if user_id not in self._totals:
            return None
        return _summary_for(self._totals[user_id])

    async def get_transactions(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> List[XPTransaction]:
        ordered = sorted(
            self._transactions.get(user_id, []),
            key=lambda t: t.created_at,
            reverse=True,
        )
        return ordered[offset:offset + limit]
