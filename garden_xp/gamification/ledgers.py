"""
Ledger interfaces

The engine talks to three external collaborators:
- EventLedger: per-user, append-only action records (read-only here)
- UnlockLedger: one-way set of unlocked achievements per user
- XPLedger: the leveling authority that credits XP and owns level math

Postgres adapters for the gardening app's schema live below; an in-process
implementation of all three is in memory_store.py.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set, runtime_checkable
import logging

import psycopg

from garden_xp.db import queries
from garden_xp.exceptions import EventLedgerError, UnlockLedgerError, XPLedgerError
from garden_xp.models.achievement import UnlockRecord
from garden_xp.models.event import EventRecord
from garden_xp.models.xp import XPAwardResult, XPSummary, XPTransaction

logger = logging.getLogger(__name__)


@runtime_checkable
class EventLedger(Protocol):
    async def query_events(
        self,
        user_id: str,
        action_types: Sequence[str],
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[EventRecord]:
        '''
        Return the user's records whose action_type is in action_types,
        newest first. `filters` is a JSON containment filter on context_data.
        '''
        ...

    async def count_events(
        self,
        user_id: str,
        action_type: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        ...

    async def has_event_between(
        self,
        user_id: str,
        action_type: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        ...


@runtime_checkable
class UnlockLedger(Protocol):
    async def list_unlocked(self, user_id: str) -> Set[str]:
        ...

    async def get_unlocks(self, user_id: str) -> List[UnlockRecord]:
        '''Unlock records, newest first.'''
        ...

    async def has_unlocked(self, user_id: str, achievement_id: str) -> bool:
        '''Authoritative check used right before an unlock write.'''
        ...

    async def write_unlock(
        self,
        user_id: str,
        achievement_id: str,
        progress_snapshot: Dict[str, Any],
    ) -> bool:
        '''
        Conditional insert. Returns False (and writes nothing) when the
        pair is already unlocked.
        '''
        ...


@runtime_checkable
class XPLedger(Protocol):
    async def credit_xp(
        self,
        user_id: str,
        amount: int,
        action_type: str,
        description: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> XPAwardResult:
        '''
        Durably credit XP. The credit also appends the action's record to
        the event ledger.
        '''
        ...

    async def get_summary(self, user_id: str) -> Optional[XPSummary]:
        ...

    async def get_transactions(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> List[XPTransaction]:
        ...


# ============================================
# Postgres adapters
# ============================================

class PostgresEventLedger:
    """Event ledger over the xp_transactions table"""

    async def query_events(
        self,
        user_id: str,
        action_types: Sequence[str],
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[EventRecord]:
        try:
            rows = await queries.get_events(user_id, action_types, filters)
        except psycopg.Error as e:
            raise EventLedgerError(
                f"Event query failed: {e}",
                user_id=user_id,
                operation="query_events",
                context={"action_types": list(action_types)},
                cause=e,
            )
        return [
            EventRecord(
                user_id=str(row["user_id"]),
                action_type=row["action_type"],
                context_data=row.get("context_data") or {},
                created_at=row["created_at"],
            )
            for row in rows
        ]

    async def count_events(
        self,
        user_id: str,
        action_type: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> int:
        try:
            return await queries.count_events(user_id, action_type, filters)
        except psycopg.Error as e:
            raise EventLedgerError(
                f"Event count failed: {e}",
                user_id=user_id,
                operation="count_events",
                context={"action_type": action_type},
                cause=e,
            )

    async def has_event_between(
        self,
        user_id: str,
        action_type: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        try:
            return await queries.has_action_between(user_id, action_type, start, end)
        except psycopg.Error as e:
            raise EventLedgerError(
                f"Event lookup failed: {e}",
                user_id=user_id,
                operation="has_event_between",
                context={"action_type": action_type},
                cause=e,
            )


class PostgresUnlockLedger:
    """Unlock ledger over the user_achievements table"""

    async def list_unlocked(self, user_id: str) -> Set[str]:
        records = await self.get_unlocks(user_id)
        return {record.achievement_id for record in records}

    async def get_unlocks(self, user_id: str) -> List[UnlockRecord]:
        try:
            rows = await queries.get_user_achievement_unlocks(user_id)
        except psycopg.Error as e:
            raise UnlockLedgerError(
                f"Unlock query failed: {e}",
                user_id=user_id,
                operation="get_unlocks",
                cause=e,
            )
        return [
            UnlockRecord(
                user_id=str(row["user_id"]),
                achievement_id=row["achievement_id"],
                unlocked_at=row["unlocked_at"],
                progress_data=row.get("progress_data") or {},
            )
            for row in rows
        ]

    async def has_unlocked(self, user_id: str, achievement_id: str) -> bool:
        try:
            return await queries.has_user_unlocked_achievement(user_id, achievement_id)
        except psycopg.Error as e:
            raise UnlockLedgerError(
                f"Unlock check failed: {e}",
                user_id=user_id,
                operation="has_unlocked",
                context={"achievement_id": achievement_id},
                cause=e,
            )

    async def write_unlock(
        self,
        user_id: str,
        achievement_id: str,
        progress_snapshot: Dict[str, Any],
    ) -> bool:
        try:
            return await queries.unlock_achievement(user_id, achievement_id, progress_snapshot)
        except psycopg.Error as e:
            raise UnlockLedgerError(
                f"Unlock write failed: {e}",
                user_id=user_id,
                operation="write_unlock",
                context={"achievement_id": achievement_id},
                cause=e,
            )


class PostgresXPLedger:
    """XP ledger backed by the award_xp / get_user_xp_summary functions"""

    async def credit_xp(
        self,
        user_id: str,
        amount: int,
        action_type: str,
        description: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> XPAwardResult:
        try:
            await queries.award_xp(user_id, amount, action_type, description, context)
            summary = await queries.get_user_xp_summary(user_id)
        except psycopg.Error as e:
            raise XPLedgerError(
                f"XP credit failed: {e}",
                user_id=user_id,
                operation="credit_xp",
                context={"amount": amount, "action_type": action_type},
                cause=e,
            )

        if summary is None:
            # Credit went through but the authority reported no totals
            return XPAwardResult(success=False, error="XP summary unavailable after credit")

        return XPAwardResult(
            success=True,
            new_total_xp=summary["total_xp"],
            new_level=summary["current_level"],
        )

    async def get_summary(self, user_id: str) -> Optional[XPSummary]:
        try:
            row = await queries.get_user_xp_summary(user_id)
        except psycopg.Error as e:
            raise XPLedgerError(
                f"XP summary failed: {e}",
                user_id=user_id,
                operation="get_summary",
                cause=e,
            )
        return XPSummary(**row) if row else None

    async def get_transactions(
        self,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> List[XPTransaction]:
        try:
            rows = await queries.get_xp_transactions(user_id, limit, offset)
        except psycopg.Error as e:
            raise XPLedgerError(
                f"XP history query failed: {e}",
                user_id=user_id,
                operation="get_transactions",
                cause=e,
            )
        return [
            XPTransaction(
                id=str(row["id"]),
                user_id=str(row["user_id"]),
                amount=row["amount"],
                action_type=row["action_type"],
                description=row.get("description") or "",
                context_data=row.get("context_data") or {},
                created_at=row["created_at"],
            )
            for row in rows
        ]
