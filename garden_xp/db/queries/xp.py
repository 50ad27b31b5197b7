"""XP ledger queries"""
import json
import logging
from datetime import datetime
from typing import Optional
from garden_xp.db.connection import db

logger = logging.getLogger(__name__)


async def award_xp(
    user_id: str,
    amount: int,
    action_type: str,
    description: str,
    context_data: Optional[dict] = None
) -> None:
    """
    Credit XP through the award_xp() stored function

    The function appends the xp_transactions row (the action's event record)
    and updates the user's totals in one transaction.
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT award_xp(%s, %s, %s, %s, %s::jsonb)",
                (user_id, amount, action_type, description, json.dumps(context_data or {}))
            )
            await conn.commit()


async def get_user_xp_summary(user_id: str) -> Optional[dict]:
    """
    Get user XP summary from the leveling authority

    Returns:
        {
            'total_xp': int,
            'current_level': int,
            'xp_to_next_level': int,
            'xp_progress': int
        }
        or None when the user has no XP record
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT total_xp, current_level, xp_to_next_level, xp_progress
                FROM get_user_xp_summary(%s)
                """,
                (user_id,)
            )
            row = await cur.fetchone()
            return dict(row) if row else None


async def get_xp_transactions(user_id: str, limit: int = 50, offset: int = 0) -> list[dict]:
    """
    Get XP transactions for user

    Args:
        user_id: User's UUID
        limit: Maximum number of transactions to return
        offset: Number of transactions to skip

    Returns:
        List of transactions ordered by created_at DESC
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, user_id, amount, action_type, description, context_data, created_at
                FROM xp_transactions
                WHERE user_id = %s
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                (user_id, limit, offset)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def has_action_between(
    user_id: str,
    action_type: str,
    start: datetime,
    end: datetime
) -> bool:
    """
    Check if user has an XP transaction of a type in [start, end)
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT 1
                FROM xp_transactions
                WHERE user_id = %s
                AND action_type = %s
                AND created_at >= %s
                AND created_at < %s
                LIMIT 1
                """,
                (user_id, action_type, start, end)
            )
            return await cur.fetchone() is not None
