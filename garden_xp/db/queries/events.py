"""Event ledger queries (rows of xp_transactions)"""
import json
import logging
from typing import Any, Optional, Sequence
from garden_xp.db.connection import db

logger = logging.getLogger(__name__)


async def get_events(
    user_id: str,
    action_types: Sequence[str],
    filters: Optional[dict[str, Any]] = None,
) -> list[dict]:
    """
    Get a user's action records, newest first

    Args:
        user_id: User's UUID
        action_types: Action types to include (e.g. ['plant_seed', 'social_planting'])
        filters: Optional JSON containment filter on context_data

    Returns:
        List of {'user_id', 'action_type', 'context_data', 'created_at'}
    """
    query = """
        SELECT user_id, action_type, context_data, created_at
        FROM xp_transactions
        WHERE user_id = %s
        AND action_type = ANY(%s)
    """
    params: list[Any] = [user_id, list(action_types)]

    if filters:
        query += " AND context_data @> %s::jsonb"
        params.append(json.dumps(filters))

    query += " ORDER BY created_at DESC"

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def count_events(
    user_id: str,
    action_type: str,
    filters: Optional[dict[str, Any]] = None,
) -> int:
    """
    Count a user's action records of one type

    Args:
        user_id: User's UUID
        action_type: Action type to count
        filters: Optional JSON containment filter on context_data

    Returns:
        Number of matching records
    """
    query = """
        SELECT COUNT(*) AS count
        FROM xp_transactions
        WHERE user_id = %s
        AND action_type = %s
    """
    params: list[Any] = [user_id, action_type]

    if filters:
        query += " AND context_data @> %s::jsonb"
        params.append(json.dumps(filters))

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, tuple(params))
            result = await cur.fetchone()
            return result["count"] if result else 0
