"""Unlock ledger queries"""
import json
import logging
from typing import Optional
from garden_xp.db.connection import db

logger = logging.getLogger(__name__)


async def get_user_achievement_unlocks(user_id: str) -> list[dict]:
    """
    Get user's unlocked achievements

    Args:
        user_id: User's UUID

    Returns:
        List of unlock rows ordered by unlocked_at DESC
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT user_id, achievement_id, unlocked_at, progress_data
                FROM user_achievements
                WHERE user_id = %s
                ORDER BY unlocked_at DESC
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [dict(row) for row in rows]


async def has_user_unlocked_achievement(user_id: str, achievement_id: str) -> bool:
    """
    Check if user has unlocked achievement

    Args:
        user_id: User's UUID
        achievement_id: Catalog achievement id (e.g. 'first_seed')

    Returns:
        True if unlocked, False otherwise
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT COUNT(*) AS count
                FROM user_achievements
                WHERE user_id = %s AND achievement_id = %s
                """,
                (user_id, achievement_id)
            )
            result = await cur.fetchone()
            return result["count"] > 0 if result else False


async def unlock_achievement(
    user_id: str,
    achievement_id: str,
    progress_data: Optional[dict] = None
) -> bool:
    """
    Unlock an achievement for a user

    Conditional insert: a concurrent or repeated unlock of the same
    (user_id, achievement_id) is a no-op.

    Returns True if unlocked (new), False if already unlocked
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_achievements (user_id, achievement_id, progress_data)
                VALUES (%s, %s, %s)
                ON CONFLICT (user_id, achievement_id) DO NOTHING
                RETURNING achievement_id
                """,
                (user_id, achievement_id, json.dumps(progress_data or {}))
            )
            result = await cur.fetchone()
            await conn.commit()

            if result:
                logger.info(f"User {user_id} unlocked achievement {achievement_id}")
                return True
            return False
