"""Unit tests for the Postgres ledger adapters (garden_xp/gamification/ledgers.py)"""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import psycopg

from garden_xp.exceptions import EventLedgerError, UnlockLedgerError, XPLedgerError
from garden_xp.gamification.ledgers import (
    EventLedger,
    PostgresEventLedger,
    PostgresUnlockLedger,
    PostgresXPLedger,
    UnlockLedger,
    XPLedger,
)

QUERIES = "garden_xp.gamification.ledgers.queries"


def test_adapters_satisfy_protocols():
    assert isinstance(PostgresEventLedger(), EventLedger)
    assert isinstance(PostgresUnlockLedger(), UnlockLedger)
    assert isinstance(PostgresXPLedger(), XPLedger)


# ============================================================================
# Event ledger
# ============================================================================

@pytest.mark.asyncio
async def test_query_events_builds_records():
    user_id = uuid4()
    created = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)
    rows = [
        {"user_id": user_id, "action_type": "plant_seed", "context_data": {"plant_id": "a"}, "created_at": created},
        {"user_id": user_id, "action_type": "plant_seed", "context_data": None, "created_at": created},
    ]

    with patch(f"{QUERIES}.get_events", AsyncMock(return_value=rows)) as mock_get:
        events = await PostgresEventLedger().query_events(str(user_id), ["plant_seed"])

    mock_get.assert_called_once_with(str(user_id), ["plant_seed"], None)
    assert events[0].user_id == str(user_id)
    assert events[0].context_data == {"plant_id": "a"}
    assert events[1].context_data == {}


@pytest.mark.asyncio
async def test_query_events_wraps_database_error():
    with patch(f"{QUERIES}.get_events", AsyncMock(side_effect=psycopg.OperationalError("gone"))):
        with pytest.raises(EventLedgerError) as exc_info:
            await PostgresEventLedger().query_events("user", ["plant_seed"])

    assert exc_info.value.ledger == "event"
    assert exc_info.value.operation == "query_events"
    assert isinstance(exc_info.value.cause, psycopg.OperationalError)


@pytest.mark.asyncio
async def test_count_events_wraps_database_error():
    with patch(f"{QUERIES}.count_events", AsyncMock(side_effect=psycopg.Error("bad"))):
        with pytest.raises(EventLedgerError):
            await PostgresEventLedger().count_events("user", "plant_seed")


# ============================================================================
# Unlock ledger
# ============================================================================

@pytest.mark.asyncio
async def test_list_unlocked_returns_ids():
    rows = [
        {"user_id": "user", "achievement_id": "first_seed",
         "unlocked_at": datetime(2026, 3, 14, tzinfo=timezone.utc), "progress_data": {"progress": 1}},
        {"user_id": "user", "achievement_id": "sunny_planting",
         "unlocked_at": datetime(2026, 3, 13, tzinfo=timezone.utc), "progress_data": None},
    ]

    with patch(f"{QUERIES}.get_user_achievement_unlocks", AsyncMock(return_value=rows)):
        unlocked = await PostgresUnlockLedger().list_unlocked("user")

    assert unlocked == {"first_seed", "sunny_planting"}


@pytest.mark.asyncio
async def test_write_unlock_passes_through_conflict():
    with patch(f"{QUERIES}.unlock_achievement", AsyncMock(return_value=False)) as mock_unlock:
        written = await PostgresUnlockLedger().write_unlock("user", "first_seed", {"progress": 1})

    assert written is False
    mock_unlock.assert_called_once_with("user", "first_seed", {"progress": 1})


@pytest.mark.asyncio
async def test_has_unlocked_wraps_database_error():
    with patch(f"{QUERIES}.has_user_unlocked_achievement", AsyncMock(side_effect=psycopg.Error("bad"))):
        with pytest.raises(UnlockLedgerError) as exc_info:
            await PostgresUnlockLedger().has_unlocked("user", "first_seed")

    assert exc_info.value.context["achievement_id"] == "first_seed"
    assert exc_info.value.context["ledger"] == "unlock"


# ============================================================================
# XP ledger
# ============================================================================

@pytest.mark.asyncio
async def test_credit_xp_returns_summary():
    summary = {"total_xp": 150, "current_level": 2, "xp_to_next_level": 50, "xp_progress": 50}

    with patch(f"{QUERIES}.award_xp", AsyncMock()) as mock_award, \
            patch(f"{QUERIES}.get_user_xp_summary", AsyncMock(return_value=summary)):
        result = await PostgresXPLedger().credit_xp("user", 50, "achievement_unlock", "Achievement unlocked: First Steps")

    mock_award.assert_called_once_with("user", 50, "achievement_unlock", "Achievement unlocked: First Steps", None)
    assert result.success is True
    assert result.new_total_xp == 150
    assert result.new_level == 2


@pytest.mark.asyncio
async def test_credit_xp_missing_summary_is_error_payload():
    with patch(f"{QUERIES}.award_xp", AsyncMock()), \
            patch(f"{QUERIES}.get_user_xp_summary", AsyncMock(return_value=None)):
        result = await PostgresXPLedger().credit_xp("user", 50, "plant_seed", "Planted")

    assert result.success is False
    assert result.error


@pytest.mark.asyncio
async def test_credit_xp_wraps_database_error():
    with patch(f"{QUERIES}.award_xp", AsyncMock(side_effect=psycopg.Error("function award_xp does not exist"))):
        with pytest.raises(XPLedgerError) as exc_info:
            await PostgresXPLedger().credit_xp("user", 50, "plant_seed", "Planted")

    assert exc_info.value.user_id == "user"
    assert exc_info.value.operation == "credit_xp"


@pytest.mark.asyncio
async def test_get_transactions_builds_models():
    rows = [{
        "id": uuid4(),
        "user_id": uuid4(),
        "amount": 5,
        "action_type": "daily_use",
        "description": "Daily app usage reward",
        "context_data": {"date": "2026-03-14"},
        "created_at": datetime(2026, 3, 14, tzinfo=timezone.utc),
    }]

    with patch(f"{QUERIES}.get_xp_transactions", AsyncMock(return_value=rows)) as mock_get:
        transactions = await PostgresXPLedger().get_transactions("user", limit=10, offset=20)

    mock_get.assert_called_once_with("user", 10, 20)
    assert transactions[0].amount == 5
    assert transactions[0].id == str(rows[0]["id"])
