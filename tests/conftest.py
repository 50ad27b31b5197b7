"""Global test fixtures and utilities for garden-xp tests"""
import pytest
from unittest.mock import AsyncMock
from datetime import datetime, timezone

from garden_xp.gamification.achievement_engine import AchievementEngine
from garden_xp.gamification.catalog import build_default_catalog
from garden_xp.gamification.memory_store import InMemoryLedgerStore
from garden_xp.gamification.progress import ProgressCalculator
from garden_xp.gamification.xp_system import XPService
from garden_xp.models.xp import XPAwardResult


# ============================================================================
# Clock Fixtures
# ============================================================================

FIXED_NOW = datetime(2026, 3, 14, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    """Fixed 'now' used by every clock-dependent component"""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "5f0c6a1e-0000-4000-8000-000000000001"


@pytest.fixture
def friend_user_id():
    return "5f0c6a1e-0000-4000-8000-000000000002"


# ============================================================================
# Ledger Fixtures
# ============================================================================

@pytest.fixture
def store(clock):
    """In-memory event/unlock/XP ledgers on the fixed clock"""
    return InMemoryLedgerStore(clock=clock)


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def calculator(store, clock):
    return ProgressCalculator(store, store, clock=clock)


@pytest.fixture
def engine(catalog, calculator, store):
    return AchievementEngine(catalog, calculator, store, store, concurrent=False)


@pytest.fixture
def xp_service(store, clock):
    return XPService(store, store, daily_xp_amount=5, clock=clock)


@pytest.fixture
def mock_unlock_ledger():
    """Unlock ledger double with nothing unlocked"""
    ledger = AsyncMock()
    ledger.list_unlocked = AsyncMock(return_value=set())
    ledger.get_unlocks = AsyncMock(return_value=[])
    ledger.has_unlocked = AsyncMock(return_value=False)
    ledger.write_unlock = AsyncMock(return_value=True)
    return ledger


@pytest.fixture
def mock_event_ledger():
    """Event ledger double with no records"""
    ledger = AsyncMock()
    ledger.query_events = AsyncMock(return_value=[])
    ledger.count_events = AsyncMock(return_value=0)
    ledger.has_event_between = AsyncMock(return_value=False)
    return ledger


@pytest.fixture
def mock_xp_ledger():
    """XP ledger double that accepts every credit"""
    ledger = AsyncMock()
    ledger.credit_xp = AsyncMock(
        return_value=XPAwardResult(success=True, new_total_xp=50, new_level=1)
    )
    ledger.get_summary = AsyncMock(return_value=None)
    ledger.get_transactions = AsyncMock(return_value=[])
    return ledger


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
