"""Tests for application setup and the database pool manager"""
import pytest
from unittest.mock import AsyncMock, patch

from garden_xp import main
from garden_xp.db.connection import Database
from garden_xp.services.container import ServiceContainer


@pytest.mark.asyncio
async def test_init_app_wires_container():
    with patch("garden_xp.main.validate_config") as mock_validate, \
            patch("garden_xp.main.init_sentry") as mock_sentry, \
            patch("garden_xp.main.db.init_pool", AsyncMock()) as mock_pool:
        container = await main.init_app()

    mock_validate.assert_called_once()
    mock_sentry.assert_called_once()
    mock_pool.assert_awaited_once()
    assert isinstance(container, ServiceContainer)
    assert container.store is None


@pytest.mark.asyncio
async def test_shutdown_app_closes_pool_and_flushes_sentry():
    with patch("garden_xp.main.db.close_pool", AsyncMock()) as mock_close, \
            patch("garden_xp.main.shutdown_sentry") as mock_shutdown:
        await main.shutdown_app()

    mock_close.assert_awaited_once()
    mock_shutdown.assert_called_once()


@pytest.mark.asyncio
async def test_connection_requires_initialized_pool():
    database = Database("postgresql://localhost/garden")

    with pytest.raises(RuntimeError):
        async with database.connection():
            pass


@pytest.mark.asyncio
async def test_close_pool_without_pool_is_noop():
    database = Database("postgresql://localhost/garden")

    await database.close_pool()

    assert database._pool is None
