"""Tests for the exception hierarchy (garden_xp/exceptions.py)"""
import pytest
import psycopg

from garden_xp.exceptions import (
    CatalogError,
    ConfigurationError,
    ConnectionError,
    DatabaseError,
    EventLedgerError,
    GardenXPError,
    LedgerError,
    QueryError,
    UnlockLedgerError,
    ValidationError,
    XPLedgerError,
    wrap_database_exception,
)


class TestGardenXPError:

    def test_base_fields(self):
        error = GardenXPError(
            message="Failed to unlock achievement",
            user_id="user",
            operation="write_unlock",
            context={"achievement_id": "first_seed"},
        )

        assert str(error) == "Failed to unlock achievement"
        assert error.user_id == "user"
        assert error.request_id
        assert error.timestamp.tzinfo is not None

    def test_to_dict(self):
        error = GardenXPError("boom", operation="credit_xp", request_id="req-1")

        data = error.to_dict()

        assert data["error"] == "GardenXPError"
        assert data["message"] == "boom"
        assert data["request_id"] == "req-1"
        assert data["operation"] == "credit_xp"

    def test_logs_on_creation(self, caplog):
        with caplog.at_level("ERROR"):
            GardenXPError("logged failure")

        assert "logged failure" in caplog.text


class TestSubclasses:

    def test_validation_error_context(self):
        error = ValidationError("XP amount must be positive", field="amount", value=-5)

        assert error.context == {"field": "amount", "value": -5}

    def test_ledger_errors_carry_ledger_name(self):
        assert EventLedgerError("x").ledger == "event"
        assert UnlockLedgerError("x").ledger == "unlock"
        assert XPLedgerError("x").ledger == "xp"
        assert isinstance(XPLedgerError("x"), LedgerError)

    def test_ledger_error_merges_context(self):
        error = UnlockLedgerError("x", context={"achievement_id": "first_seed"})

        assert error.context == {"achievement_id": "first_seed", "ledger": "unlock"}

    def test_catalog_and_config_errors(self):
        assert CatalogError("dup", achievement_id="a").context["achievement_id"] == "a"
        assert ConfigurationError("bad", config_key="DATABASE_URL").config_key == "DATABASE_URL"

    def test_hierarchy(self):
        assert issubclass(QueryError, DatabaseError)
        assert issubclass(ConnectionError, DatabaseError)
        assert issubclass(DatabaseError, GardenXPError)


class TestWrapDatabaseException:

    def test_operational_error_becomes_connection_error(self):
        original = psycopg.OperationalError("connection refused")

        wrapped = wrap_database_exception(original, operation="init_pool")

        assert isinstance(wrapped, ConnectionError)
        assert wrapped.cause is original

    def test_other_psycopg_error_becomes_query_error(self):
        wrapped = wrap_database_exception(psycopg.Error("syntax"), operation="count_events", user_id="u")

        assert isinstance(wrapped, QueryError)
        assert wrapped.user_id == "u"

    def test_unknown_error_becomes_base_error(self):
        wrapped = wrap_database_exception(ValueError("odd"), operation="get_events")

        assert type(wrapped) is GardenXPError
        assert "get_events failed" in wrapped.message
