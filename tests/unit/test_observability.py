"""Tests for Sentry and Prometheus helpers (garden_xp/observability/)"""
import pytest
from unittest.mock import patch

from garden_xp.observability import metrics, sentry_config


def _sample(counter, **labels):
    return counter.labels(**labels)._value.get() if labels else counter._value.get()


def test_track_unlock_increments_counters(monkeypatch):
    monkeypatch.setattr(metrics, "ENABLE_METRICS", True)
    before_unlocks = _sample(metrics.achievements_unlocked_total, achievement_id="first_seed", category="milestones")
    before_xp = _sample(metrics.achievement_xp_awarded_total)

    metrics.track_unlock("first_seed", "milestones", 50)

    assert _sample(metrics.achievements_unlocked_total, achievement_id="first_seed", category="milestones") == before_unlocks + 1
    assert _sample(metrics.achievement_xp_awarded_total) == before_xp + 50


def test_metrics_disabled_is_noop(monkeypatch):
    monkeypatch.setattr(metrics, "ENABLE_METRICS", False)
    before = _sample(metrics.achievement_errors_total, component="progress")

    metrics.track_error("progress")

    assert _sample(metrics.achievement_errors_total, component="progress") == before


def test_init_sentry_disabled(monkeypatch):
    monkeypatch.setattr(sentry_config, "ENABLE_SENTRY", False)

    with patch("garden_xp.observability.sentry_config.sentry_sdk.init") as mock_init:
        assert sentry_config.init_sentry() is False
        mock_init.assert_not_called()


def test_init_sentry_without_dsn(monkeypatch):
    monkeypatch.setattr(sentry_config, "ENABLE_SENTRY", True)
    monkeypatch.setattr(sentry_config, "SENTRY_DSN", "")

    with patch("garden_xp.observability.sentry_config.sentry_sdk.init") as mock_init:
        assert sentry_config.init_sentry() is False
        mock_init.assert_not_called()


def test_capture_exception_disabled(monkeypatch):
    monkeypatch.setattr(sentry_config, "ENABLE_SENTRY", False)

    with patch("garden_xp.observability.sentry_config.sentry_sdk.capture_exception") as mock_capture:
        sentry_config.capture_exception(RuntimeError("x"), user_id="u")
        mock_capture.assert_not_called()


def test_capture_exception_enabled(monkeypatch):
    monkeypatch.setattr(sentry_config, "ENABLE_SENTRY", True)
    error = RuntimeError("ledger down")

    with patch("garden_xp.observability.sentry_config.sentry_sdk.capture_exception") as mock_capture:
        sentry_config.capture_exception(error, user_id="u", component="progress")
        mock_capture.assert_called_once_with(error)


def test_before_send_drops_validation_errors():
    from garden_xp.exceptions import ValidationError

    error = ValidationError("bad amount", field="amount", value=0)
    hint = {"exc_info": (ValidationError, error, None)}

    assert sentry_config._before_send({"event_id": "1"}, hint) is None
    assert sentry_config._before_send({"event_id": "2"}, {}) == {"event_id": "2"}


def test_before_send_keeps_malformed_row_errors():
    from pydantic import ValidationError as PydanticValidationError
    from garden_xp.models.event import EventRecord

    with pytest.raises(PydanticValidationError) as exc_info:
        EventRecord(user_id="u", action_type="plant_seed", created_at=None)
    hint = {"exc_info": (exc_info.type, exc_info.value, None)}

    assert sentry_config._before_send({"event_id": "3"}, hint) == {"event_id": "3"}
