"""Sentry configuration and the error channel for degraded failures."""

import logging
import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from garden_xp.config import (
    ENABLE_SENTRY,
    SENTRY_DSN,
    SENTRY_ENVIRONMENT,
    SENTRY_TRACES_SAMPLE_RATE,
)
from garden_xp.exceptions import ValidationError

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """
    Initialize Sentry SDK for error tracking.

    Configures Sentry with:
    - Logging integration for breadcrumbs
    - Environment-specific configuration
    - Release tracking

    Environment variables:
        SENTRY_DSN: Sentry project DSN (required)
        SENTRY_ENVIRONMENT: Environment name (development, staging, production)
        SENTRY_TRACES_SAMPLE_RATE: Percentage of transactions to sample (0.0-1.0)
        ENABLE_SENTRY: Feature flag to enable/disable Sentry
        GIT_COMMIT_SHA: Git commit SHA for release tracking (optional)

    Returns:
        True if Sentry was initialized
    """
    if not ENABLE_SENTRY:
        logger.info("Sentry is disabled (ENABLE_SENTRY=false)")
        return False

    if not SENTRY_DSN:
        logger.warning("Sentry DSN not configured - error tracking disabled")
        return False

    release = os.getenv("GIT_COMMIT_SHA")
    if release:
        release = f"garden-xp@{release[:7]}"
    else:
        release = "garden-xp@dev"

    logging_integration = LoggingIntegration(
        level=logging.INFO,  # Capture info and above as breadcrumbs
        event_level=logging.ERROR,  # Send errors and above as events
    )

    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        release=release,
        integrations=[logging_integration],
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        attach_stacktrace=True,
        send_default_pii=False,
        before_send=_before_send,
    )

    logger.info(
        f"Sentry initialized: environment={SENTRY_ENVIRONMENT}, "
        f"release={release}, traces_sample_rate={SENTRY_TRACES_SAMPLE_RATE}"
    )
    return True


def _before_send(event, hint):
    """
    Filter events before sending to Sentry.

    Caller-side validation failures are absorbed by the engine and are not
    worth an event.

    Returns:
        The event, or None to drop it
    """
    if "exc_info" in hint:
        exc_type, exc_value, tb = hint["exc_info"]
        if isinstance(exc_value, ValidationError):
            return None

    return event


def capture_exception(exception: Exception, **extra_context: Any) -> None:
    """Report a degraded failure with extra context as tags"""
    if not ENABLE_SENTRY:
        return

    try:
        with sentry_sdk.new_scope() as scope:
            for key, value in extra_context.items():
                scope.set_tag(key, str(value))
            sentry_sdk.capture_exception(exception)
    except Exception as e:
        logger.error(f"Failed to capture exception in Sentry: {e}")


def shutdown_sentry() -> None:
    """
    Flush pending events and close the Sentry client.

    Should be called during application shutdown.
    """
    client = sentry_sdk.get_client()
    if client.is_active():
        logger.info("Flushing Sentry events before shutdown...")
        client.close(timeout=2.0)
        logger.info("Sentry shutdown complete")
