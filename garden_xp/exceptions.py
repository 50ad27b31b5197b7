"""
Standardized exception hierarchy for garden-xp
Provides rich context and consistent logging for gamification failures
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import psycopg

logger = logging.getLogger(__name__)


class GardenXPError(Exception):
    """
    Base exception for all garden-xp errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - Structured context
    - Automatic logging

    Example:
        raise GardenXPError(
            message="Failed to unlock achievement",
            user_id="5f0c...",
            operation="write_unlock",
            context={"achievement_id": "first_seed"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logs and error payloads"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat()
        }


def _merge_context(extra: Dict[str, Any], kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Fold subclass-specific fields into a caller-supplied context"""
    merged = dict(kwargs.pop("context", None) or {})
    merged.update(extra)
    return merged


# ==========================================
# Validation Errors
# ==========================================

class ValidationError(GardenXPError):
    """
    Raised when a value fails validation

    Example:
        raise ValidationError(
            message="XP amount must be positive",
            field="amount",
            value=-5
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            context=_merge_context({"field": field, "value": value}, kwargs),
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(GardenXPError):
    """
    Base class for database-related errors
    """
    pass


class ConnectionError(DatabaseError):
    """Database connection failed"""

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(message=message, **kwargs)


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            context=_merge_context({"query": query}, kwargs),
            **kwargs
        )


# ==========================================
# Ledger (external collaborator) Errors
# ==========================================

class LedgerError(GardenXPError):
    """
    A remote ledger call failed or returned an error payload
    """

    def __init__(
        self,
        message: str,
        ledger: Optional[str] = None,
        **kwargs
    ):
        self.ledger = ledger
        super().__init__(
            message=message,
            context=_merge_context({"ledger": ledger}, kwargs),
            **kwargs
        )


class EventLedgerError(LedgerError):
    """Event ledger query failed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, ledger="event", **kwargs)


class UnlockLedgerError(LedgerError):
    """Unlock ledger read or write failed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, ledger="unlock", **kwargs)


class XPLedgerError(LedgerError):
    """XP ledger authority call failed"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, ledger="xp", **kwargs)


# ==========================================
# Catalog Errors
# ==========================================

class CatalogError(GardenXPError):
    """Achievement catalog is inconsistent or an id is unknown"""

    def __init__(
        self,
        message: str,
        achievement_id: Optional[str] = None,
        **kwargs
    ):
        self.achievement_id = achievement_id
        super().__init__(
            message=message,
            context=_merge_context({"achievement_id": achievement_id}, kwargs),
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(GardenXPError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            context=_merge_context({"config_key": config_key}, kwargs),
            **kwargs
        )


# ==========================================
# Helpers
# ==========================================

def wrap_database_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> GardenXPError:
    """
    Convert a psycopg exception into the garden-xp hierarchy

    Args:
        error: Original exception
        operation: Operation that was being performed
        user_id: User affected by the failure
        context: Additional context

    Returns:
        ConnectionError, QueryError or GardenXPError

    Example:
        try:
            await cur.execute(query, params)
        except psycopg.Error as e:
            raise wrap_database_exception(e, operation="unlock_achievement", user_id=user_id)
    """
    if isinstance(error, psycopg.OperationalError):
        return ConnectionError(
            message=f"Database connection failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    return GardenXPError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
