"""Event ledger models"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class EventRecord(BaseModel):
    """One append-only action record from the event ledger"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    action_type: str
    context_data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @field_validator("context_data", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value or {}

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from the store are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ActionContext(BaseModel):
    """
    Typed view over the context a caller passes with an action.

    Known keys are validated; anything else is preserved as extra fields so
    callers can keep sending their full payload.
    """
    model_config = ConfigDict(extra="allow")

    weather_condition: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("weather_condition", "weather")
    )
    plant_id: Optional[str] = None
    garden_owner_id: Optional[str] = None

    @field_validator("weather_condition", "plant_id", "garden_owner_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)
