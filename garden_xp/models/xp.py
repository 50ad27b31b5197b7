"""XP ledger models"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class XPSummary(BaseModel):
    """User's XP totals as reported by the leveling authority"""
    total_xp: int = 0
    current_level: int = 1
    xp_to_next_level: int = 100
    xp_progress: int = 0


class XPAwardResult(BaseModel):
    """Result of crediting XP"""
    success: bool
    new_total_xp: Optional[int] = None
    new_level: Optional[int] = None
    leveled_up: bool = False
    error: Optional[str] = None


class XPTransaction(BaseModel):
    """One XP credit; also the event ledger row for the action"""
    id: str
    user_id: str
    amount: int
    action_type: str
    description: str
    context_data: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
