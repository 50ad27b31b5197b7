"""
Prometheus metrics for the achievement engine.

Organized by category:
- Evaluation: checks per action type and their latency
- Unlocks: newly unlocked achievements, XP paid out, lost unlock races
- Errors: degraded collaborator failures by component
"""

import logging
from prometheus_client import Counter, Histogram

from garden_xp.config import ENABLE_METRICS

logger = logging.getLogger(__name__)

# =============================================================================
# Evaluation Metrics
# =============================================================================

achievement_checks_total = Counter(
    "achievement_checks_total",
    "Total achievement evaluations triggered by user actions",
    ["action_type"],
)

achievement_check_duration_seconds = Histogram(
    "achievement_check_duration_seconds",
    "Time spent evaluating achievements for one action",
    ["action_type"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# =============================================================================
# Unlock Metrics
# =============================================================================

achievements_unlocked_total = Counter(
    "achievements_unlocked_total",
    "Total achievements unlocked",
    ["achievement_id", "category"],
)

achievement_xp_awarded_total = Counter(
    "achievement_xp_awarded_total",
    "Total XP credited for achievement unlocks",
)

achievement_unlock_conflicts_total = Counter(
    "achievement_unlock_conflicts_total",
    "Unlock attempts that found the achievement already unlocked",
)

# =============================================================================
# Error Metrics
# =============================================================================

achievement_errors_total = Counter(
    "achievement_errors_total",
    "Degraded failures by component",
    ["component"],  # component: progress/engine/unlock/xp
)


# =============================================================================
# Helper Functions
# =============================================================================

def track_check(action_type: str) -> None:
    if ENABLE_METRICS:
        achievement_checks_total.labels(action_type=action_type).inc()


def observe_check_duration(action_type: str, seconds: float) -> None:
    if ENABLE_METRICS:
        achievement_check_duration_seconds.labels(action_type=action_type).observe(seconds)


def track_unlock(achievement_id: str, category: str, xp_reward: int) -> None:
    """Record one unlock and the XP credited for it"""
    if ENABLE_METRICS:
        achievements_unlocked_total.labels(
            achievement_id=achievement_id,
            category=category,
        ).inc()
        achievement_xp_awarded_total.inc(xp_reward)


def track_unlock_conflict() -> None:
    if ENABLE_METRICS:
        achievement_unlock_conflicts_total.inc()


def track_error(component: str) -> None:
    if ENABLE_METRICS:
        achievement_errors_total.labels(component=component).inc()
