"""
Service Layer Package

This package contains business logic services that sit between the app's
action handlers and the gamification engine.

Core Services:
- GamificationService: XP for actions, achievement checks, daily reward
"""

from garden_xp.services.container import ServiceContainer, get_container, init_container

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
]
