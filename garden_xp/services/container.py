"""
Service Container - Dependency Injection Container

Simple DI container for the gamification services and their ledgers.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    When an in-memory `store` is injected it backs all three ledgers;
    otherwise the Postgres ledgers run against the global pool in
    garden_xp.db.connection.
    """

    # Infrastructure dependencies (injected)
    store: Optional[object] = None  # InMemoryLedgerStore instance
    achievement_catalog: Optional[object] = None  # AchievementCatalog (default catalog if None)

    # Services (lazy-loaded via properties)
    _event_ledger: Optional[object] = field(default=None, init=False, repr=False)
    _unlock_ledger: Optional[object] = field(default=None, init=False, repr=False)
    _xp_ledger: Optional[object] = field(default=None, init=False, repr=False)
    _progress_calculator: Optional[object] = field(default=None, init=False, repr=False)
    _achievement_engine: Optional[object] = field(default=None, init=False, repr=False)
    _xp_service: Optional[object] = field(default=None, init=False, repr=False)
    _gamification_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def catalog(self):
        """Get AchievementCatalog (built once)"""
        if self.achievement_catalog is None:
            from garden_xp.gamification.catalog import build_default_catalog
            self.achievement_catalog = build_default_catalog()
            logger.debug(f"Default achievement catalog loaded ({len(self.achievement_catalog)} achievements)")
        return self.achievement_catalog

    @property
    def event_ledger(self):
        """Get EventLedger instance (lazy-loaded)"""
        if self._event_ledger is None:
            if self.store is not None:
                self._event_ledger = self.store
            else:
                from garden_xp.gamification.ledgers import PostgresEventLedger
                self._event_ledger = PostgresEventLedger()
            logger.debug("EventLedger instantiated")
        return self._event_ledger

    @property
    def unlock_ledger(self):
        """Get UnlockLedger instance (lazy-loaded)"""
        if self._unlock_ledger is None:
            if self.store is not None:
                self._unlock_ledger = self.store
            else:
                from garden_xp.gamification.ledgers import PostgresUnlockLedger
                self._unlock_ledger = PostgresUnlockLedger()
            logger.debug("UnlockLedger instantiated")
        return self._unlock_ledger

    @property
    def xp_ledger(self):
        """Get XPLedger instance (lazy-loaded)"""
        if self._xp_ledger is None:
            if self.store is not None:
                self._xp_ledger = self.store
            else:
                from garden_xp.gamification.ledgers import PostgresXPLedger
                self._xp_ledger = PostgresXPLedger()
            logger.debug("XPLedger instantiated")
        return self._xp_ledger

    @property
    def progress_calculator(self):
        """Get ProgressCalculator instance (lazy-loaded)"""
        if self._progress_calculator is None:
            from garden_xp.gamification.progress import ProgressCalculator
            self._progress_calculator = ProgressCalculator(self.event_ledger, self.unlock_ledger)
            logger.debug("ProgressCalculator instantiated")
        return self._progress_calculator

    @property
    def achievement_engine(self):
        """Get AchievementEngine instance (lazy-loaded)"""
        if self._achievement_engine is None:
            from garden_xp.gamification.achievement_engine import AchievementEngine
            self._achievement_engine = AchievementEngine(
                self.catalog,
                self.progress_calculator,
                self.unlock_ledger,
                self.xp_ledger,
            )
            logger.debug("AchievementEngine instantiated")
        return self._achievement_engine

    @property
    def xp_service(self):
        """Get XPService instance (lazy-loaded)"""
        if self._xp_service is None:
            from garden_xp.gamification.xp_system import XPService
            self._xp_service = XPService(self.xp_ledger, self.event_ledger)
            logger.debug("XPService instantiated")
        return self._xp_service

    @property
    def gamification_service(self):
        """Get GamificationService instance (lazy-loaded)"""
        if self._gamification_service is None:
            from garden_xp.services.gamification_service import GamificationService
            self._gamification_service = GamificationService(self.xp_service, self.achievement_engine)
            logger.debug("GamificationService instantiated")
        return self._gamification_service


# Global container instance (initialized in main.py)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Returns:
        ServiceContainer: The global container instance

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() in main.py before using services."
        )
    return _container


def init_container(
    store: Optional[object] = None,
    achievement_catalog: Optional[object] = None
) -> ServiceContainer:
    """
    Initialize the global service container.

    Should be called once in main.py after infrastructure setup.

    Args:
        store: InMemoryLedgerStore to use instead of Postgres
        achievement_catalog: Catalog override (default catalog if None)

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(
        store=store,
        achievement_catalog=achievement_catalog
    )

    logger.info("Service container initialized")
    return _container
