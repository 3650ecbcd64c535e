"""
Dependency Injection Container
================================

Simple service locator pattern for managing infrastructure dependencies.
Provides centralized access to the QA record store, the notification service
and the domain services built on them, all through their abstract interfaces.

Usage:
    from infrastructure.container import container

    engine = container.transition_engine()
    view = container.materializer(actor)
"""

import logging
from typing import Optional

from django.conf import settings

from .notifications import NotificationFactory, QANotificationServiceInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure dependencies.

    Implements lazy initialization and caching of service instances.
    Singleton pattern.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._record_store = None
            self._notification_service: Optional[QANotificationServiceInterface] = None

            # Domain Services
            self._notification_dispatcher = None
            self._transition_engine = None

            self._initialized = True
            logger.info("Service container initialized")

    @staticmethod
    def _config() -> dict:
        return getattr(settings, "PRODUCT_QA", {})

    def record_store(self, backend: Optional[str] = None):
        """
        Get QA record store instance.

        Args:
            backend: Store backend type ('django' or 'memory')
                    If None, uses configuration from settings

        Returns:
            QARecordStoreInterface implementation (cached)
        """
        if self._record_store is None or backend is not None:
            from product_qa.infra.record_store import QARecordStoreFactory

            self._record_store = QARecordStoreFactory.create(backend)
            self._transition_engine = None
            logger.debug(f"Created record store: {type(self._record_store).__name__}")

        return self._record_store

    def notification_service(self, backend: Optional[str] = None) -> QANotificationServiceInterface:
        """
        Get notification service instance.

        Args:
            backend: Notification backend type ('in_app' or 'mock')
                    If None, uses configuration from settings

        Returns:
            QANotificationServiceInterface implementation (cached)
        """
        if self._notification_service is None or backend is not None:
            self._notification_service = NotificationFactory.create(backend)
            self._notification_dispatcher = None
            self._transition_engine = None
            logger.debug(f"Created notification service: {type(self._notification_service).__name__}")

        return self._notification_service

    def notification_dispatcher(self):
        """Get NotificationDispatcher instance."""
        if self._notification_dispatcher is None:
            from product_qa.domain.services import NotificationDispatcher

            self._notification_dispatcher = NotificationDispatcher(
                notification_service=self.notification_service(),
                delivery=self._config().get("NOTIFICATION_DELIVERY", "celery"),
            )
            logger.debug("Created NotificationDispatcher")
        return self._notification_dispatcher

    def transition_engine(self):
        """Get QATransitionEngine instance."""
        if self._transition_engine is None:
            from product_qa.domain.services import QATransitionEngine

            # QATransitionEngine depends on the record store and the dispatcher
            self._transition_engine = QATransitionEngine(
                store=self.record_store(),
                dispatcher=self.notification_dispatcher(),
                timeout=self._config().get("STORE_TIMEOUT_SECONDS"),
            )
            logger.debug("Created QATransitionEngine")
        return self._transition_engine

    def materializer(self, actor):
        """
        Build a fresh view materializer for actor.

        Materializers hold one actor's cache, so they are never shared.
        """
        from product_qa.domain.services import QAViewMaterializer

        return QAViewMaterializer(store=self.record_store(), engine=self.transition_engine(), actor=actor)

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._record_store = None
        self._notification_service = None
        self._notification_dispatcher = None
        self._transition_engine = None
        logger.info("Service container reset")

    def configure_for_testing(self):
        """
        Configure container with in-process services for testing.

        Sets up:
            - In-memory record store
            - Mock notification service
            - Inline notification delivery
        """
        from product_qa.domain.services import NotificationDispatcher
        from product_qa.infra.record_store import QARecordStoreFactory

        self.reset()
        self._record_store = QARecordStoreFactory.create("memory")
        self._notification_service = NotificationFactory.create("mock")
        self._notification_dispatcher = NotificationDispatcher(self._notification_service, delivery="inline")
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_transition_engine():
    """Get transition engine from global container."""
    return container.transition_engine()


def get_notification_service() -> QANotificationServiceInterface:
    """Get notification service from global container."""
    return container.notification_service()
