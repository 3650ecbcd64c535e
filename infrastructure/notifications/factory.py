"""
Notification Service Factory
============================

Factory pattern for creating QA notification services based on configuration.
"""

import logging
from typing import Literal

from django.conf import settings

from .in_app_service import InAppNotificationService
from .interface import QANotificationServiceInterface
from .mock_service import MockNotificationService


logger = logging.getLogger(__name__)

NotificationBackend = Literal["in_app", "mock"]


class NotificationFactory:
    """
    Factory for creating QA notification services.

    Usage:
        # In settings.py
        PRODUCT_QA = {"NOTIFICATION_BACKEND": "in_app"}  # or 'mock' for testing

        # In your code
        notifications = NotificationFactory.create()
    """

    @staticmethod
    def create(backend: NotificationBackend | None = None) -> QANotificationServiceInterface:
        """
        Create a notification service instance.

        Args:
            backend: Notification backend type ('in_app' or 'mock')
                    If None, reads PRODUCT_QA["NOTIFICATION_BACKEND"]

        Returns:
            QANotificationServiceInterface implementation

        Raises:
            ValueError: If backend type is invalid
        """
        config = getattr(settings, "PRODUCT_QA", {})
        backend_type = backend or config.get("NOTIFICATION_BACKEND", "in_app")

        logger.info(f"Creating notification service backend: {backend_type}")

        if backend_type == "in_app":
            return InAppNotificationService()
        elif backend_type == "mock":
            return MockNotificationService()
        else:
            raise ValueError(f"Invalid notification backend: {backend_type}. Must be 'in_app' or 'mock'")
