"""
Notification Service Abstraction Layer
======================================

Provides a unified interface for seller-facing QA notifications.
"""

from .factory import NotificationFactory
from .in_app_service import InAppNotificationService
from .interface import NotificationException, NotificationKind, QANotification, QANotificationServiceInterface
from .mock_service import MockNotificationService

__all__ = [
    "QANotificationServiceInterface",
    "QANotification",
    "NotificationKind",
    "NotificationException",
    "InAppNotificationService",
    "MockNotificationService",
    "NotificationFactory",
]
