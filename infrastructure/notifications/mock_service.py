"""
Mock Notification Service
=========================

Mock implementation of QANotificationServiceInterface for testing.
Logs notification calls instead of delivering them.
"""

import logging
from typing import List, Optional

from .interface import NotificationException, NotificationKind, QANotification, QANotificationServiceInterface


logger = logging.getLogger(__name__)


class MockNotificationService(QANotificationServiceInterface):
    """
    Mock notification service for testing and development.

    Instead of delivering, this service:
        - Logs every call
        - Stores delivered notifications in memory for verification
        - Raises NotificationException when told to fail
    """

    def __init__(self):
        self.sent: List[QANotification] = []
        self.fail_with: Optional[Exception] = None

    def _record(self, notification: QANotification) -> None:
        if self.fail_with is not None:
            raise NotificationException(str(self.fail_with)) from self.fail_with
        logger.info(
            f"[MOCK NOTIFICATION] {notification.kind} to seller {notification.seller_id} "
            f"for listing {notification.listing_id}"
        )
        self.sent.append(notification)

    def notify_sample_request(self, seller_id: str, listing_id: str, listing_name: str = "") -> None:
        self._record(QANotification(NotificationKind.SAMPLE_REQUEST, str(seller_id), str(listing_id), listing_name))

    def notify_product_approved(self, seller_id: str, listing_id: str, listing_name: str = "") -> None:
        self._record(QANotification(NotificationKind.APPROVED, str(seller_id), str(listing_id), listing_name))

    def notify_product_rejected(
        self, seller_id: str, listing_id: str, reason: str, stage: str, listing_name: str = ""
    ) -> None:
        self._record(
            QANotification(
                NotificationKind.REJECTED, str(seller_id), str(listing_id), listing_name, reason=reason, stage=stage
            )
        )

    def notify_revision_requested(self, seller_id: str, listing_id: str, reason: str, listing_name: str = "") -> None:
        self._record(
            QANotification(
                NotificationKind.REVISION_REQUESTED, str(seller_id), str(listing_id), listing_name, reason=reason
            )
        )

    def clear(self):
        """Forget delivered notifications and any injected failure."""
        self.sent.clear()
        self.fail_with = None

    def kinds(self) -> List[str]:
        return [n.kind for n in self.sent]
