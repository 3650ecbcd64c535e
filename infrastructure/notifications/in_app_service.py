"""
In-App Notification Service
===========================

Concrete implementation of QANotificationServiceInterface that stores each
notification as a SellerNotification row for the seller's notification centre.
"""

import logging

from django.db import DatabaseError

from .interface import NotificationException, NotificationKind, QANotificationServiceInterface


logger = logging.getLogger(__name__)

SELLER_QA_STATUS_URL = "/seller/product-status-qa"
SELLER_PRODUCTS_URL = "/seller/products"


class InAppNotificationService(QANotificationServiceInterface):
    """Seller notification centre backed by the database."""

    def notify_sample_request(self, seller_id: str, listing_id: str, listing_name: str = "") -> None:
        self._create(
            seller_id,
            listing_id,
            kind=NotificationKind.SAMPLE_REQUEST,
            title="Sample Requested",
            message=(
                f'Your product "{listing_name}" has been digitally approved. '
                "Please submit a physical sample for quality review."
            ),
            action_url=SELLER_QA_STATUS_URL,
        )

    def notify_product_approved(self, seller_id: str, listing_id: str, listing_name: str = "") -> None:
        self._create(
            seller_id,
            listing_id,
            kind=NotificationKind.APPROVED,
            title="Product Approved!",
            message=(
                f'Great news! Your product "{listing_name}" has passed quality review '
                "and is now live on the marketplace."
            ),
            action_url=SELLER_PRODUCTS_URL,
        )

    def notify_product_rejected(
        self, seller_id: str, listing_id: str, reason: str, stage: str, listing_name: str = ""
    ) -> None:
        self._create(
            seller_id,
            listing_id,
            kind=NotificationKind.REJECTED,
            title="Product Rejected",
            message=f'Your product "{listing_name}" was rejected during {stage} review. Reason: {reason}',
            action_url=SELLER_QA_STATUS_URL,
        )

    def notify_revision_requested(self, seller_id: str, listing_id: str, reason: str, listing_name: str = "") -> None:
        self._create(
            seller_id,
            listing_id,
            kind=NotificationKind.REVISION_REQUESTED,
            title="Revision Requested",
            message=f'Please update your product "{listing_name}". Feedback: {reason}',
            action_url=SELLER_PRODUCTS_URL,
        )

    def _create(self, seller_id: str, listing_id: str, kind: str, title: str, message: str, action_url: str):
        from product_qa.models import SellerNotification

        try:
            notification = SellerNotification.objects.create(
                seller_id=str(seller_id),
                type=kind,
                title=title,
                message=message,
                action_url=action_url,
                action_data={"productId": str(listing_id)},
                priority="high",
            )
        except DatabaseError as e:
            logger.error(f"Failed to store {kind} notification for seller {seller_id}: {e}")
            raise NotificationException(f"Could not store notification: {e}") from e

        logger.info(f"Stored {kind} notification {notification.pk} for seller {seller_id}")
        return notification
