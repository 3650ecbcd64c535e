"""
Notification Dispatcher
=======================

Turns a completed QA transition into at most one seller notification and hands
it off without waiting for delivery. A failed hand-off never reaches the
caller: it is wrapped in NotificationError, logged and counted.
"""

from typing import Optional

from asgiref.sync import sync_to_async

from infrastructure.notifications import NotificationKind, QANotification, QANotificationServiceInterface
from product_qa.domain.exceptions import NotificationError
from product_qa.domain.records import QARecord
from product_qa.domain.state_machine import QAOperation
from product_qa.infra.observability.metrics import qa_notification_failures

from .base import BaseService


DELIVERY_CELERY = "celery"
DELIVERY_INLINE = "inline"

NOTIFICATION_KINDS = {
    QAOperation.APPROVE_FOR_SAMPLE: NotificationKind.SAMPLE_REQUEST,
    QAOperation.PASS_QUALITY: NotificationKind.APPROVED,
    QAOperation.REJECT_DIGITAL: NotificationKind.REJECTED,
    QAOperation.FAIL_QUALITY: NotificationKind.REJECTED,
    QAOperation.REQUEST_REVISION: NotificationKind.REVISION_REQUESTED,
}


def build_notification(operation: str, record: QARecord) -> Optional[QANotification]:
    """Notification owed to the seller after operation produced record, if any."""
    kind = NOTIFICATION_KINDS.get(operation)
    if kind is None:
        return None

    reason = None
    stage = None
    if kind == NotificationKind.REJECTED:
        reason = record.rejection_reason
        stage = record.rejection_stage
    elif kind == NotificationKind.REVISION_REQUESTED:
        reason = record.revision_reason

    return QANotification(
        kind=kind,
        seller_id=record.seller_id,
        listing_id=record.listing_id,
        listing_name=record.listing_name,
        reason=reason,
        stage=stage,
    )


class NotificationDispatcher(BaseService):
    """
    Fire-and-forget delivery of QA notifications.

    Args:
        notification_service: Used for inline delivery
        delivery: 'celery' to enqueue a worker task, 'inline' to call the service directly
    """

    def __init__(self, notification_service: QANotificationServiceInterface, delivery: str = DELIVERY_CELERY):
        super().__init__()
        if delivery not in (DELIVERY_CELERY, DELIVERY_INLINE):
            raise ValueError(f"Invalid notification delivery: {delivery}. Must be 'celery' or 'inline'")
        self.notification_service = notification_service
        self.delivery = delivery

    async def dispatch(self, operation: str, record: QARecord) -> bool:
        """
        Send the notification owed for operation, if any.

        Returns:
            True if a notification was handed off, False if none was owed or the hand-off failed
        """
        notification = build_notification(operation, record)
        if notification is None:
            return False

        try:
            await self._send(notification)
        except Exception as e:
            error = NotificationError(
                f"Could not send {notification.kind} for listing {notification.listing_id}: {e}",
                kind=notification.kind,
                listing_id=notification.listing_id,
            )
            self.logger.error(str(error))
            qa_notification_failures.labels(kind=notification.kind).inc()
            return False

        self.logger.info(
            f"Sent {notification.kind} for listing {notification.listing_id} "
            f"to seller {notification.seller_id} ({self.delivery})"
        )
        return True

    async def _send(self, notification: QANotification) -> None:
        if self.delivery == DELIVERY_CELERY:
            from product_qa.tasks import deliver_qa_notification

            await sync_to_async(deliver_qa_notification.delay)(notification.to_dict())
        else:
            await sync_to_async(self.notification_service.deliver)(notification)
