"""
Product QA Celery Tasks

Delivers seller notifications produced by QA transitions.
"""

import logging

from celery import shared_task

from infrastructure.notifications import NotificationException, QANotification


logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, queue="notification_tasks")
def deliver_qa_notification(self, payload: dict):
    """
    Celery task to deliver one QA notification to a seller.

    Args:
        payload: QANotification.to_dict() output

    Returns:
        dict: Delivery result
    """
    from infrastructure.container import container

    notification = QANotification.from_dict(payload)
    logger.info(f"Delivering {notification.kind} for listing {notification.listing_id}")

    try:
        container.notification_service().deliver(notification)
    except NotificationException as e:
        logger.error(f"Error delivering {notification.kind} for listing {notification.listing_id}: {e}")
        # Retry with exponential backoff
        try:
            raise self.retry(countdown=30 * (2**self.request.retries))
        except self.MaxRetriesExceededError:
            return {"success": False, "kind": notification.kind, "error": f"Max retries exceeded: {e}"}

    return {"success": True, "kind": notification.kind, "listing_id": notification.listing_id}
