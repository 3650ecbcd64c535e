"""
Domain Events for Product QA.

Every successful status change is announced through the ``qa_status_changed``
Django signal. When PRODUCT_QA["PUBLISH_EVENTS"] is on, the same change is
published to the Redis event bus as ``product_qa.status_changed``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.dispatch import Signal

from .records import QARecord


logger = logging.getLogger(__name__)

# ===== Event Signals =====

qa_status_changed = Signal()  # record=QARecord, previous_status=str|None, operation=str, actor_id=str

STATUS_CHANGED_EVENT = "product_qa.status_changed"


# ===== Event Data Classes =====


@dataclass
class QAStatusChangedEvent:
    """Event data for a completed QA transition."""

    record: QARecord
    previous_status: Optional[str]
    operation: str
    actor_id: str

    def to_payload(self) -> dict:
        return {
            "listing_id": self.record.listing_id,
            "seller_id": self.record.seller_id,
            "previous_status": self.previous_status,
            "status": self.record.status,
            "approval_status": self.record.approval_status,
            "operation": self.operation,
            "actor_id": self.actor_id,
        }


# ===== Event Dispatcher Helper =====


class EventDispatcher:
    """
    Helper class for dispatching QA domain events.

    Centralizes event dispatching logic and provides logging.
    """

    @staticmethod
    def dispatch_status_changed(record: QARecord, previous_status: Optional[str], operation: str, actor_id: str):
        """Dispatch status changed event."""
        from infrastructure.events.redis_event_bus import get_event_bus

        event = QAStatusChangedEvent(
            record=record, previous_status=previous_status, operation=operation, actor_id=str(actor_id)
        )
        logger.info(
            f"[EVENT] QA status changed: {record.listing_id} "
            f"{previous_status or '-'} -> {record.status} ({operation} by {actor_id})"
        )

        # The write is already committed; a failing receiver must not turn it into an error
        responses = qa_status_changed.send_robust(
            sender=QARecord,
            record=record,
            previous_status=previous_status,
            operation=operation,
            actor_id=event.actor_id,
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    f"Receiver {getattr(receiver, '__qualname__', receiver)} failed on "
                    f"{STATUS_CHANGED_EVENT} for {record.listing_id}: {response}",
                    exc_info=response,
                )

        if not getattr(settings, "PRODUCT_QA", {}).get("PUBLISH_EVENTS", False):
            return

        # Redis Event Bus
        try:
            get_event_bus().publish(STATUS_CHANGED_EVENT, event.to_payload())
        except Exception as e:
            logger.error(f"Failed to publish {STATUS_CHANGED_EVENT} event: {e}")
