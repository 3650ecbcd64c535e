"""
QA Notification Service Interface
=================================

Abstract base class defining the contract for seller-facing QA notifications.
Delivery is fire-and-forget from the caller's point of view: implementations
raise NotificationException on failure and the caller decides what to log.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Optional


class NotificationKind:
    SAMPLE_REQUEST = "product_sample_request"
    APPROVED = "product_approved"
    REJECTED = "product_rejected"
    REVISION_REQUESTED = "product_revision_requested"

    ALL = (SAMPLE_REQUEST, APPROVED, REJECTED, REVISION_REQUESTED)


@dataclass(frozen=True)
class QANotification:
    """
    One seller notification produced by a QA transition.

    Attributes:
        kind: One of NotificationKind
        seller_id: Recipient seller
        listing_id: Listing the notification is about
        listing_name: Display name used in the message text
        reason: Rejection or revision feedback
        stage: Review stage of a rejection ('digital' or 'physical')
    """

    kind: str
    seller_id: str
    listing_id: str
    listing_name: str = ""
    reason: Optional[str] = None
    stage: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "QANotification":
        return cls(**data)


class QANotificationServiceInterface(ABC):
    """
    Abstract interface for QA notifications.

    Concrete implementations:
        - InAppNotificationService: Writes SellerNotification rows
        - MockNotificationService: Records calls in memory for tests
    """

    @abstractmethod
    def notify_sample_request(self, seller_id: str, listing_id: str, listing_name: str = "") -> None:
        """Tell the seller the listing passed digital review and a sample is needed."""
        pass

    @abstractmethod
    def notify_product_approved(self, seller_id: str, listing_id: str, listing_name: str = "") -> None:
        """Tell the seller the listing passed quality review and is live."""
        pass

    @abstractmethod
    def notify_product_rejected(
        self, seller_id: str, listing_id: str, reason: str, stage: str, listing_name: str = ""
    ) -> None:
        """Tell the seller the listing was rejected at the given review stage."""
        pass

    @abstractmethod
    def notify_revision_requested(self, seller_id: str, listing_id: str, reason: str, listing_name: str = "") -> None:
        """Tell the seller the moderator wants changes to the listing."""
        pass

    def deliver(self, notification: QANotification) -> None:
        """
        Route a QANotification to the matching notify_* method.

        Raises:
            ValueError: If notification.kind is unknown
            NotificationException: If delivery fails
        """
        n = notification
        if n.kind == NotificationKind.SAMPLE_REQUEST:
            self.notify_sample_request(n.seller_id, n.listing_id, listing_name=n.listing_name)
        elif n.kind == NotificationKind.APPROVED:
            self.notify_product_approved(n.seller_id, n.listing_id, listing_name=n.listing_name)
        elif n.kind == NotificationKind.REJECTED:
            self.notify_product_rejected(n.seller_id, n.listing_id, n.reason, n.stage, listing_name=n.listing_name)
        elif n.kind == NotificationKind.REVISION_REQUESTED:
            self.notify_revision_requested(n.seller_id, n.listing_id, n.reason, listing_name=n.listing_name)
        else:
            raise ValueError(f"Unknown notification kind: {n.kind}")


class NotificationException(Exception):
    """Base exception for notification delivery."""

    pass
