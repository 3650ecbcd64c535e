"""
Value types for the product QA pipeline.

QARecord is an immutable snapshot handed out by the record store. Nothing
outside a store constructs a modified copy of one; changes go through the
transition engine and come back as a fresh snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.db import models

from .exceptions import ValidationError


class QAStatus(models.TextChoices):
    PENDING_DIGITAL_REVIEW = "PENDING_DIGITAL_REVIEW", "Pending Digital Review"
    WAITING_FOR_SAMPLE = "WAITING_FOR_SAMPLE", "Waiting for Sample"
    IN_QUALITY_REVIEW = "IN_QUALITY_REVIEW", "In Quality Review"
    ACTIVE_VERIFIED = "ACTIVE_VERIFIED", "Active & Verified"
    REJECTED = "REJECTED", "Rejected"
    FOR_REVISION = "FOR_REVISION", "For Revision"


class ApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class ReviewStage(models.TextChoices):
    DIGITAL = "digital", "Digital Review"
    PHYSICAL = "physical", "Physical Sample Review"


class LogisticsMethod(models.TextChoices):
    DROP_OFF_COURIER = "drop_off_courier", "Drop-off by Courier"
    COMPANY_PICKUP = "company_pickup", "Company Pickup"
    MEETUP = "meetup", "Meetup"


class ActorRole(models.TextChoices):
    SELLER = "seller", "Seller"
    MODERATOR = "moderator", "Moderator"


# Plain string values: TextChoices members hash by name, not by value.
TERMINAL_STATUSES = frozenset(
    {QAStatus.ACTIVE_VERIFIED.value, QAStatus.REJECTED.value, QAStatus.FOR_REVISION.value}
)


def derive_approval_status(status: str) -> ApprovalStatus:
    """Buyer-facing approval flag for a QA status."""
    if status == QAStatus.ACTIVE_VERIFIED:
        return ApprovalStatus.APPROVED
    if status == QAStatus.REJECTED:
        return ApprovalStatus.REJECTED
    return ApprovalStatus.PENDING


@dataclass(frozen=True)
class Actor:
    """Who is invoking an operation."""

    id: str
    role: str

    @classmethod
    def seller(cls, seller_id) -> "Actor":
        return cls(id=str(seller_id), role=ActorRole.SELLER)

    @classmethod
    def moderator(cls, moderator_id) -> "Actor":
        return cls(id=str(moderator_id), role=ActorRole.MODERATOR)

    @property
    def is_moderator(self) -> bool:
        return self.role == ActorRole.MODERATOR

    @property
    def is_seller(self) -> bool:
        return self.role == ActorRole.SELLER


@dataclass(frozen=True)
class RecordScope:
    """Which records a listing query covers: everything, or one seller's."""

    role: str
    seller_id: Optional[str] = None

    @classmethod
    def moderator(cls) -> "RecordScope":
        return cls(role=ActorRole.MODERATOR)

    @classmethod
    def seller(cls, seller_id) -> "RecordScope":
        return cls(role=ActorRole.SELLER, seller_id=str(seller_id))

    @classmethod
    def for_actor(cls, actor: Actor) -> "RecordScope":
        if actor.is_moderator:
            return cls.moderator()
        return cls.seller(actor.id)

    def includes(self, record: "QARecord") -> bool:
        if self.role == ActorRole.MODERATOR:
            return True
        return record.seller_id == self.seller_id


@dataclass(frozen=True)
class ListingAttributes:
    """Seller-supplied listing content captured at submission."""

    name: str
    price: Decimal
    category: str
    description: str = ""
    images: List[str] = field(default_factory=list)
    stock: int = 0

    def cleaned(self) -> "ListingAttributes":
        """Return a normalized copy or raise ValidationError."""
        name = (self.name or "").strip()
        if not name:
            raise ValidationError("Listing name is required")

        category = (self.category or "").strip()
        if not category:
            raise ValidationError("Listing category is required")

        try:
            price = Decimal(str(self.price))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid listing price: {self.price!r}")
        if not price.is_finite() or price <= 0:
            raise ValidationError("Listing price must be greater than 0")

        try:
            stock = int(self.stock)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid stock quantity: {self.stock!r}")
        if stock < 0:
            raise ValidationError("Stock quantity cannot be negative")

        return ListingAttributes(
            name=name,
            price=price,
            category=category,
            description=(self.description or "").strip(),
            images=[str(url) for url in (self.images or [])],
            stock=stock,
        )


@dataclass(frozen=True)
class QARecord:
    """Workflow envelope around exactly one listing."""

    listing_id: str
    seller_id: str
    status: str
    listing_name: str = ""
    approval_status: str = ApprovalStatus.PENDING

    # Physical sample hand-off
    logistics_method: Optional[str] = None
    logistics_address: str = ""
    logistics_notes: str = ""

    # Set only while status is REJECTED
    rejection_reason: Optional[str] = None
    rejection_stage: Optional[str] = None

    # Set only while status is FOR_REVISION
    revision_reason: Optional[str] = None
    revision_stage: Optional[str] = None

    digital_review_note: str = ""
    quality_review_note: str = ""
    digital_reviewer_id: Optional[str] = None
    quality_reviewer_id: Optional[str] = None

    submitted_at: Optional[datetime] = None
    digital_reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    sample_submitted_at: Optional[datetime] = None
    quality_reviewed_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    revision_requested_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def id(self) -> str:
        return self.listing_id

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def owned_by(self, seller_id) -> bool:
        return self.seller_id == str(seller_id)


# Fields a store accepts in an update patch. Identity and ownership are fixed.
PATCHABLE_FIELDS = frozenset(
    {
        "status",
        "approval_status",
        "logistics_method",
        "logistics_address",
        "logistics_notes",
        "rejection_reason",
        "rejection_stage",
        "revision_reason",
        "revision_stage",
        "digital_review_note",
        "quality_review_note",
        "digital_reviewer_id",
        "quality_reviewer_id",
        "digital_reviewed_at",
        "approved_at",
        "sample_submitted_at",
        "quality_reviewed_at",
        "rejected_at",
        "revision_requested_at",
    }
)
