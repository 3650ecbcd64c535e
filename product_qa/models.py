import uuid

from django.db import models
from django.utils import timezone

from product_qa.domain.records import (
    ApprovalStatus,
    LogisticsMethod,
    QARecord,
    QAStatus,
    ReviewStage,
)


class Listing(models.Model):
    """A seller's sellable product as stored by the platform."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    seller_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=100)
    images = models.JSONField(default=list, blank=True)
    stock = models.PositiveIntegerField(default=0)

    # Derived from the QA status; gates buyer visibility
    approval_status = models.CharField(
        max_length=16, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING, db_index=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.id})"


class ProductQA(models.Model):
    """Authoritative QA workflow state for one listing."""

    listing = models.OneToOneField(Listing, on_delete=models.PROTECT, primary_key=True, related_name="qa")
    status = models.CharField(
        max_length=32, choices=QAStatus.choices, default=QAStatus.PENDING_DIGITAL_REVIEW, db_index=True
    )

    logistics_method = models.CharField(max_length=32, choices=LogisticsMethod.choices, null=True, blank=True)
    logistics_address = models.TextField(blank=True)
    logistics_notes = models.TextField(blank=True)

    rejection_reason = models.TextField(null=True, blank=True)
    rejection_stage = models.CharField(max_length=16, choices=ReviewStage.choices, null=True, blank=True)
    revision_reason = models.TextField(null=True, blank=True)
    revision_stage = models.CharField(max_length=16, choices=ReviewStage.choices, null=True, blank=True)

    digital_review_note = models.TextField(blank=True)
    quality_review_note = models.TextField(blank=True)
    digital_reviewer_id = models.CharField(max_length=64, null=True, blank=True)
    quality_reviewer_id = models.CharField(max_length=64, null=True, blank=True)

    submitted_at = models.DateTimeField(default=timezone.now)
    digital_reviewed_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    sample_submitted_at = models.DateTimeField(null=True, blank=True)
    quality_reviewed_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    revision_requested_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "product_qa"
        ordering = ["-submitted_at"]
        verbose_name = "Product QA Record"
        verbose_name_plural = "Product QA Records"

    def __str__(self):
        return f"QA {self.listing_id}: {self.status}"

    def to_record(self) -> QARecord:
        listing = self.listing
        return QARecord(
            listing_id=str(listing.id),
            seller_id=listing.seller_id,
            status=str(self.status),
            listing_name=listing.name,
            approval_status=str(listing.approval_status),
            logistics_method=self.logistics_method,
            logistics_address=self.logistics_address,
            logistics_notes=self.logistics_notes,
            rejection_reason=self.rejection_reason,
            rejection_stage=self.rejection_stage,
            revision_reason=self.revision_reason,
            revision_stage=self.revision_stage,
            digital_review_note=self.digital_review_note,
            quality_review_note=self.quality_review_note,
            digital_reviewer_id=self.digital_reviewer_id,
            quality_reviewer_id=self.quality_reviewer_id,
            submitted_at=self.submitted_at,
            digital_reviewed_at=self.digital_reviewed_at,
            approved_at=self.approved_at,
            sample_submitted_at=self.sample_submitted_at,
            quality_reviewed_at=self.quality_reviewed_at,
            rejected_at=self.rejected_at,
            revision_requested_at=self.revision_requested_at,
            updated_at=self.updated_at,
        )


class SellerNotification(models.Model):
    """In-app notification shown in the seller's notification centre."""

    TYPE_CHOICES = [
        ("product_sample_request", "Sample Requested"),
        ("product_approved", "Product Approved"),
        ("product_rejected", "Product Rejected"),
        ("product_revision_requested", "Revision Requested"),
    ]

    PRIORITY_CHOICES = [
        ("low", "Low"),
        ("normal", "Normal"),
        ("high", "High"),
    ]

    seller_id = models.CharField(max_length=64, db_index=True)
    type = models.CharField(max_length=40, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    action_url = models.CharField(max_length=255, blank=True)
    action_data = models.JSONField(default=dict, blank=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default="normal")
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["seller_id", "is_read"], name="sellernotif_seller_read_idx")]

    def __str__(self):
        return f"{self.get_type_display()} for seller {self.seller_id}"
