import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


STATUS_CHOICES = [
    ("PENDING_DIGITAL_REVIEW", "Pending Digital Review"),
    ("WAITING_FOR_SAMPLE", "Waiting for Sample"),
    ("IN_QUALITY_REVIEW", "In Quality Review"),
    ("ACTIVE_VERIFIED", "Active & Verified"),
    ("REJECTED", "Rejected"),
    ("FOR_REVISION", "For Revision"),
]

STAGE_CHOICES = [("digital", "Digital Review"), ("physical", "Physical Sample Review")]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Listing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("seller_id", models.CharField(db_index=True, max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("category", models.CharField(max_length=100)),
                ("images", models.JSONField(blank=True, default=list)),
                ("stock", models.PositiveIntegerField(default=0)),
                (
                    "approval_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="SellerNotification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("seller_id", models.CharField(db_index=True, max_length=64)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("product_sample_request", "Sample Requested"),
                            ("product_approved", "Product Approved"),
                            ("product_rejected", "Product Rejected"),
                            ("product_revision_requested", "Revision Requested"),
                        ],
                        max_length=40,
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField()),
                ("action_url", models.CharField(blank=True, max_length=255)),
                ("action_data", models.JSONField(blank=True, default=dict)),
                (
                    "priority",
                    models.CharField(
                        choices=[("low", "Low"), ("normal", "Normal"), ("high", "High")],
                        default="normal",
                        max_length=10,
                    ),
                ),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["seller_id", "is_read"], name="sellernotif_seller_read_idx")],
            },
        ),
        migrations.CreateModel(
            name="ProductQA",
            fields=[
                (
                    "listing",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        primary_key=True,
                        related_name="qa",
                        serialize=False,
                        to="product_qa.listing",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=STATUS_CHOICES, db_index=True, default="PENDING_DIGITAL_REVIEW", max_length=32
                    ),
                ),
                (
                    "logistics_method",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("drop_off_courier", "Drop-off by Courier"),
                            ("company_pickup", "Company Pickup"),
                            ("meetup", "Meetup"),
                        ],
                        max_length=32,
                        null=True,
                    ),
                ),
                ("logistics_address", models.TextField(blank=True)),
                ("logistics_notes", models.TextField(blank=True)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("rejection_stage", models.CharField(blank=True, choices=STAGE_CHOICES, max_length=16, null=True)),
                ("revision_reason", models.TextField(blank=True, null=True)),
                ("revision_stage", models.CharField(blank=True, choices=STAGE_CHOICES, max_length=16, null=True)),
                ("digital_review_note", models.TextField(blank=True)),
                ("quality_review_note", models.TextField(blank=True)),
                ("digital_reviewer_id", models.CharField(blank=True, max_length=64, null=True)),
                ("quality_reviewer_id", models.CharField(blank=True, max_length=64, null=True)),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("digital_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("sample_submitted_at", models.DateTimeField(blank=True, null=True)),
                ("quality_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("revision_requested_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Product QA Record",
                "verbose_name_plural": "Product QA Records",
                "db_table": "product_qa",
                "ordering": ["-submitted_at"],
            },
        ),
    ]
