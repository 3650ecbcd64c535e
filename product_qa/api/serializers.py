from rest_framework import serializers

from product_qa.domain.records import LogisticsMethod, QAStatus
from product_qa.domain.services import BUCKET_NAMES


class ErrorResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    code = serializers.CharField()


class QARecordSerializer(serializers.Serializer):
    """Read-only view of a QARecord."""

    id = serializers.CharField(source="listing_id")
    seller_id = serializers.CharField()
    listing_name = serializers.CharField()
    status = serializers.CharField()
    approval_status = serializers.CharField()
    logistics_method = serializers.CharField(allow_null=True)
    logistics_address = serializers.CharField()
    logistics_notes = serializers.CharField()
    rejection_reason = serializers.CharField(allow_null=True)
    rejection_stage = serializers.CharField(allow_null=True)
    revision_reason = serializers.CharField(allow_null=True)
    revision_stage = serializers.CharField(allow_null=True)
    digital_review_note = serializers.CharField()
    quality_review_note = serializers.CharField()
    digital_reviewer_id = serializers.CharField(allow_null=True)
    quality_reviewer_id = serializers.CharField(allow_null=True)
    submitted_at = serializers.DateTimeField(allow_null=True)
    digital_reviewed_at = serializers.DateTimeField(allow_null=True)
    approved_at = serializers.DateTimeField(allow_null=True)
    sample_submitted_at = serializers.DateTimeField(allow_null=True)
    quality_reviewed_at = serializers.DateTimeField(allow_null=True)
    rejected_at = serializers.DateTimeField(allow_null=True)
    revision_requested_at = serializers.DateTimeField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class QARecordDetailSerializer(serializers.Serializer):
    record = QARecordSerializer()
    allowed_operations = serializers.ListField(child=serializers.CharField())


class QAViewSerializer(serializers.Serializer):
    """Bucketed materialized view returned by the queue and listings endpoints."""

    pending_digital_review = QARecordSerializer(many=True)
    waiting_for_sample = QARecordSerializer(many=True)
    in_quality_review = QARecordSerializer(many=True)
    active_verified = QARecordSerializer(many=True)
    rejected = QARecordSerializer(many=True)
    for_revision = QARecordSerializer(many=True)
    counts = serializers.DictField(child=serializers.IntegerField())
    total = serializers.IntegerField()

    @classmethod
    def from_buckets(cls, buckets):
        data = {name: buckets.bucket(name) for name in BUCKET_NAMES}
        data["counts"] = buckets.counts()
        data["total"] = len(buckets)
        return cls(data)


# ===== Request Serializers =====


class ListingSubmissionSerializer(serializers.Serializer):
    listing_id = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=255, allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    category = serializers.CharField(max_length=100, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    images = serializers.ListField(child=serializers.URLField(), required=False, default=list)
    stock = serializers.IntegerField(required=False, default=0)


class TransitionRequestSerializer(serializers.Serializer):
    """
    Base for transition bodies.

    expected_status is the status the client's view showed; if the record has
    moved on since, the request is refused instead of acting on a stale view.
    """

    expected_status = serializers.ChoiceField(choices=QAStatus.choices, required=False)


class NoteRequestSerializer(TransitionRequestSerializer):
    note = serializers.CharField(required=False, allow_blank=True, default="")


class ReasonRequestSerializer(TransitionRequestSerializer):
    reason = serializers.CharField(allow_blank=True, trim_whitespace=False)


class SampleSubmissionRequestSerializer(TransitionRequestSerializer):
    logistics_method = serializers.CharField(help_text=f"One of {', '.join(LogisticsMethod.values)}")
    address = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
