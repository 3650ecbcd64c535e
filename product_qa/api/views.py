"""
Product QA API views.

Submissions, the moderator review queue, the seller's listing overview and
the per-record QA transitions. Views are synchronous; the async domain
services are driven through async_to_sync.
"""

import logging

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from infrastructure.container import container  # For DI
from product_qa.api.permissions import IsModerator, IsSeller, IsSellerOrModerator
from product_qa.api.serializers import (
    ErrorResponseSerializer,
    ListingSubmissionSerializer,
    NoteRequestSerializer,
    QARecordDetailSerializer,
    QARecordSerializer,
    QAViewSerializer,
    ReasonRequestSerializer,
    SampleSubmissionRequestSerializer,
)
from product_qa.domain.exceptions import (
    AuthorizationError,
    DuplicateRecordError,
    PersistenceError,
    QAError,
    RecordNotFoundError,
    StaleRecordError,
    TransitionError,
    ValidationError,
)
from product_qa.domain.records import ListingAttributes, RecordScope
from product_qa.domain.services import QAScreenSession
from product_qa.domain.state_machine import QAOperation, allowed_operations
from utils.rbac import ROLE_MODERATOR, ROLE_SELLER, actor_for


logger = logging.getLogger(__name__)

TAG = "Product QA"


def qa_error_response(error: QAError) -> Response:
    """Map a QA failure to an HTTP response with ``detail`` and ``code``."""
    if isinstance(error, ValidationError):
        http_status = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, AuthorizationError):
        http_status = status.HTTP_403_FORBIDDEN
    elif isinstance(error, RecordNotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    # Checked before PersistenceError: a stale write is both
    elif isinstance(error, (TransitionError, DuplicateRecordError)):
        http_status = status.HTTP_409_CONFLICT
    elif isinstance(error, PersistenceError):
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    return Response({"detail": error.message, "code": error.code}, status=http_status)


def _load_view(actor):
    materializer = container.materializer(actor)
    session = QAScreenSession(materializer)
    return async_to_sync(session.open)()


ERROR_RESPONSES = {
    400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid input"),
    403: OpenApiResponse(response=ErrorResponseSerializer, description="Not allowed for this user"),
    404: OpenApiResponse(response=ErrorResponseSerializer, description="No QA record for this listing"),
    409: OpenApiResponse(response=ErrorResponseSerializer, description="Listing is not in a valid status"),
    503: OpenApiResponse(response=ErrorResponseSerializer, description="Record store unavailable"),
}


class SubmissionView(APIView):
    permission_classes = [IsAuthenticated, IsSeller]

    @extend_schema(
        operation_id="product_qa_submit",
        summary="Submit a listing for QA",
        description="""
        **What it receives:**
        - `name`, `price`, `category` (required)
        - `description`, `images`, `stock` (optional)
        - `listing_id` (UUID, optional): client-chosen id

        **What it returns:**
        - The new QA record in `PENDING_DIGITAL_REVIEW`
        """,
        request=ListingSubmissionSerializer,
        responses={201: OpenApiResponse(response=QARecordSerializer, description="Listing submitted"), **ERROR_RESPONSES},
        tags=[TAG],
    )
    def post(self, request):
        serializer = ListingSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        attributes = ListingAttributes(
            name=data["name"],
            price=data["price"],
            category=data["category"],
            description=data.get("description", ""),
            images=data.get("images", []),
            stock=data.get("stock", 0),
        )
        actor = actor_for(request.user, ROLE_SELLER)
        engine = container.transition_engine()

        try:
            record = async_to_sync(engine.submit)(actor, attributes, listing_id=data.get("listing_id"))
        except QAError as e:
            return qa_error_response(e)

        logger.info(f"Seller {actor.id} submitted listing {record.listing_id} for QA")
        return Response(QARecordSerializer(record).data, status=status.HTTP_201_CREATED)


class ModeratorQueueView(APIView):
    permission_classes = [IsAuthenticated, IsModerator]

    @extend_schema(
        operation_id="product_qa_moderator_queue",
        summary="Moderator review queue",
        description="All QA records grouped by status, with per-bucket counts.",
        responses={200: OpenApiResponse(response=QAViewSerializer, description="Review queue"), **ERROR_RESPONSES},
        tags=[TAG],
    )
    def get(self, request):
        try:
            buckets = _load_view(actor_for(request.user, ROLE_MODERATOR))
        except QAError as e:
            return qa_error_response(e)
        return Response(QAViewSerializer.from_buckets(buckets).data)


class SellerListingsView(APIView):
    permission_classes = [IsAuthenticated, IsSeller]

    @extend_schema(
        operation_id="product_qa_seller_listings",
        summary="Seller QA overview",
        description="The authenticated seller's QA records grouped by status.",
        responses={200: OpenApiResponse(response=QAViewSerializer, description="Seller listings"), **ERROR_RESPONSES},
        tags=[TAG],
    )
    def get(self, request):
        try:
            buckets = _load_view(actor_for(request.user, ROLE_SELLER))
        except QAError as e:
            return qa_error_response(e)
        return Response(QAViewSerializer.from_buckets(buckets).data)


class QARecordViewSet(viewsets.ViewSet):
    """One QA record and the transitions that can be applied to it."""

    permission_classes = [IsAuthenticated, IsSellerOrModerator]
    lookup_value_regex = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

    def get_engine(self):
        # Inject the transition engine via DI container
        return container.transition_engine()

    @extend_schema(
        operation_id="product_qa_record",
        summary="Get one QA record",
        description="The record plus the operations the current user may start on it.",
        responses={200: OpenApiResponse(response=QARecordDetailSerializer, description="QA record"), **ERROR_RESPONSES},
        tags=[TAG],
    )
    def retrieve(self, request, pk=None):
        actor = actor_for(request.user)
        engine = self.get_engine()
        try:
            record = async_to_sync(engine.call_store)(engine.store.get_record(pk))
        except QAError as e:
            return qa_error_response(e)

        if not RecordScope.for_actor(actor).includes(record):
            return qa_error_response(AuthorizationError("You can only view your own listings"))

        return Response(
            QARecordDetailSerializer(
                {"record": record, "allowed_operations": allowed_operations(record.status, actor.role)}
            ).data
        )

    def _transition(self, request, pk, operation: str, role: str, request_serializer, **field_map):
        serializer = request_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        kwargs = {param: data.get(field) for param, field in field_map.items()}

        actor = actor_for(request.user, role)
        engine = self.get_engine()

        async def load_and_apply():
            record = await engine.call_store(engine.store.get_record(pk))
            expected_status = data.get("expected_status")
            if expected_status and record.status != expected_status:
                raise StaleRecordError(record.listing_id, expected_status, record.status)
            return await getattr(engine, operation)(record, actor, **kwargs)

        try:
            record = async_to_sync(load_and_apply)()
        except QAError as e:
            return qa_error_response(e)

        return Response(QARecordSerializer(record).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="product_qa_approve_for_sample",
        summary="Approve digital review and request a sample",
        request=NoteRequestSerializer,
        responses={200: QARecordSerializer, **ERROR_RESPONSES},
        tags=[TAG],
    )
    @action(detail=True, methods=["post"], url_path="approve-for-sample")
    def approve_for_sample(self, request, pk=None):
        return self._transition(
            request, pk, QAOperation.APPROVE_FOR_SAMPLE, ROLE_MODERATOR, NoteRequestSerializer, note="note"
        )

    @extend_schema(
        operation_id="product_qa_reject_digital",
        summary="Reject at digital review",
        request=ReasonRequestSerializer,
        responses={200: QARecordSerializer, **ERROR_RESPONSES},
        tags=[TAG],
    )
    @action(detail=True, methods=["post"], url_path="reject-digital")
    def reject_digital(self, request, pk=None):
        return self._transition(
            request, pk, QAOperation.REJECT_DIGITAL, ROLE_MODERATOR, ReasonRequestSerializer, reason="reason"
        )

    @extend_schema(
        operation_id="product_qa_submit_sample",
        summary="Submit a physical sample",
        request=SampleSubmissionRequestSerializer,
        responses={200: QARecordSerializer, **ERROR_RESPONSES},
        tags=[TAG],
    )
    @action(detail=True, methods=["post"], url_path="submit-sample")
    def submit_sample(self, request, pk=None):
        return self._transition(
            request,
            pk,
            QAOperation.SUBMIT_SAMPLE,
            ROLE_SELLER,
            SampleSubmissionRequestSerializer,
            logistics_method="logistics_method",
            address="address",
            notes="notes",
        )

    @extend_schema(
        operation_id="product_qa_pass_quality",
        summary="Pass quality review and publish",
        request=NoteRequestSerializer,
        responses={200: QARecordSerializer, **ERROR_RESPONSES},
        tags=[TAG],
    )
    @action(detail=True, methods=["post"], url_path="pass-quality")
    def pass_quality(self, request, pk=None):
        return self._transition(request, pk, QAOperation.PASS_QUALITY, ROLE_MODERATOR, NoteRequestSerializer, note="note")

    @extend_schema(
        operation_id="product_qa_fail_quality",
        summary="Reject at quality review",
        request=ReasonRequestSerializer,
        responses={200: QARecordSerializer, **ERROR_RESPONSES},
        tags=[TAG],
    )
    @action(detail=True, methods=["post"], url_path="fail-quality")
    def fail_quality(self, request, pk=None):
        return self._transition(
            request, pk, QAOperation.FAIL_QUALITY, ROLE_MODERATOR, ReasonRequestSerializer, reason="reason"
        )

    @extend_schema(
        operation_id="product_qa_request_revision",
        summary="Send the listing back for revision",
        request=ReasonRequestSerializer,
        responses={200: QARecordSerializer, **ERROR_RESPONSES},
        tags=[TAG],
    )
    @action(detail=True, methods=["post"], url_path="request-revision")
    def request_revision(self, request, pk=None):
        return self._transition(
            request, pk, QAOperation.REQUEST_REVISION, ROLE_MODERATOR, ReasonRequestSerializer, reason="reason"
        )
