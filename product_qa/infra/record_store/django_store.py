"""
Django QA Record Store
======================

Production implementation of QARecordStoreInterface backed by the Django ORM.

Each call runs its blocking ORM work through sync_to_async. Updates lock the
QA row with select_for_update inside transaction.atomic, compare the stored
status with the caller's expected status, then write the QA row and the
listing's approval flag together.
"""

import logging
from typing import List

from asgiref.sync import sync_to_async
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError, transaction

from product_qa.domain.exceptions import (
    DuplicateRecordError,
    PersistenceError,
    RecordNotFoundError,
    StaleRecordError,
)
from product_qa.domain.records import ActorRole, ListingAttributes, QARecord, QAStatus, RecordScope

from .interface import QARecordPatch, QARecordStoreInterface


logger = logging.getLogger(__name__)

LISTING_FIELDS = frozenset({"approval_status"})


class DjangoQARecordStore(QARecordStoreInterface):
    """QA record store persisted in the ``product_qa`` and ``Listing`` tables."""

    async def create_record(self, listing_id: str, seller_id: str, attributes: ListingAttributes) -> QARecord:
        return await sync_to_async(self._create_record)(str(listing_id), str(seller_id), attributes)

    async def get_record(self, listing_id: str) -> QARecord:
        return await sync_to_async(self._get_record)(str(listing_id))

    async def list_records(self, scope: RecordScope) -> List[QARecord]:
        return await sync_to_async(self._list_records)(scope)

    async def update_record(self, listing_id: str, patch: QARecordPatch, expected_status: str) -> QARecord:
        self.check_patch(patch)
        return await sync_to_async(self._update_record)(str(listing_id), patch, str(expected_status))

    # ------------------------------------------------------------------
    # Blocking ORM work
    # ------------------------------------------------------------------

    def _create_record(self, listing_id: str, seller_id: str, attributes: ListingAttributes) -> QARecord:
        from product_qa.models import Listing, ProductQA

        try:
            with transaction.atomic():
                if Listing.objects.filter(pk=listing_id).exists():
                    raise DuplicateRecordError(f"QA record already exists for listing {listing_id}")

                listing = Listing.objects.create(
                    id=listing_id,
                    seller_id=seller_id,
                    name=attributes.name,
                    description=attributes.description,
                    price=attributes.price,
                    category=attributes.category,
                    images=list(attributes.images),
                    stock=attributes.stock,
                )
                qa = ProductQA.objects.create(listing=listing, status=QAStatus.PENDING_DIGITAL_REVIEW)
        except IntegrityError as e:
            raise DuplicateRecordError(f"QA record already exists for listing {listing_id}") from e
        except DatabaseError as e:
            logger.error(f"Failed to create QA record for listing {listing_id}: {e}")
            raise PersistenceError(f"Could not create QA record: {e}", listing_id=listing_id) from e

        logger.info(f"Created QA record for listing {listing_id} (seller {seller_id})")
        return qa.to_record()

    def _get_record(self, listing_id: str) -> QARecord:
        from product_qa.models import ProductQA

        try:
            qa = ProductQA.objects.select_related("listing").get(pk=listing_id)
        except (ProductQA.DoesNotExist, DjangoValidationError):
            raise RecordNotFoundError(listing_id)
        except DatabaseError as e:
            raise PersistenceError(f"Could not read QA record: {e}", listing_id=listing_id) from e
        return qa.to_record()

    def _list_records(self, scope: RecordScope) -> List[QARecord]:
        from product_qa.models import ProductQA

        queryset = ProductQA.objects.select_related("listing").order_by("-submitted_at")
        if scope.role != ActorRole.MODERATOR:
            queryset = queryset.filter(listing__seller_id=scope.seller_id)

        try:
            return [qa.to_record() for qa in queryset]
        except DatabaseError as e:
            raise PersistenceError(f"Could not list QA records: {e}") from e

    def _update_record(self, listing_id: str, patch: QARecordPatch, expected_status: str) -> QARecord:
        from product_qa.models import ProductQA

        try:
            with transaction.atomic():
                try:
                    qa = ProductQA.objects.select_for_update().select_related("listing").get(pk=listing_id)
                except (ProductQA.DoesNotExist, DjangoValidationError):
                    raise RecordNotFoundError(listing_id)

                if qa.status != expected_status:
                    logger.warning(
                        f"Stale write rejected for listing {listing_id}: " f"expected {expected_status}, found {qa.status}"
                    )
                    raise StaleRecordError(listing_id, expected_status, qa.status)

                qa_fields = []
                for field_name, value in patch.items():
                    if field_name in LISTING_FIELDS:
                        continue
                    setattr(qa, field_name, value)
                    qa_fields.append(field_name)
                qa.save(update_fields=qa_fields + ["updated_at"])

                if "approval_status" in patch:
                    listing = qa.listing
                    listing.approval_status = patch["approval_status"]
                    listing.save(update_fields=["approval_status", "updated_at"])

            qa.refresh_from_db()
        except DatabaseError as e:
            logger.error(f"Failed to update QA record {listing_id}: {e}")
            raise PersistenceError(f"Could not update QA record: {e}", listing_id=listing_id) from e

        return qa.to_record()
