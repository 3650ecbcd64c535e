"""
In-Memory QA Record Store
=========================

Dict-backed implementation of QARecordStoreInterface. Used by unit tests and
local demos; shares nothing between processes.
"""

import asyncio
import dataclasses
import logging
from typing import Dict, List, Optional

from django.utils import timezone

from product_qa.domain.exceptions import DuplicateRecordError, RecordNotFoundError, StaleRecordError
from product_qa.domain.records import (
    ApprovalStatus,
    ListingAttributes,
    QARecord,
    QAStatus,
    RecordScope,
)

from .interface import QARecordPatch, QARecordStoreInterface


logger = logging.getLogger(__name__)


class InMemoryQARecordStore(QARecordStoreInterface):
    """
    Process-local QA record store.

    Besides the store contract it offers test hooks:
        - fail_next(exc): the next store call raises exc
        - latency: seconds every call sleeps before touching state
        - calls: names of the store methods invoked, in order
    """

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self.calls: List[str] = []
        self.listings: Dict[str, ListingAttributes] = {}
        self._records: Dict[str, QARecord] = {}
        self._failures: List[Exception] = []

    def fail_next(self, exc: Exception) -> None:
        self._failures.append(exc)

    async def _enter(self, method: str) -> None:
        self.calls.append(method)
        if self.latency:
            await asyncio.sleep(self.latency)
        if self._failures:
            raise self._failures.pop(0)

    async def create_record(self, listing_id: str, seller_id: str, attributes: ListingAttributes) -> QARecord:
        await self._enter("create_record")
        listing_id = str(listing_id)
        if listing_id in self._records:
            raise DuplicateRecordError(f"QA record already exists for listing {listing_id}")

        now = timezone.now()
        record = QARecord(
            listing_id=listing_id,
            seller_id=str(seller_id),
            status=QAStatus.PENDING_DIGITAL_REVIEW.value,
            listing_name=attributes.name,
            approval_status=ApprovalStatus.PENDING.value,
            submitted_at=now,
            updated_at=now,
        )
        self.listings[listing_id] = attributes
        self._records[listing_id] = record
        logger.debug(f"[MEMORY STORE] Created QA record {listing_id}")
        return record

    async def get_record(self, listing_id: str) -> QARecord:
        await self._enter("get_record")
        return self._get(str(listing_id))

    async def list_records(self, scope: RecordScope) -> List[QARecord]:
        await self._enter("list_records")
        records = [record for record in self._records.values() if scope.includes(record)]
        return sorted(records, key=lambda r: r.submitted_at, reverse=True)

    async def update_record(self, listing_id: str, patch: QARecordPatch, expected_status: str) -> QARecord:
        await self._enter("update_record")
        self.check_patch(patch)
        current = self._get(str(listing_id))
        if current.status != str(expected_status):
            raise StaleRecordError(current.listing_id, str(expected_status), current.status)

        values = {key: (value.value if hasattr(value, "value") else value) for key, value in patch.items()}
        updated = dataclasses.replace(current, updated_at=timezone.now(), **values)
        self._records[current.listing_id] = updated
        return updated

    def _get(self, listing_id: str) -> QARecord:
        record: Optional[QARecord] = self._records.get(listing_id)
        if record is None:
            raise RecordNotFoundError(listing_id)
        return record

    def snapshot(self, listing_id: str) -> QARecord:
        """Current stored record, bypassing call tracking and failure injection."""
        return self._get(str(listing_id))
