"""
QA Record Store Interface
=========================

Abstract contract for the authoritative store of QA records. The transition
engine and both view materializers talk to the store only through this
interface, so any implementation (ORM, in-memory fake) can be injected.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from product_qa.domain.records import PATCHABLE_FIELDS, ListingAttributes, QARecord, RecordScope


QARecordPatch = Dict[str, Any]


class QARecordStoreInterface(ABC):
    """
    Abstract interface for QA record persistence.

    Concrete implementations:
        - DjangoQARecordStore: Production store backed by the Django ORM
        - InMemoryQARecordStore: Process-local fake for tests and demos
    """

    @abstractmethod
    async def create_record(self, listing_id: str, seller_id: str, attributes: ListingAttributes) -> QARecord:
        """
        Create a listing and its QA record in PENDING_DIGITAL_REVIEW.

        Raises:
            DuplicateRecordError: If a record already exists for listing_id
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def get_record(self, listing_id: str) -> QARecord:
        """
        Fetch one QA record.

        Raises:
            RecordNotFoundError: If no record exists
            PersistenceError: If the read fails
        """
        pass

    @abstractmethod
    async def list_records(self, scope: RecordScope) -> List[QARecord]:
        """
        Fetch every record visible in scope, newest submission first.

        Raises:
            PersistenceError: If the read fails
        """
        pass

    @abstractmethod
    async def update_record(self, listing_id: str, patch: QARecordPatch, expected_status: str) -> QARecord:
        """
        Atomically apply patch if the stored status still equals expected_status.

        The listing's approval flag is written in the same atomic step when
        the patch carries ``approval_status``.

        Raises:
            StaleRecordError: If the stored status differs from expected_status
            RecordNotFoundError: If no record exists
            PersistenceError: If the write fails
        """
        pass

    @staticmethod
    def check_patch(patch: QARecordPatch) -> None:
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not patchable on a QA record: {sorted(unknown)}")
