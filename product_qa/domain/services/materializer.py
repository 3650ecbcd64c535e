"""
View Materializer
=================

Locally cached, partitioned projection of the QA records one actor can see.
A moderator's view covers every record, a seller's view only their own.

The cache is only ever replaced wholesale by a fresh fetch from the record
store. Transitions go through the engine; on success the view reloads rather
than patching in the record the engine returned.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from product_qa.domain.exceptions import PersistenceError, RecordNotFoundError, TransitionInProgressError
from product_qa.domain.records import Actor, ListingAttributes, QARecord, QAStatus, RecordScope
from product_qa.domain.state_machine import allowed_operations
from product_qa.infra.record_store import QARecordStoreInterface

from .base import BaseService
from .reconciliation import ReconciliationProtocol, ReloadTrigger
from .transition_engine import QATransitionEngine


BUCKET_BY_STATUS = {
    QAStatus.PENDING_DIGITAL_REVIEW.value: "pending_digital_review",
    QAStatus.WAITING_FOR_SAMPLE.value: "waiting_for_sample",
    QAStatus.IN_QUALITY_REVIEW.value: "in_quality_review",
    QAStatus.ACTIVE_VERIFIED.value: "active_verified",
    QAStatus.REJECTED.value: "rejected",
    QAStatus.FOR_REVISION.value: "for_revision",
}

BUCKET_NAMES = tuple(BUCKET_BY_STATUS.values())


@dataclass(frozen=True)
class QABuckets:
    """Disjoint grouping of records by QA status."""

    pending_digital_review: Tuple[QARecord, ...] = ()
    waiting_for_sample: Tuple[QARecord, ...] = ()
    in_quality_review: Tuple[QARecord, ...] = ()
    active_verified: Tuple[QARecord, ...] = ()
    rejected: Tuple[QARecord, ...] = ()
    for_revision: Tuple[QARecord, ...] = ()
    index: Dict[str, QARecord] = field(default_factory=dict, compare=False, repr=False)

    def bucket(self, name: str) -> Tuple[QARecord, ...]:
        if name not in BUCKET_NAMES:
            raise KeyError(f"Unknown QA bucket: {name}")
        return getattr(self, name)

    def all(self) -> List[QARecord]:
        return [record for name in BUCKET_NAMES for record in getattr(self, name)]

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in BUCKET_NAMES}

    def __len__(self) -> int:
        return len(self.index)


def partition_records(records: Iterable[QARecord]) -> QABuckets:
    """
    Split records into the six status buckets, keeping fetch order within each.

    Raises:
        ValueError: On a record with an unknown status or a duplicate listing id
    """
    grouped: Dict[str, List[QARecord]] = {name: [] for name in BUCKET_NAMES}
    index: Dict[str, QARecord] = {}
    for record in records:
        name = BUCKET_BY_STATUS.get(str(record.status))
        if name is None:
            raise ValueError(f"Record {record.listing_id} has unknown QA status {record.status!r}")
        if record.listing_id in index:
            raise ValueError(f"Record {record.listing_id} appears twice in one fetch")
        grouped[name].append(record)
        index[record.listing_id] = record
    return QABuckets(index=index, **{name: tuple(items) for name, items in grouped.items()})


class QAViewMaterializer(BaseService):
    """
    One actor's view of the QA pipeline.

    Args:
        store: Record store the view is fetched from
        engine: Transition engine every change goes through
        actor: Whose view this is; decides the record scope
    """

    def __init__(self, store: QARecordStoreInterface, engine: QATransitionEngine, actor: Actor):
        super().__init__()
        self.store = store
        self.engine = engine
        self.actor = actor
        self.scope = RecordScope.for_actor(actor)
        self.buckets = QABuckets()
        self.loaded = False
        self.stale = False
        self._in_flight = set()
        self.reconciliation = ReconciliationProtocol(self)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def reload(self, trigger: str = ReloadTrigger.MANUAL_REFRESH) -> QABuckets:
        """Refetch the scoped record set and replace the cached buckets."""
        return await self.reconciliation.request(trigger)

    async def fetch_records(self) -> List[QARecord]:
        return await self.engine.call_store(self.store.list_records(self.scope))

    def replace(self, buckets: QABuckets) -> None:
        self.buckets = buckets
        self.loaded = True
        self.stale = False

    def get(self, listing_id: str) -> Optional[QARecord]:
        return self.buckets.index.get(str(listing_id))

    def counts(self) -> Dict[str, int]:
        return self.buckets.counts()

    @property
    def pending_digital_review(self) -> Tuple[QARecord, ...]:
        return self.buckets.pending_digital_review

    @property
    def waiting_for_sample(self) -> Tuple[QARecord, ...]:
        return self.buckets.waiting_for_sample

    @property
    def in_quality_review(self) -> Tuple[QARecord, ...]:
        return self.buckets.in_quality_review

    @property
    def active_verified(self) -> Tuple[QARecord, ...]:
        return self.buckets.active_verified

    @property
    def rejected(self) -> Tuple[QARecord, ...]:
        return self.buckets.rejected

    @property
    def for_revision(self) -> Tuple[QARecord, ...]:
        return self.buckets.for_revision

    def is_busy(self, listing_id: str) -> bool:
        return str(listing_id) in self._in_flight

    def available_operations(self, listing_id: str) -> List[str]:
        """Operations this actor could start on the cached record right now."""
        record = self.get(listing_id)
        if record is None or self.is_busy(listing_id):
            return []
        if self.actor.is_seller and not record.owned_by(self.actor.id):
            return []
        return allowed_operations(record.status, self.actor.role)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def submit(self, attributes: ListingAttributes, listing_id: Optional[str] = None) -> QARecord:
        record = await self.engine.submit(self.actor, attributes, listing_id=listing_id)
        await self.reconciliation.after_transition()
        return record

    async def approve_for_sample(self, listing_id: str, note: str = "") -> QARecord:
        return await self._transition(listing_id, self.engine.approve_for_sample, note=note)

    async def reject_digital(self, listing_id: str, reason: str) -> QARecord:
        return await self._transition(listing_id, self.engine.reject_digital, reason=reason)

    async def submit_sample(self, listing_id: str, logistics_method: str, address: str = "", notes: str = "") -> QARecord:
        return await self._transition(
            listing_id, self.engine.submit_sample, logistics_method=logistics_method, address=address, notes=notes
        )

    async def pass_quality(self, listing_id: str, note: str = "") -> QARecord:
        return await self._transition(listing_id, self.engine.pass_quality, note=note)

    async def fail_quality(self, listing_id: str, reason: str) -> QARecord:
        return await self._transition(listing_id, self.engine.fail_quality, reason=reason)

    async def request_revision(self, listing_id: str, reason: str) -> QARecord:
        return await self._transition(listing_id, self.engine.request_revision, reason=reason)

    async def _transition(self, listing_id: str, engine_call, **kwargs) -> QARecord:
        listing_id = str(listing_id)
        if listing_id in self._in_flight:
            raise TransitionInProgressError(
                f"A transition for listing {listing_id} is still in progress", current_status=None
            )
        record = self.get(listing_id)
        if record is None:
            raise RecordNotFoundError(listing_id)

        self._in_flight.add(listing_id)
        try:
            try:
                updated = await engine_call(record, self.actor, **kwargs)
            except PersistenceError as e:
                # A timed-out write may still commit
                if "timeout" in e.context:
                    self.stale = True
                raise
            await self.reconciliation.after_transition()
        finally:
            self._in_flight.discard(listing_id)
        return updated
