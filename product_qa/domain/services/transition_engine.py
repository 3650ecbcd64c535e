"""
Transition Engine
=================

Validates and applies one QA state transition at a time.

Every operation runs the same sequence:

1. actor check (AuthorizationError), input check (ValidationError) and source
   status check (TransitionError), all local, before any store call;
2. one compare-and-set write to the record store carrying the new status,
   the derived approval flag, timestamps and stage fields;
3. fire-and-forget seller notification, domain event, metrics;
4. the store's authoritative record is returned.

The engine never retries a write. A record that moved on since the caller
read it is rejected by the store as stale, so a repeated call cannot re-stamp
timestamps or send a second notification.
"""

import asyncio
import time
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.utils import timezone

from product_qa.domain.events import EventDispatcher
from product_qa.domain.exceptions import AuthorizationError, PersistenceError, QAError, ValidationError
from product_qa.domain.records import (
    Actor,
    ListingAttributes,
    LogisticsMethod,
    QARecord,
    ReviewStage,
    derive_approval_status,
)
from product_qa.domain.state_machine import QAOperation, check_transition, get_rule, revision_stage_for
from product_qa.infra.observability.metrics import qa_transition_duration, qa_transitions_total
from product_qa.infra.record_store import QARecordStoreInterface

from .base import BaseService
from .notification_dispatcher import NotificationDispatcher


DEFAULT_STORE_TIMEOUT_SECONDS = 10.0


def _clean_reason(reason: Optional[str]) -> str:
    if not isinstance(reason, str) or not reason.strip():
        raise ValidationError("A non-empty reason is required")
    return reason.strip()


def _clean_text(value: Optional[str], field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip()


class QATransitionEngine(BaseService):
    """
    The only writer of QA status.

    Args:
        store: Authoritative record store
        dispatcher: Seller notification dispatcher
        timeout: Seconds to wait for any single store call
                 (defaults to PRODUCT_QA["STORE_TIMEOUT_SECONDS"])
    """

    def __init__(
        self,
        store: QARecordStoreInterface,
        dispatcher: NotificationDispatcher,
        timeout: Optional[float] = None,
    ):
        super().__init__()
        self.store = store
        self.dispatcher = dispatcher
        if timeout is None:
            timeout = getattr(settings, "PRODUCT_QA", {}).get("STORE_TIMEOUT_SECONDS", DEFAULT_STORE_TIMEOUT_SECONDS)
        self.timeout = float(timeout)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @BaseService.log_performance
    async def submit(
        self, actor: Actor, attributes: ListingAttributes, listing_id: Optional[str] = None
    ) -> QARecord:
        """Create a listing and its QA record in PENDING_DIGITAL_REVIEW."""
        operation = QAOperation.SUBMIT
        with self._observe(operation):
            self._authorize(operation, actor)
            cleaned = attributes.cleaned()
            listing_id = self._listing_id(listing_id)

            record = await self.call_store(self.store.create_record(listing_id, actor.id, cleaned))
            await self._after_write(operation, None, record, actor)
            return record

    @BaseService.log_performance
    async def approve_for_sample(self, record: QARecord, actor: Actor, note: str = "") -> QARecord:
        """Digital review passed; ask the seller for a physical sample."""
        operation = QAOperation.APPROVE_FOR_SAMPLE
        with self._observe(operation):
            self._authorize(operation, actor, record)
            note = _clean_text(note, "note")

            def fields(now):
                return {
                    "digital_reviewed_at": now,
                    "approved_at": now,
                    "digital_reviewer_id": actor.id,
                    "digital_review_note": note,
                }

            return await self._apply(operation, record, actor, fields)

    @BaseService.log_performance
    async def reject_digital(self, record: QARecord, actor: Actor, reason: str) -> QARecord:
        """Reject the listing at digital review."""
        operation = QAOperation.REJECT_DIGITAL
        with self._observe(operation):
            self._authorize(operation, actor, record)
            reason = _clean_reason(reason)

            def fields(now):
                return {
                    "digital_reviewed_at": now,
                    "rejected_at": now,
                    "digital_reviewer_id": actor.id,
                    "rejection_reason": reason,
                    "rejection_stage": ReviewStage.DIGITAL.value,
                }

            return await self._apply(operation, record, actor, fields)

    @BaseService.log_performance
    async def submit_sample(
        self,
        record: QARecord,
        actor: Actor,
        logistics_method: str,
        address: str = "",
        notes: str = "",
    ) -> QARecord:
        """Seller reports how the physical sample reaches the platform."""
        operation = QAOperation.SUBMIT_SAMPLE
        with self._observe(operation):
            self._authorize(operation, actor, record)
            if str(logistics_method) not in LogisticsMethod.values:
                raise ValidationError(
                    f"Unknown logistics method: {logistics_method!r}. "
                    f"Must be one of {', '.join(LogisticsMethod.values)}"
                )
            method = str(logistics_method)
            address = _clean_text(address, "address")
            notes = _clean_text(notes, "notes")

            def fields(now):
                return {
                    "sample_submitted_at": now,
                    "logistics_method": method,
                    "logistics_address": address,
                    "logistics_notes": notes,
                }

            return await self._apply(operation, record, actor, fields)

    @BaseService.log_performance
    async def pass_quality(self, record: QARecord, actor: Actor, note: str = "") -> QARecord:
        """Physical sample passed; the listing goes live."""
        operation = QAOperation.PASS_QUALITY
        with self._observe(operation):
            self._authorize(operation, actor, record)
            note = _clean_text(note, "note")

            def fields(now):
                return {
                    "quality_reviewed_at": now,
                    "quality_reviewer_id": actor.id,
                    "quality_review_note": note,
                }

            return await self._apply(operation, record, actor, fields)

    @BaseService.log_performance
    async def fail_quality(self, record: QARecord, actor: Actor, reason: str) -> QARecord:
        """Reject the listing at physical sample review."""
        operation = QAOperation.FAIL_QUALITY
        with self._observe(operation):
            self._authorize(operation, actor, record)
            reason = _clean_reason(reason)

            def fields(now):
                return {
                    "quality_reviewed_at": now,
                    "rejected_at": now,
                    "quality_reviewer_id": actor.id,
                    "rejection_reason": reason,
                    "rejection_stage": ReviewStage.PHYSICAL.value,
                }

            return await self._apply(operation, record, actor, fields)

    @BaseService.log_performance
    async def request_revision(self, record: QARecord, actor: Actor, reason: str) -> QARecord:
        """Send the listing back to the seller with feedback."""
        operation = QAOperation.REQUEST_REVISION
        with self._observe(operation):
            self._authorize(operation, actor, record)
            reason = _clean_reason(reason)

            def fields(now):
                stage = revision_stage_for(record.status)
                reviewer_field = "quality_reviewer_id" if stage == ReviewStage.PHYSICAL else "digital_reviewer_id"
                return {
                    "revision_requested_at": now,
                    "revision_reason": reason,
                    "revision_stage": stage,
                    reviewer_field: actor.id,
                }

            return await self._apply(operation, record, actor, fields)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _authorize(self, operation: str, actor: Actor, record: Optional[QARecord] = None) -> None:
        rule = get_rule(operation)
        if str(actor.role) != rule.actor_role:
            raise AuthorizationError(
                f"Only a {rule.actor_role} may {operation}", operation=operation, actor_id=actor.id
            )
        if actor.is_seller and record is not None and not record.owned_by(actor.id):
            raise AuthorizationError(
                f"Seller {actor.id} does not own listing {record.listing_id}",
                operation=operation,
                actor_id=actor.id,
            )

    @staticmethod
    def _listing_id(listing_id: Optional[str]) -> str:
        if listing_id is None:
            return str(uuid.uuid4())
        try:
            return str(uuid.UUID(str(listing_id)))
        except ValueError:
            raise ValidationError(f"Invalid listing id: {listing_id!r}")

    async def _apply(
        self,
        operation: str,
        record: QARecord,
        actor: Actor,
        fields: Callable[[Any], Dict[str, Any]],
    ) -> QARecord:
        rule = check_transition(operation, record.status)

        patch = {
            "status": rule.target,
            "approval_status": derive_approval_status(rule.target).value,
        }
        patch.update(fields(timezone.now()))

        updated = await self.call_store(
            self.store.update_record(record.listing_id, patch, expected_status=str(record.status))
        )
        self.logger.info(f"{operation}: listing {updated.listing_id} {record.status} -> {updated.status}")
        await self._after_write(operation, str(record.status), updated, actor)
        return updated

    async def call_store(self, call):
        """
        Await a store coroutine within the timeout, mapping failures to PersistenceError.

        A timeout does not mean the write was discarded. The Django store runs
        the ORM in a worker thread that cannot be cancelled, so a write that
        times out may still commit. Callers must reload before retrying; a retry
        from the old copy is refused by the store with StaleRecordError because
        its expected status no longer matches. The raised error carries
        ``timeout`` in its context for this case.
        """
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except QAError:
            raise
        except asyncio.TimeoutError:
            raise PersistenceError(f"Record store did not respond within {self.timeout:g}s", timeout=self.timeout)
        except Exception as e:
            raise PersistenceError(f"Record store call failed: {e}") from e

    async def _after_write(self, operation: str, previous_status: Optional[str], record: QARecord, actor: Actor):
        await self.dispatcher.dispatch(operation, record)
        await sync_to_async(EventDispatcher.dispatch_status_changed)(record, previous_status, operation, actor.id)

    @contextmanager
    def _observe(self, operation: str):
        start = time.monotonic()
        try:
            yield
        except QAError as e:
            qa_transitions_total.labels(operation=operation, outcome=e.code).inc()
            raise
        qa_transitions_total.labels(operation=operation, outcome="success").inc()
        qa_transition_duration.labels(operation=operation).observe(time.monotonic() - start)
