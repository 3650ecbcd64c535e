"""
Reconciliation Protocol
=======================

Decides when a view refetches. Two views of the same record never talk to
each other: a transition made through one is invisible to the other until
that other reloads on one of its own triggers.

Triggers:
    INITIAL          first load when a screen opens
    LOCAL_TRANSITION after every successful transition through this view
    FOCUS            the owning screen regains focus
    MANUAL_REFRESH   the user asks for a refresh

Focus and manual refresh join a reload that is already running. A
local-transition reload always starts its own fetch, so it is guaranteed to
observe the write that triggered it. Only the newest fetch may replace the
cache.
"""

import asyncio
import itertools
from typing import TYPE_CHECKING, Optional

from product_qa.domain.exceptions import PersistenceError, QAError
from product_qa.infra.observability.metrics import qa_bucket_size, qa_view_reloads_total

from .base import BaseService


if TYPE_CHECKING:
    from .materializer import QABuckets, QAViewMaterializer


class ReloadTrigger:
    INITIAL = "initial"
    LOCAL_TRANSITION = "local_transition"
    FOCUS = "focus"
    MANUAL_REFRESH = "manual_refresh"

    ALL = (INITIAL, LOCAL_TRANSITION, FOCUS, MANUAL_REFRESH)


COALESCING_TRIGGERS = frozenset({ReloadTrigger.FOCUS, ReloadTrigger.MANUAL_REFRESH})


class ReconciliationProtocol(BaseService):
    """Owns every reload of one materializer."""

    def __init__(self, materializer: "QAViewMaterializer"):
        super().__init__()
        self.materializer = materializer
        self._sequence = itertools.count(1)
        self._applied = 0
        self._pending: Optional[asyncio.Future] = None

    @property
    def role(self) -> str:
        return str(self.materializer.actor.role)

    async def request(self, trigger: str) -> "QABuckets":
        """
        Reload the view for trigger.

        Raises:
            PersistenceError: If the fetch fails; the previous buckets are kept and the view is marked stale
        """
        if trigger not in ReloadTrigger.ALL:
            raise ValueError(f"Unknown reload trigger: {trigger}")

        pending = self._pending
        if trigger in COALESCING_TRIGGERS and pending is not None and not pending.done():
            self.logger.debug(f"{trigger} reload joined one already in flight")
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._reload(trigger))
        self._pending = task
        try:
            return await task
        finally:
            if self._pending is task:
                self._pending = None

    async def after_transition(self) -> bool:
        """
        Reload after a successful local transition.

        A failed reload does not undo the transition: it is logged, the view
        is marked stale and the next trigger fetches again.
        """
        try:
            await self.request(ReloadTrigger.LOCAL_TRANSITION)
        except QAError as e:
            self.logger.warning(f"Reload after transition failed, view marked stale: {e}")
            return False
        return True

    async def _reload(self, trigger: str) -> "QABuckets":
        from .materializer import partition_records

        sequence = next(self._sequence)
        try:
            records = await self.materializer.fetch_records()
        except QAError as e:
            self.materializer.stale = True
            qa_view_reloads_total.labels(role=self.role, trigger=trigger, outcome=e.code).inc()
            raise

        try:
            buckets = partition_records(records)
        except ValueError as e:
            self.materializer.stale = True
            qa_view_reloads_total.labels(role=self.role, trigger=trigger, outcome=PersistenceError.code).inc()
            raise PersistenceError(f"Record store returned an inconsistent record set: {e}") from e
        if sequence > self._applied:
            self._applied = sequence
            self.materializer.replace(buckets)
            if self.materializer.actor.is_moderator:
                for name, size in buckets.counts().items():
                    qa_bucket_size.labels(bucket=name).set(size)
        else:
            self.logger.debug(f"Discarding {trigger} reload #{sequence}; a newer fetch already landed")

        qa_view_reloads_total.labels(role=self.role, trigger=trigger, outcome="success").inc()
        self.logger.info(f"{self.role} view reloaded ({trigger}): {len(buckets)} records")
        return self.materializer.buckets


class QAScreenSession:
    """
    Binds a materializer to one screen's lifecycle.

    Usage:
        session = QAScreenSession(materializer)
        await session.open()
        ...
        await session.on_focus()
    """

    def __init__(self, materializer: "QAViewMaterializer"):
        self.materializer = materializer
        self.is_open = False

    async def open(self) -> "QABuckets":
        buckets = await self.materializer.reload(ReloadTrigger.INITIAL)
        self.is_open = True
        return buckets

    async def on_focus(self) -> "QABuckets":
        if not self.is_open:
            return await self.open()
        return await self.materializer.reload(ReloadTrigger.FOCUS)

    async def on_manual_refresh(self) -> "QABuckets":
        return await self.materializer.reload(ReloadTrigger.MANUAL_REFRESH)
