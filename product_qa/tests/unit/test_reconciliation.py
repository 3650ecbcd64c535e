import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from asgiref.sync import async_to_sync

from product_qa.domain.exceptions import PersistenceError
from product_qa.domain.records import QAStatus
from product_qa.domain.services import QAScreenSession, QAViewMaterializer, ReloadTrigger
from product_qa.tests.factories import ListingAttributesFactory, QARecordFactory


@pytest.fixture
def moderator_view(store, engine, moderator):
    return QAViewMaterializer(store, engine, moderator)


@pytest.fixture
def seller_view(store, engine, seller):
    return QAViewMaterializer(store, engine, seller)


@pytest.mark.unit
class TestCrossViewConvergence:
    def test_other_view_converges_on_its_next_reload(self, engine, store, seller, moderator_view, seller_view):
        record = async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        moderator_session = QAScreenSession(moderator_view)
        seller_session = QAScreenSession(seller_view)
        async_to_sync(moderator_session.open)()
        async_to_sync(seller_session.open)()

        async_to_sync(moderator_view.approve_for_sample)(record.listing_id, note="please submit sample")

        # The seller's view is not told about the moderator's change
        assert seller_view.get(record.listing_id).status == QAStatus.PENDING_DIGITAL_REVIEW
        assert moderator_view.get(record.listing_id).status == QAStatus.WAITING_FOR_SAMPLE

        async_to_sync(seller_session.on_focus)()

        authoritative = store.snapshot(record.listing_id)
        assert seller_view.get(record.listing_id) == authoritative
        assert seller_view.waiting_for_sample == (authoritative,)
        assert seller_view.pending_digital_review == ()

    def test_manual_refresh_converges(self, engine, store, seller, moderator_view, seller_view):
        record = async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        async_to_sync(moderator_view.reload)()
        async_to_sync(seller_view.reload)()

        async_to_sync(moderator_view.request_revision)(record.listing_id, "missing dimensions")
        async_to_sync(QAScreenSession(seller_view).on_manual_refresh)()

        assert seller_view.for_revision == (store.snapshot(record.listing_id),)


@pytest.mark.unit
class TestReloadTriggers:
    def test_focus_joins_reload_in_flight(self, engine, store, seller, seller_view):
        async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        session = QAScreenSession(seller_view)
        async_to_sync(session.open)()
        store.calls.clear()
        store.latency = 0.05

        async def focus_and_refresh():
            return await asyncio.gather(session.on_focus(), session.on_manual_refresh())

        first, second = async_to_sync(focus_and_refresh)()

        assert store.calls == ["list_records"]
        assert first is second

    def test_local_transition_reload_always_fetches(self, store, seller_view):
        async_to_sync(seller_view.reload)(ReloadTrigger.INITIAL)
        store.calls.clear()
        store.latency = 0.05

        async def focus_then_transition_reload():
            await asyncio.gather(
                seller_view.reload(ReloadTrigger.FOCUS),
                seller_view.reconciliation.request(ReloadTrigger.LOCAL_TRANSITION),
            )

        async_to_sync(focus_then_transition_reload)()

        assert store.calls == ["list_records", "list_records"]

    def test_failed_reload_keeps_previous_buckets(self, engine, store, seller, seller_view):
        async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        async_to_sync(seller_view.reload)()
        before = seller_view.buckets
        store.fail_next(PersistenceError("read refused"))

        with pytest.raises(PersistenceError):
            async_to_sync(seller_view.reload)(ReloadTrigger.FOCUS)

        assert seller_view.buckets is before
        assert seller_view.stale

    def test_inconsistent_record_set(self, engine, store, seller, seller_view):
        record = async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        async_to_sync(seller_view.reload)()
        before = seller_view.buckets

        with patch.object(store, "list_records", new=AsyncMock(return_value=[record, record])):
            with pytest.raises(PersistenceError):
                async_to_sync(seller_view.reload)(ReloadTrigger.FOCUS)

        assert seller_view.buckets is before
        assert seller_view.stale

    def test_inconsistent_record_set_after_transition(self, engine, store, seller, moderator_view):
        record = async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        async_to_sync(moderator_view.reload)()
        unknown = QARecordFactory(status="ARCHIVED")

        with patch.object(store, "list_records", new=AsyncMock(return_value=[unknown])):
            updated = async_to_sync(moderator_view.approve_for_sample)(record.listing_id)

        assert updated.status == QAStatus.WAITING_FOR_SAMPLE
        assert moderator_view.stale

        async_to_sync(moderator_view.reload)()

        assert not moderator_view.stale
        assert moderator_view.get(record.listing_id) == store.snapshot(record.listing_id)

    def test_reload_timeout(self, engine, store, seller, seller_view):
        async_to_sync(engine.submit)(seller, ListingAttributesFactory())
        engine.timeout = 0.05
        store.latency = 0.5

        with pytest.raises(PersistenceError):
            async_to_sync(seller_view.reload)()

        assert not seller_view.loaded
        assert seller_view.stale

    def test_unknown_trigger(self, seller_view):
        with pytest.raises(ValueError):
            async_to_sync(seller_view.reload)("poll")

    def test_focus_before_open_opens(self, seller_view):
        session = QAScreenSession(seller_view)

        async_to_sync(session.on_focus)()

        assert session.is_open
        assert seller_view.loaded
