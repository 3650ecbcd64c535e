from unittest.mock import patch

import pytest
from asgiref.sync import async_to_sync

from infrastructure.notifications import NotificationKind
from product_qa.domain.records import QAStatus
from product_qa.domain.services import NotificationDispatcher, build_notification
from product_qa.domain.state_machine import QAOperation
from product_qa.tests.factories import QARecordFactory


@pytest.mark.unit
class TestBuildNotification:
    @pytest.mark.parametrize("operation", [QAOperation.SUBMIT, QAOperation.SUBMIT_SAMPLE])
    def test_seller_operations_owe_nothing(self, operation):
        assert build_notification(operation, QARecordFactory()) is None

    def test_sample_request(self):
        record = QARecordFactory(status=QAStatus.WAITING_FOR_SAMPLE, listing_name="Oak Table")

        notification = build_notification(QAOperation.APPROVE_FOR_SAMPLE, record)

        assert notification.kind == NotificationKind.SAMPLE_REQUEST
        assert notification.seller_id == record.seller_id
        assert notification.listing_id == record.listing_id
        assert notification.listing_name == "Oak Table"
        assert notification.reason is None

    @pytest.mark.parametrize(
        "operation,stage", [(QAOperation.REJECT_DIGITAL, "digital"), (QAOperation.FAIL_QUALITY, "physical")]
    )
    def test_rejection_carries_reason_and_stage(self, operation, stage):
        record = QARecordFactory(status=QAStatus.REJECTED, rejection_reason="scratched", rejection_stage=stage)

        notification = build_notification(operation, record)

        assert notification.kind == NotificationKind.REJECTED
        assert notification.reason == "scratched"
        assert notification.stage == stage

    def test_revision(self):
        record = QARecordFactory(status=QAStatus.FOR_REVISION, revision_reason="more photos", revision_stage="digital")

        notification = build_notification(QAOperation.REQUEST_REVISION, record)

        assert notification.kind == NotificationKind.REVISION_REQUESTED
        assert notification.reason == "more photos"

    def test_approved(self):
        record = QARecordFactory(status=QAStatus.ACTIVE_VERIFIED)

        assert build_notification(QAOperation.PASS_QUALITY, record).kind == NotificationKind.APPROVED


@pytest.mark.unit
class TestNotificationDispatcher:
    def test_inline_delivery(self, notifications):
        dispatcher = NotificationDispatcher(notifications, delivery="inline")
        record = QARecordFactory(status=QAStatus.ACTIVE_VERIFIED)

        assert async_to_sync(dispatcher.dispatch)(QAOperation.PASS_QUALITY, record) is True
        assert notifications.kinds() == [NotificationKind.APPROVED]

    def test_nothing_owed(self, notifications):
        dispatcher = NotificationDispatcher(notifications, delivery="inline")

        assert async_to_sync(dispatcher.dispatch)(QAOperation.SUBMIT, QARecordFactory()) is False
        assert notifications.sent == []

    @patch("product_qa.tasks.deliver_qa_notification.delay")
    def test_celery_delivery_enqueues_task(self, mock_delay, notifications):
        dispatcher = NotificationDispatcher(notifications, delivery="celery")
        record = QARecordFactory(status=QAStatus.WAITING_FOR_SAMPLE)

        assert async_to_sync(dispatcher.dispatch)(QAOperation.APPROVE_FOR_SAMPLE, record) is True

        mock_delay.assert_called_once()
        payload = mock_delay.call_args.args[0]
        assert payload["kind"] == NotificationKind.SAMPLE_REQUEST
        assert payload["listing_id"] == record.listing_id
        # Delivered by the worker, not here
        assert notifications.sent == []

    @patch("product_qa.tasks.deliver_qa_notification.delay", side_effect=ConnectionError("broker unreachable"))
    def test_enqueue_failure_is_swallowed(self, mock_delay, notifications):
        dispatcher = NotificationDispatcher(notifications, delivery="celery")
        record = QARecordFactory(status=QAStatus.REJECTED, rejection_reason="dented", rejection_stage="physical")

        assert async_to_sync(dispatcher.dispatch)(QAOperation.FAIL_QUALITY, record) is False

    def test_delivery_failure_is_swallowed(self, notifications):
        notifications.fail_with = RuntimeError("service down")
        dispatcher = NotificationDispatcher(notifications, delivery="inline")

        result = async_to_sync(dispatcher.dispatch)(QAOperation.PASS_QUALITY, QARecordFactory())

        assert result is False

    def test_invalid_delivery_mode(self, notifications):
        with pytest.raises(ValueError):
            NotificationDispatcher(notifications, delivery="carrier")
