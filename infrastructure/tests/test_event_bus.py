"""
Event Bus Tests
===============

Unit tests for the Redis event bus and QA event dispatching.
"""

import json
from unittest.mock import MagicMock, patch

import redis
from django.test import TestCase, override_settings
from django.utils import timezone

from infrastructure.events import RedisEventBus
from product_qa.domain.events import STATUS_CHANGED_EVENT, EventDispatcher, qa_status_changed
from product_qa.domain.records import QARecord, QAStatus


def make_record():
    now = timezone.now()
    return QARecord(
        listing_id="a7e3c1d9-2f4b-4e6a-8c0d-5b9f1e2a3c47",
        seller_id="3",
        status=QAStatus.WAITING_FOR_SAMPLE.value,
        listing_name="Brass Lamp",
        approval_status="pending",
        submitted_at=now,
        updated_at=now,
    )


class RedisEventBusTest(TestCase):
    """Test RedisEventBus publishing."""

    def setUp(self):
        self.redis_client = MagicMock()
        self.bus = RedisEventBus(redis_url="redis://localhost:6379/0", client=self.redis_client)

    def test_publish(self):
        self.assertTrue(self.bus.publish("product_qa.status_changed", {"listing_id": "x"}))

        channel, raw = self.redis_client.publish.call_args.args
        self.assertEqual(channel, "events.product_qa.status_changed")
        message = json.loads(raw)
        self.assertEqual(message["event_type"], "product_qa.status_changed")
        self.assertEqual(message["payload"], {"listing_id": "x"})
        self.assertIn("occurred_at", message)

    def test_publish_redis_error(self):
        self.redis_client.publish.side_effect = redis.ConnectionError("connection refused")

        self.assertFalse(self.bus.publish("product_qa.status_changed", {}))

    @patch("infrastructure.events.redis_event_bus.redis.from_url")
    def test_lazy_client(self, mock_from_url):
        bus = RedisEventBus(redis_url="redis://cache:6379/2")

        bus.publish("ping", {})
        bus.publish("ping", {})

        mock_from_url.assert_called_once_with("redis://cache:6379/2")


class EventDispatcherTest(TestCase):
    """Test QA status change dispatching."""

    def setUp(self):
        self.received = []
        qa_status_changed.connect(self.receiver, dispatch_uid="event-dispatcher-test")

    def tearDown(self):
        qa_status_changed.disconnect(dispatch_uid="event-dispatcher-test")

    def receiver(self, sender, **kwargs):
        self.received.append(kwargs)

    @override_settings(PRODUCT_QA={"PUBLISH_EVENTS": False})
    @patch("infrastructure.events.redis_event_bus.get_event_bus")
    def test_signal_only(self, mock_get_event_bus):
        record = make_record()

        EventDispatcher.dispatch_status_changed(record, QAStatus.PENDING_DIGITAL_REVIEW.value, "approve_for_sample", 11)

        self.assertEqual(len(self.received), 1)
        self.assertIs(self.received[0]["record"], record)
        self.assertEqual(self.received[0]["actor_id"], "11")
        mock_get_event_bus.assert_not_called()

    @override_settings(PRODUCT_QA={"PUBLISH_EVENTS": True})
    @patch("infrastructure.events.redis_event_bus.get_event_bus")
    def test_publishes_to_event_bus(self, mock_get_event_bus):
        record = make_record()

        EventDispatcher.dispatch_status_changed(record, QAStatus.PENDING_DIGITAL_REVIEW.value, "approve_for_sample", 11)

        event_type, payload = mock_get_event_bus.return_value.publish.call_args.args
        self.assertEqual(event_type, STATUS_CHANGED_EVENT)
        self.assertEqual(payload["status"], QAStatus.WAITING_FOR_SAMPLE)
        self.assertEqual(payload["previous_status"], QAStatus.PENDING_DIGITAL_REVIEW)
        self.assertEqual(payload["operation"], "approve_for_sample")

    @override_settings(PRODUCT_QA={"PUBLISH_EVENTS": True})
    @patch("infrastructure.events.redis_event_bus.get_event_bus")
    def test_event_bus_failure_is_swallowed(self, mock_get_event_bus):
        mock_get_event_bus.return_value.publish.side_effect = RuntimeError("bus down")

        EventDispatcher.dispatch_status_changed(make_record(), None, "submit", 3)

        self.assertEqual(len(self.received), 1)
