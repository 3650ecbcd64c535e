"""
Notification Service Tests
==========================

Unit tests for the QA notification services.
"""

from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings

from infrastructure.notifications import (
    InAppNotificationService,
    MockNotificationService,
    NotificationException,
    NotificationFactory,
    NotificationKind,
    QANotification,
)
from product_qa.models import SellerNotification


LISTING_ID = "d1c6a7e2-4b0f-4c55-8f0a-2e9b7d3c1a66"


class InAppNotificationServiceTest(TestCase):
    """Test in-app notification rows."""

    def setUp(self):
        self.service = InAppNotificationService()

    def test_sample_request(self):
        self.service.notify_sample_request("5", LISTING_ID, listing_name="Teak Bench")

        notification = SellerNotification.objects.get(seller_id="5")
        self.assertEqual(notification.type, NotificationKind.SAMPLE_REQUEST)
        self.assertEqual(notification.title, "Sample Requested")
        self.assertIn('"Teak Bench" has been digitally approved', notification.message)
        self.assertEqual(notification.action_url, "/seller/product-status-qa")
        self.assertEqual(notification.action_data, {"productId": LISTING_ID})
        self.assertEqual(notification.priority, "high")
        self.assertFalse(notification.is_read)

    def test_product_approved(self):
        self.service.notify_product_approved("5", LISTING_ID, listing_name="Teak Bench")

        notification = SellerNotification.objects.get(seller_id="5")
        self.assertEqual(notification.title, "Product Approved!")
        self.assertIn("now live on the marketplace", notification.message)
        self.assertEqual(notification.action_url, "/seller/products")

    def test_product_rejected(self):
        self.service.notify_product_rejected("5", LISTING_ID, "cracked leg", "physical", listing_name="Teak Bench")

        notification = SellerNotification.objects.get(seller_id="5")
        self.assertEqual(notification.type, NotificationKind.REJECTED)
        self.assertEqual(
            notification.message, 'Your product "Teak Bench" was rejected during physical review. Reason: cracked leg'
        )

    def test_revision_requested(self):
        self.service.notify_revision_requested("5", LISTING_ID, "add dimensions", listing_name="Teak Bench")

        notification = SellerNotification.objects.get(seller_id="5")
        self.assertEqual(notification.title, "Revision Requested")
        self.assertTrue(notification.message.endswith("Feedback: add dimensions"))

    @patch("product_qa.models.SellerNotification.objects.create")
    def test_database_failure(self, mock_create):
        mock_create.side_effect = DatabaseError("disk full")

        with self.assertRaises(NotificationException):
            self.service.notify_product_approved("5", LISTING_ID)


class MockNotificationServiceTest(TestCase):
    """Test mock notification service."""

    def setUp(self):
        self.service = MockNotificationService()

    def test_deliver_routes_by_kind(self):
        notification = QANotification(
            kind=NotificationKind.REVISION_REQUESTED, seller_id="9", listing_id=LISTING_ID, reason="new photos"
        )

        self.service.deliver(notification)

        self.assertEqual(self.service.sent, [notification])

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            self.service.deliver(QANotification(kind="product_archived", seller_id="9", listing_id=LISTING_ID))

    def test_injected_failure(self):
        self.service.fail_with = RuntimeError("boom")

        with self.assertRaises(NotificationException):
            self.service.notify_sample_request("9", LISTING_ID)
        self.assertEqual(self.service.sent, [])

    def test_clear(self):
        self.service.notify_product_approved("9", LISTING_ID)
        self.service.fail_with = RuntimeError("boom")

        self.service.clear()

        self.assertEqual(self.service.sent, [])
        self.assertIsNone(self.service.fail_with)

    def test_payload_round_trip(self):
        notification = QANotification(
            kind=NotificationKind.REJECTED, seller_id="9", listing_id=LISTING_ID, reason="dented", stage="digital"
        )

        self.assertEqual(QANotification.from_dict(notification.to_dict()), notification)


class NotificationFactoryTest(TestCase):
    """Test notification factory."""

    def test_create_mock(self):
        self.assertIsInstance(NotificationFactory.create("mock"), MockNotificationService)

    @override_settings(PRODUCT_QA={"NOTIFICATION_BACKEND": "in_app"})
    def test_create_from_settings(self):
        self.assertIsInstance(NotificationFactory.create(), InAppNotificationService)

    def test_invalid_backend(self):
        with self.assertRaises(ValueError):
            NotificationFactory.create("sms")
