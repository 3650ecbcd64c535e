"""
Service Container Tests
========================

Unit tests for dependency injection container.
"""

from django.test import TestCase, override_settings

from infrastructure.container import ServiceContainer, container, get_notification_service, get_transition_engine
from infrastructure.notifications import (
    InAppNotificationService,
    MockNotificationService,
    QANotificationServiceInterface,
)
from product_qa.domain.records import Actor
from product_qa.domain.services import NotificationDispatcher, QATransitionEngine, QAViewMaterializer
from product_qa.infra.record_store import DjangoQARecordStore, InMemoryQARecordStore, QARecordStoreInterface


QA_SETTINGS = {
    "RECORD_STORE_BACKEND": "django",
    "NOTIFICATION_BACKEND": "in_app",
    "NOTIFICATION_DELIVERY": "celery",
    "STORE_TIMEOUT_SECONDS": 3.5,
    "PUBLISH_EVENTS": False,
}


class ServiceContainerTest(TestCase):
    """Test ServiceContainer implementation."""

    def setUp(self):
        """Set up test fixtures."""
        # Reset container before each test
        container.reset()

    def tearDown(self):
        container.reset()

    def test_container_is_singleton(self):
        """Test that ServiceContainer is a singleton."""
        container1 = ServiceContainer()
        container2 = ServiceContainer()

        self.assertIs(container1, container2)
        self.assertIs(container1, container)

    @override_settings(PRODUCT_QA=QA_SETTINGS)
    def test_get_record_store(self):
        """Test getting record store from container."""
        store = container.record_store()

        self.assertIsInstance(store, QARecordStoreInterface)
        self.assertIsInstance(store, DjangoQARecordStore)

        # Second call should return cached instance
        self.assertIs(store, container.record_store())

    def test_record_store_backend_override(self):
        """Test explicit backend replaces the cached store."""
        store = container.record_store("memory")

        self.assertIsInstance(store, InMemoryQARecordStore)
        self.assertIs(container.transition_engine().store, store)

    @override_settings(PRODUCT_QA=QA_SETTINGS)
    def test_get_notification_service(self):
        """Test getting notification service from container."""
        service = container.notification_service()

        self.assertIsInstance(service, QANotificationServiceInterface)
        self.assertIsInstance(service, InAppNotificationService)
        self.assertIs(service, container.notification_service())

    @override_settings(PRODUCT_QA=QA_SETTINGS)
    def test_transition_engine_wiring(self):
        """Test engine is built from the container's store, dispatcher and timeout."""
        engine = container.transition_engine()

        self.assertIsInstance(engine, QATransitionEngine)
        self.assertIs(engine.store, container.record_store())
        self.assertIsInstance(engine.dispatcher, NotificationDispatcher)
        self.assertEqual(engine.dispatcher.delivery, "celery")
        self.assertEqual(engine.timeout, 3.5)
        self.assertIs(engine, get_transition_engine())

    def test_materializer_is_not_shared(self):
        """Test each call builds a fresh materializer for the actor."""
        actor = Actor.moderator("mod-1")

        first = container.materializer(actor)
        second = container.materializer(actor)

        self.assertIsInstance(first, QAViewMaterializer)
        self.assertIsNot(first, second)
        self.assertIs(first.engine, second.engine)

    def test_reset_container(self):
        """Test container reset functionality."""
        service1 = container.notification_service("mock")

        container.reset()

        service2 = container.notification_service("mock")
        self.assertIsNot(service1, service2)

    def test_configure_for_testing(self):
        """Test configure_for_testing uses in-process services."""
        container.configure_for_testing()

        self.assertIsInstance(container.record_store(), InMemoryQARecordStore)
        self.assertIsInstance(get_notification_service(), MockNotificationService)
        self.assertEqual(container.notification_dispatcher().delivery, "inline")
