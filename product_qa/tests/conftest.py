import pytest

from infrastructure.container import container
from infrastructure.notifications import MockNotificationService
from product_qa.domain.records import Actor
from product_qa.domain.services import NotificationDispatcher, QATransitionEngine
from product_qa.infra.record_store import InMemoryQARecordStore


@pytest.fixture
def store():
    return InMemoryQARecordStore()


@pytest.fixture
def notifications():
    return MockNotificationService()


@pytest.fixture
def dispatcher(notifications):
    return NotificationDispatcher(notifications, delivery="inline")


@pytest.fixture
def engine(store, dispatcher):
    return QATransitionEngine(store=store, dispatcher=dispatcher, timeout=0.5)


@pytest.fixture
def seller():
    return Actor.seller("seller-1")


@pytest.fixture
def other_seller():
    return Actor.seller("seller-2")


@pytest.fixture
def moderator():
    return Actor.moderator("mod-1")


@pytest.fixture(autouse=True)
def reset_container():
    container.reset()
    yield
    container.reset()
