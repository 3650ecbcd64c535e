import json
import logging
from typing import Optional

import redis
from django.conf import settings
from django.utils import timezone

from .event_bus_interface import EventBus


logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "events."


class RedisEventBus(EventBus):
    """Redis pub/sub implementation of event bus."""

    def __init__(self, redis_url: Optional[str] = None, client=None):
        self.redis_url = redis_url or getattr(settings, "EVENT_BUS_REDIS_URL", None) or settings.CELERY_BROKER_URL
        self._client = client

    @property
    def redis_client(self):
        if self._client is None:
            try:
                self._client = redis.from_url(self.redis_url)
            except (redis.RedisError, ValueError) as e:
                logger.error(f"Failed to connect to Redis at {self.redis_url}: {e}")
        return self._client

    def publish(self, event_type: str, payload: dict) -> bool:
        """Publish event to the ``events.<event_type>`` channel."""
        client = self.redis_client
        if client is None:
            logger.warning(f"Redis client not available. Event {event_type} dropped.")
            return False

        message = {"event_type": event_type, "occurred_at": timezone.now().isoformat(), "payload": payload}
        try:
            client.publish(f"{CHANNEL_PREFIX}{event_type}", json.dumps(message, default=str))
        except redis.RedisError as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return False

        logger.info(f"Published event: {event_type}")
        return True


# Singleton instance
_event_bus_instance = None


def get_event_bus() -> EventBus:
    """Get singleton event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = RedisEventBus()
    return _event_bus_instance
