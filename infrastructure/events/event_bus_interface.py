from abc import ABC, abstractmethod


class EventBus(ABC):
    """Abstract event bus interface."""

    @abstractmethod
    def publish(self, event_type: str, payload: dict) -> bool:
        """Publish event to bus. Returns False if the event was dropped."""
        pass
