from .event_bus_interface import EventBus
from .redis_event_bus import RedisEventBus, get_event_bus


__all__ = ["EventBus", "RedisEventBus", "get_event_bus"]
