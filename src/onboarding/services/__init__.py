"""Runtime services shared by the tour engine (events, logging, storage)."""

from .event_bus import EventBus, TourEvent, Event, Subscription  # noqa: F401
from .storage import KeyValueStore, MemoryStore, JsonFileStore  # noqa: F401
