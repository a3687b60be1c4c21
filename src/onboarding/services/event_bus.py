"""Synchronous publish/subscribe bus for engine lifecycle events.

Producers (platform resolver, tour session, logging capture) publish typed
events; host surfaces subscribe to re-evaluate platform-dependent work once
detection resolves instead of polling.

 - One failing handler never breaks the publish cycle (errors are retained)
 - ``once`` subscriptions are removed after their first successful call
 - Handlers run outside the lock so they may (un)subscribe re-entrantly
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol

__all__ = ["TourEvent", "Event", "EventBus", "EventHandler", "Subscription"]


class TourEvent(str, Enum):
    PLATFORM_RESOLVED = "platform_resolved"
    TOUR_STARTED = "tour_started"
    TOUR_COMPLETED = "tour_completed"
    PREVIEW_SHOWN = "preview_shown"
    PREVIEW_DISMISSED = "preview_dismissed"
    TOURS_IMPORTED = "tours_imported"
    LOG_RECORD_ADDED = "log_record_added"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float


class EventHandler(Protocol):
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


def _key(name: str | TourEvent) -> str:
    return name.value if isinstance(name, TourEvent) else name


class EventBus:
    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []

    # Subscription management -------------------------------------------
    def subscribe(
        self, name: str | TourEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event)
            if bucket:
                remaining = [existing for existing in bucket if existing is not sub]
                if remaining:
                    self._subs[sub.event] = remaining
                else:
                    self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()

    # Publishing -----------------------------------------------------------
    def publish(self, name: str | TourEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
        done: List[Subscription] = []
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                with self._lock:
                    self._errors.append((evt, exc))
            else:
                if sub.once:
                    done.append(sub)
        for sub in done:
            self.unsubscribe(sub)
        return evt

    # Introspection --------------------------------------------------------
    def subscriber_count(self, name: str | TourEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)
