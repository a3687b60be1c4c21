"""Logging capture & console configuration for the tour engine.

Modules log through ``logging.getLogger(__name__)``; this service adds:

 - ``configure_logging``: console handler with the ``Onboard QS [LEVEL]:`` prefix
 - ``LoggingService``: ring buffer of recent records for diagnostics panels,
   optional ``LOG_RECORD_ADDED`` emission on an :class:`EventBus`, and a
   ``mute_all`` switch that silences every engine logger at once
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from threading import RLock
from typing import Deque, List, Optional

from .event_bus import EventBus, TourEvent

__all__ = ["LogEntry", "LoggingService", "configure_logging", "ENGINE_LOGGER"]

ENGINE_LOGGER = "onboarding"
_CONSOLE_FORMAT = "Onboard QS [%(levelname)s]: %(message)s"


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float


class _MuteFilter(logging.Filter):
    def __init__(self) -> None:
        super().__init__()
        self.muted = False

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        return not self.muted


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__()
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        self._svc._ingest_record(record)


def configure_logging(level: str | int = "INFO", *, mute: bool = False) -> logging.Logger:
    """Attach a console handler to the engine logger (idempotent)."""
    logger = logging.getLogger(ENGINE_LOGGER)
    logger.setLevel(level)
    if not any(getattr(h, "_onboard_console", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        handler._onboard_console = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    for h in logger.handlers:
        if getattr(h, "_onboard_console", False):
            h.setLevel(logging.CRITICAL + 1 if mute else logging.NOTSET)
    return logger


class LoggingService:
    def __init__(self, capacity: int = 200, *, bus: EventBus | None = None) -> None:
        self._capacity = capacity
        self._bus = bus
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._handler = _RingBufferHandler(self)
        self._handler.setLevel(logging.DEBUG)
        self._mute = _MuteFilter()
        self._logger_name = ENGINE_LOGGER
        self._attached = False

    # Lifecycle --------------------------------------------------------
    def attach(self, logger_name: str = ENGINE_LOGGER) -> None:
        if self._attached:
            return
        logger = logging.getLogger(logger_name)
        self._handler.addFilter(self._mute)
        logger.addHandler(self._handler)
        if logger.level == logging.NOTSET or logger.level > logging.DEBUG:
            logger.setLevel(logging.DEBUG)
        self._logger_name = logger_name
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        logger = logging.getLogger(self._logger_name)
        logger.removeHandler(self._handler)
        for h in logger.handlers:
            h.removeFilter(self._mute)
        self._attached = False

    def mute_all(self, value: bool) -> None:
        # Propagated records skip logger filters; mute at the handlers instead.
        self._mute.muted = bool(value)
        for h in logging.getLogger(self._logger_name).handlers:
            h.addFilter(self._mute)

    @property
    def muted(self) -> bool:
        return self._mute.muted

    # Internal ingestion -----------------------------------------------
    def _ingest_record(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
        )
        with self._lock:
            self._entries.append(entry)
        if self._bus is not None:
            self._bus.publish(
                TourEvent.LOG_RECORD_ADDED,
                {"level": entry.level, "name": entry.name, "message": entry.message[:120]},
            )

    # Query ------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        if limit is None:
            return data
        return data[-limit:] if limit > 0 else []

    def filter(
        self, *, level: str | None = None, name_contains: str | None = None
    ) -> List[LogEntry]:
        out: List[LogEntry] = []
        for e in self.recent():
            if level and e.level != level:
                continue
            if name_contains and name_contains not in e.name:
                continue
            out.append(e)
        return out

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
