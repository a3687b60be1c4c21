"""Per-user "has seen tour version" records.

Key layout::

    <namespace>:<appId>:<sheetId>:<tourId>:v<tourVersion>

Value: JSON ``{"timestamp": <ISO-8601 UTC>, "version": <int>}``.

Storage problems must never break playback: every operation catches
backend failures, logs a warning and degrades (reads report "not seen",
writes become no-ops).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from config import settings

from onboarding.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)

__all__ = ["SeenRecord", "SeenStateStore", "build_key"]


def build_key(namespace: str, app_id: str, sheet_id: str, tour_id: str, tour_version: int) -> str:
    return f"{namespace}:{app_id}:{sheet_id}:{tour_id}:v{tour_version}"


@dataclass(frozen=True)
class SeenRecord:
    key: str
    timestamp: Optional[str]
    version: Optional[int]

    @classmethod
    def parse(cls, key: str, raw: str) -> "SeenRecord":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            data = None
        if not isinstance(data, dict):
            return cls(key=key, timestamp=None, version=None)
        version = data.get("version")
        return cls(
            key=key,
            timestamp=data.get("timestamp"),
            version=version if isinstance(version, int) else None,
        )


class SeenStateStore:
    def __init__(
        self, backend: KeyValueStore | None, namespace: str = settings.STORAGE_NAMESPACE
    ) -> None:
        self._backend = backend
        self.namespace = namespace

    def _key(self, app_id: str, sheet_id: str, tour_id: str, tour_version: int) -> str:
        return build_key(self.namespace, app_id, sheet_id, tour_id, tour_version)

    def has_seen(self, app_id: str, sheet_id: str, tour_id: str, tour_version: int = 1) -> bool:
        key = self._key(app_id, sheet_id, tour_id, tour_version)
        if self._backend is None:
            _logger.warning("No seen-state backend; treating %s as unseen", key)
            return False
        try:
            seen = self._backend.get_item(key) is not None
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not read seen state %s: %s", key, e)
            return False
        _logger.debug("has_seen(%s): %s", key, seen)
        return seen

    def mark_seen(self, app_id: str, sheet_id: str, tour_id: str, tour_version: int = 1) -> None:
        key = self._key(app_id, sheet_id, tour_id, tour_version)
        if self._backend is None:
            _logger.warning("No seen-state backend; cannot mark %s", key)
            return
        value = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                "version": tour_version,
            }
        )
        try:
            self._backend.set_item(key, value)
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not write seen state %s: %s", key, e)
            return
        _logger.debug("mark_seen(%s)", key)

    def reset_seen(self, app_id: str, sheet_id: str, tour_id: str, tour_version: int = 1) -> None:
        key = self._key(app_id, sheet_id, tour_id, tour_version)
        if self._backend is None:
            return
        try:
            self._backend.remove_item(key)
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not remove seen state %s: %s", key, e)
            return
        _logger.debug("reset_seen(%s)", key)

    def _namespace_keys(self) -> List[str]:
        if self._backend is None:
            return []
        prefix = f"{self.namespace}:"
        return [k for k in self._backend.keys() if k.startswith(prefix)]

    def clear_all(self) -> int:
        """Remove every record under the namespace; returns the number removed."""
        try:
            keys = self._namespace_keys()
            for key in keys:
                self._backend.remove_item(key)  # type: ignore[union-attr]
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not clear seen state: %s", e)
            return 0
        _logger.info("Cleared %d %s entries", len(keys), self.namespace)
        return len(keys)

    def get_record(
        self, app_id: str, sheet_id: str, tour_id: str, tour_version: int = 1
    ) -> Optional[SeenRecord]:
        key = self._key(app_id, sheet_id, tour_id, tour_version)
        if self._backend is None:
            return None
        try:
            raw = self._backend.get_item(key)
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not read seen state %s: %s", key, e)
            return None
        return SeenRecord.parse(key, raw) if raw is not None else None

    def records(self) -> List[SeenRecord]:
        out: List[SeenRecord] = []
        try:
            for key in sorted(self._namespace_keys()):
                raw = self._backend.get_item(key)  # type: ignore[union-attr]
                if raw is not None:
                    out.append(SeenRecord.parse(key, raw))
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not list seen state: %s", e)
            return []
        return out
