"""Key/value persistence backends (localStorage-like surface).

The seen-state store only needs four primitives, captured by the
:class:`KeyValueStore` protocol. Two implementations are provided:

 - :class:`MemoryStore`: process-local dict, used by tests and ephemeral hosts
 - :class:`JsonFileStore`: single JSON object on disk, replaced atomically on every change

Backends raise :class:`~onboarding.errors.StorageError` on I/O failure; the
decision to swallow or propagate belongs to the caller.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from onboarding.errors import StorageError

__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore"]


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...  # pragma: no cover - structural

    def set_item(self, key: str, value: str) -> None: ...  # pragma: no cover

    def remove_item(self, key: str) -> None: ...  # pragma: no cover

    def keys(self) -> List[str]: ...  # pragma: no cover


class MemoryStore:
    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class JsonFileStore:
    """Flat ``{key: value}`` JSON file.

    A corrupt file is moved aside (``<name>.corrupt.<stamp>``) and the store
    starts empty, mirroring the other persistence services.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._data: Dict[str, str] | None = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data
        if not os.path.exists(self.path):
            self._data = {}
            return self._data
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except json.JSONDecodeError:
            self._backup_corrupt()
            self._data = {}
            return self._data
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}", context={"path": self.path}) from e
        if not isinstance(raw, dict):
            self._backup_corrupt()
            raw = {}
        self._data = {str(k): str(v) for k, v in raw.items()}
        return self._data

    def _backup_corrupt(self) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        try:
            os.replace(self.path, f"{self.path}.corrupt.{stamp}")
        except OSError:  # pragma: no cover
            pass

    def _flush(self, data: Dict[str, str]) -> None:
        tmp = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}", context={"path": self.path}) from e
        self._data = data

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._flush(data)

    def remove_item(self, key: str) -> None:
        data = dict(self._load())
        if key in data:
            del data[key]
            self._flush(data)

    def keys(self) -> List[str]:
        return list(self._load().keys())
