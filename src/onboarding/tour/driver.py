"""Boundary to the guided-tour rendering library.

The renderer is a black box: it receives session options plus an ordered
list of driver steps (see :meth:`RunnableStep.to_driver_step`) and owns
overlay positioning and navigation. The engine only relies on the
:class:`TourDriver` surface below and on the ``onDestroyed`` callback found
in the config mapping.

:class:`HeadlessDriver` is an in-process implementation used by the CLI and
tests; it walks steps without drawing anything.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from onboarding.platform.dom import Element

_logger = logging.getLogger(__name__)

__all__ = ["TourDriver", "DriverFactory", "HeadlessDriver"]


class TourDriver(Protocol):
    def drive(self, start_index: int = 0) -> None: ...  # pragma: no cover - structural

    def highlight(self, step: Mapping[str, Any]) -> None: ...  # pragma: no cover

    def destroy(self) -> None: ...  # pragma: no cover

    def is_active(self) -> bool: ...  # pragma: no cover


DriverFactory = Callable[[Dict[str, Any]], TourDriver]


class HeadlessDriver:
    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        self.config: Dict[str, Any] = dict(config or {})
        self._steps: List[Mapping[str, Any]] = list(self.config.get("steps") or [])
        self._index = -1
        self._active = False
        self._element: Optional[Element] = None
        self.skipped: List[int] = []
        self.visited: List[int] = []

    # Navigation -----------------------------------------------------------
    def drive(self, start_index: int = 0) -> None:
        if not self._steps:
            return
        self._active = True
        self._show(max(0, min(start_index, len(self._steps) - 1)))

    def highlight(self, step: Mapping[str, Any]) -> None:
        self._steps = [step]
        self._active = True
        self._show(0)

    def move_next(self) -> None:
        if not self._active:
            return
        if self._index + 1 >= len(self._steps):
            self.destroy()
            return
        self._show(self._index + 1)

    def move_previous(self) -> None:
        if self._active and self._index > 0:
            self._show(self._index - 1)

    def _show(self, index: int) -> None:
        self._index = index
        self.visited.append(index)
        resolver = self._steps[index].get("element")
        if resolver is None:
            self._element = None  # dialog step
            return
        if isinstance(resolver, Element):
            self._element = resolver
        else:
            self._element = resolver() if callable(resolver) else None
        if self._element is None:
            _logger.warning("Step %d target not found; showing popover without highlight", index)
            self.skipped.append(index)

    # Lifecycle ------------------------------------------------------------
    def destroy(self) -> None:
        if not self._active:
            return
        self._active = False
        callback = self.config.get("onDestroyed")
        if callable(callback):
            callback()

    def is_active(self) -> bool:
        return self._active

    # Introspection --------------------------------------------------------
    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_step(self) -> Optional[Mapping[str, Any]]:
        if 0 <= self._index < len(self._steps):
            return self._steps[self._index]
        return None

    @property
    def current_element(self) -> Optional[Element]:
        return self._element

    @property
    def step_count(self) -> int:
        return len(self._steps)

    def has_next(self) -> bool:
        return self._index + 1 < len(self._steps)
