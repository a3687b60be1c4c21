"""Tour playback lifecycle.

:class:`TourPlayer` is one-shot::

    IDLE --run()--> RUNNING --(close | completion | destroy())--> DESTROYED

Whatever ends the run, finalization happens exactly once and in order:
the tour version is marked seen (only when app, sheet and tour ids are all
known), then the completion callback fires.

:func:`highlight_step` previews a single step in the editor. Previews
auto-dismiss after ``PREVIEW_DISMISS_SECONDS`` through an injected
scheduler.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from config import settings

from onboarding.errors import PlayerStateError, SelectorResolutionError
from onboarding.platform.dom import HostDocument
from onboarding.platform.selectors import DEFAULT_CODE_PATH
from .driver import DriverFactory, TourDriver
from .markdown import render
from .models import SelectorType, Step, Tour
from .seen_store import SeenStateStore
from .step_builder import (
    POPOVER_CLASS,
    RunnableStep,
    build_session_options,
    build_steps,
    dialog_directive,
    selector_for_step,
)

_logger = logging.getLogger(__name__)

__all__ = [
    "PlayerState",
    "PlaybackContext",
    "TourHandle",
    "TourPlayer",
    "StepPreview",
    "highlight_step",
    "Scheduler",
    "default_scheduler",
]

NO_TITLE = "(No title)"
NO_DESCRIPTION = "(No description)"


class Cancellable(Protocol):
    def cancel(self) -> Any: ...  # pragma: no cover - structural


Scheduler = Callable[[float, Callable[[], None]], Optional[Cancellable]]


def default_scheduler(delay: float, callback: Callable[[], None]) -> Optional[Cancellable]:
    """Schedule on the running loop; without one the callback is dropped."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        _logger.debug("No running event loop; %.2fs timer not scheduled", delay)
        return None
    return loop.call_later(delay, callback)


class PlayerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class PlaybackContext:
    platform: str = settings.BASELINE_PLATFORM
    code_path: str = DEFAULT_CODE_PATH
    app_id: Optional[str] = None
    sheet_id: Optional[str] = None
    on_complete: Optional[Callable[[Tour], None]] = field(default=None, compare=False)
    document: Optional[HostDocument] = field(default=None, compare=False)
    sanitize: Optional[bool] = None


@dataclass
class TourHandle:
    tour: Tour
    steps: List[RunnableStep]
    driver: TourDriver
    player: "TourPlayer"

    @property
    def active(self) -> bool:
        return self.player.state is PlayerState.RUNNING

    def destroy(self) -> None:
        self.player.destroy()


class TourPlayer:
    def __init__(self, driver_factory: DriverFactory, seen_store: SeenStateStore | None = None) -> None:
        self._factory = driver_factory
        self._seen = seen_store
        self._state = PlayerState.IDLE
        self._driver: Optional[TourDriver] = None
        self._tour: Optional[Tour] = None
        self._context: Optional[PlaybackContext] = None
        self._finalized = False

    @property
    def state(self) -> PlayerState:
        return self._state

    def run(self, tour: Tour, context: PlaybackContext | None = None) -> Optional[TourHandle]:
        if self._state is not PlayerState.IDLE:
            raise PlayerStateError(
                f"Player already {self._state.value}", context={"tour": tour.tour_name}
            )
        context = context or PlaybackContext()
        steps = build_steps(
            tour,
            context.platform,
            context.code_path,
            document=context.document,
            sanitize=context.sanitize,
        )
        if not steps:
            _logger.warning("Tour %r has no playable steps", tour.tour_name)
            return None

        config: Dict[str, Any] = build_session_options(tour)
        config["steps"] = [s.to_driver_step() for s in steps]
        config["onDestroyed"] = self._finalize
        self._tour = tour
        self._context = context
        self._driver = self._factory(config)
        self._state = PlayerState.RUNNING
        _logger.info("Starting tour %r (%d steps)", tour.tour_name, len(steps))
        self._driver.drive()
        return TourHandle(tour=tour, steps=steps, driver=self._driver, player=self)

    def destroy(self) -> None:
        if self._state is PlayerState.IDLE:
            self._state = PlayerState.DESTROYED
            return
        if self._driver is not None and self._driver.is_active():
            self._driver.destroy()
        self._finalize()

    def _finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True
        self._state = PlayerState.DESTROYED
        tour, ctx = self._tour, self._context
        if tour is None or ctx is None:
            return
        if ctx.app_id and ctx.sheet_id and tour.tour_id and self._seen is not None:
            self._seen.mark_seen(ctx.app_id, ctx.sheet_id, tour.tour_id, tour.tour_version)
        _logger.info("Tour %r finished", tour.tour_name)
        if ctx.on_complete is not None:
            try:
                ctx.on_complete(tour)
            except Exception:  # noqa: BLE001
                _logger.exception("Completion callback failed for tour %r", tour.tour_name)


# Single-step preview -------------------------------------------------------


class StepPreview:
    def __init__(
        self,
        driver: TourDriver,
        *,
        scheduler: Scheduler | None = None,
        dismiss_after: float | None = None,
        on_dismiss: Callable[[], None] | None = None,
    ) -> None:
        self.driver = driver
        self._on_dismiss = on_dismiss
        self._dismissed = False
        delay = settings.PREVIEW_DISMISS_SECONDS if dismiss_after is None else dismiss_after
        self._timer = (scheduler or default_scheduler)(delay, self.cancel)

    @property
    def active(self) -> bool:
        return not self._dismissed and self.driver.is_active()

    def cancel(self) -> None:
        if self._dismissed:
            return
        self._dismissed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.driver.is_active():
            self.driver.destroy()
        if self._on_dismiss is not None:
            self._on_dismiss()


def _preview_popover(step: Step, sanitize: Optional[bool]) -> Dict[str, Any]:
    return {
        "title": step.popover_title or NO_TITLE,
        "description": render(
            step.popover_description or NO_DESCRIPTION,
            sanitize=settings.SANITIZE_POPOVER_HTML if sanitize is None else sanitize,
        ),
    }


def highlight_step(
    step: Step,
    context: PlaybackContext,
    driver_factory: DriverFactory,
    *,
    scheduler: Scheduler | None = None,
    dismiss_after: float | None = None,
    on_dismiss: Callable[[], None] | None = None,
) -> Optional[StepPreview]:
    """Preview one step; ``None`` when a targeted step's element is missing."""
    popover = _preview_popover(step, context.sanitize)
    if step.selector_type is SelectorType.NONE:
        directive = dialog_directive(step)
        config: Dict[str, Any] = {"popoverClass": f"{POPOVER_CLASS} {directive.css_class}"}
        style = directive.style()
        if style:
            popover["style"] = style
        driver = driver_factory(config)
        driver.highlight({"popover": popover})
    else:
        selector = selector_for_step(step, context.platform, context.code_path)
        if selector is None:
            return None
        element = None
        if context.document is not None:
            try:
                element = context.document.query_selector(selector)
            except SelectorResolutionError as e:
                _logger.warning("%s", e)
        if element is None:
            _logger.warning("Cannot highlight: element not found for selector %s", selector)
            return None
        popover.update(side=step.popover_side, align=step.popover_align)
        driver = driver_factory({"popoverClass": POPOVER_CLASS, "stagePadding": 8, "stageRadius": 5})
        driver.highlight({"element": element, "popover": popover})
    return StepPreview(driver, scheduler=scheduler, dismiss_after=dismiss_after, on_dismiss=on_dismiss)
