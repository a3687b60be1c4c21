"""Owner of the single active tour or preview for one host widget.

Starting a tour or a preview first tears down whatever is active, so at
most one overlay is on screen per session. Each host widget creates its own
:class:`TourSession`; there is no module-level "current tour".
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from onboarding.services.event_bus import EventBus, TourEvent
from .driver import DriverFactory
from .models import Step, Tour
from .player import PlaybackContext, Scheduler, StepPreview, TourHandle, TourPlayer, highlight_step
from .seen_store import SeenStateStore

_logger = logging.getLogger(__name__)

__all__ = ["TourSession"]


class TourSession:
    def __init__(
        self,
        driver_factory: DriverFactory,
        seen_store: SeenStateStore | None = None,
        *,
        bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._factory = driver_factory
        self._seen = seen_store
        self._bus = bus
        self._scheduler = scheduler
        self._active: Optional[Union[TourPlayer, StepPreview]] = None

    @property
    def seen_store(self) -> SeenStateStore | None:
        return self._seen

    @property
    def active(self) -> Optional[Union[TourPlayer, StepPreview]]:
        return self._active

    def _publish(self, event: TourEvent, payload: dict) -> None:
        if self._bus is not None:
            self._bus.publish(event, payload)

    # Tours ------------------------------------------------------------------
    def start_tour(self, tour: Tour, context: PlaybackContext | None = None) -> Optional[TourHandle]:
        self.stop()
        player = TourPlayer(self._factory, self._seen)
        self._active = player
        ctx = context or PlaybackContext()
        user_callback = ctx.on_complete

        def on_complete(finished: Tour) -> None:
            if self._active is player:
                self._active = None
            self._publish(
                TourEvent.TOUR_COMPLETED,
                {"tourId": finished.tour_id, "tourName": finished.tour_name},
            )
            if user_callback is not None:
                user_callback(finished)

        ctx = PlaybackContext(
            platform=ctx.platform,
            code_path=ctx.code_path,
            app_id=ctx.app_id,
            sheet_id=ctx.sheet_id,
            on_complete=on_complete,
            document=ctx.document,
            sanitize=ctx.sanitize,
        )
        handle = player.run(tour, ctx)
        if handle is None:
            self._active = None
            return None
        self._publish(
            TourEvent.TOUR_STARTED,
            {"tourId": tour.tour_id, "tourName": tour.tour_name, "steps": len(handle.steps)},
        )
        return handle

    # Previews ---------------------------------------------------------------
    def preview_step(
        self, step: Step, context: PlaybackContext | None = None, *, dismiss_after: float | None = None
    ) -> Optional[StepPreview]:
        self.stop()
        holder: dict = {}

        def on_dismiss() -> None:
            if self._active is holder.get("preview"):
                self._active = None
            self._publish(TourEvent.PREVIEW_DISMISSED, {"title": step.popover_title})

        preview = highlight_step(
            step,
            context or PlaybackContext(),
            self._factory,
            scheduler=self._scheduler,
            dismiss_after=dismiss_after,
            on_dismiss=on_dismiss,
        )
        if preview is None:
            return None
        holder["preview"] = preview
        self._active = preview
        self._publish(TourEvent.PREVIEW_SHOWN, {"title": step.popover_title})
        return preview

    # Teardown ---------------------------------------------------------------
    def stop(self) -> None:
        current, self._active = self._active, None
        if current is None:
            return
        _logger.debug("Stopping active %s", type(current).__name__)
        if isinstance(current, StepPreview):
            current.cancel()
        else:
            current.destroy()
