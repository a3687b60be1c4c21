"""Host widget helpers: tour id backfill and auto-start on sheet load."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Tuple

from config import settings

from .models import Tour, new_tour_id
from .player import PlaybackContext, Scheduler, default_scheduler
from .seen_store import SeenStateStore
from .session import TourSession

_logger = logging.getLogger(__name__)

__all__ = ["backfill_tour_ids", "select_auto_start_tours", "schedule_auto_start"]


def backfill_tour_ids(tours: Sequence[Tour], *, id_factory=new_tour_id) -> Tuple[List[Tour], bool]:
    """Give every id-less tour a fresh id; ``changed`` tells the host to persist."""
    changed = False
    out: List[Tour] = []
    for tour in tours:
        if tour.tour_id:
            out.append(tour)
            continue
        changed = True
        out.append(tour.with_id(id_factory()))
    return out, changed


def select_auto_start_tours(
    tours: Sequence[Tour],
    seen_store: SeenStateStore | None,
    app_id: Optional[str],
    sheet_id: Optional[str],
) -> List[Tour]:
    selected: List[Tour] = []
    for tour in tours:
        if not tour.auto_start:
            continue
        if tour.show_once and seen_store is not None and app_id and sheet_id and tour.tour_id:
            if seen_store.has_seen(app_id, sheet_id, tour.tour_id, tour.tour_version):
                _logger.debug('Tour "%s" already seen, skipping auto-start', tour.tour_name)
                continue
        selected.append(tour)
    return selected


def schedule_auto_start(
    session: TourSession,
    tours: Sequence[Tour],
    context: PlaybackContext,
    *,
    seen_store: SeenStateStore | None = None,
    scheduler: Scheduler | None = None,
    delay: float | None = None,
) -> List[Any]:
    """Start each eligible tour after a short delay so host objects can render.

    Returns the scheduler handles (``None`` entries where nothing was scheduled).
    """
    schedule = scheduler or default_scheduler
    wait = settings.AUTO_START_DELAY_SECONDS if delay is None else delay
    handles: List[Any] = []
    store = seen_store if seen_store is not None else session.seen_store
    for tour in select_auto_start_tours(tours, store, context.app_id, context.sheet_id):

        def start(tour: Tour = tour) -> None:
            _logger.info('Auto-starting tour "%s"', tour.tour_name)
            session.start_tour(tour, context)

        handles.append(schedule(wait, start))
    return handles
