"""Tour data model, step compilation, playback, seen-state and import/export."""

from .models import DialogSize, SelectorType, Step, Tour, new_tour_id  # noqa: F401
from .markdown import render as render_markdown  # noqa: F401
from .step_builder import RunnableStep, build_session_options, build_steps  # noqa: F401
from .driver import DriverFactory, HeadlessDriver, TourDriver  # noqa: F401
from .player import (  # noqa: F401
    PlaybackContext,
    PlayerState,
    StepPreview,
    TourHandle,
    TourPlayer,
    highlight_step,
)
from .seen_store import SeenRecord, SeenStateStore  # noqa: F401
from .session import TourSession  # noqa: F401
from .tour_io import (  # noqa: F401
    ImportBundle,
    MergeMode,
    build_export_document,
    export_to_file,
    import_from_file,
    merge_tours,
    parse_import_text,
    validate_import_data,
)
from .autostart import backfill_tour_ids, schedule_auto_start, select_auto_start_tours  # noqa: F401
