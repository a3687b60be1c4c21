"""Tour bundle import / export and merge.

Interchange document::

    {"version": 1, "exportedAt": "<ISO-8601>", "tours": [...], "theme": {...}, "widget": {...}}

Validation stops at the first violation and raises
:class:`~onboarding.errors.ValidationError`; nothing is merged unless the
whole bundle validates. Merging never mutates its inputs.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from config import settings

from onboarding.design.theme_resolver import ThemeConfig
from onboarding.errors import ImportCancelledError, ImportFileError, ValidationError
from onboarding.services.event_bus import EventBus, TourEvent
from .models import Tour, new_tour_id

_logger = logging.getLogger(__name__)

__all__ = [
    "ImportBundle",
    "MergeMode",
    "validate_import_data",
    "parse_import_text",
    "merge_tours",
    "build_export_document",
    "export_to_file",
    "import_from_file",
    "FilePicker",
]

FilePicker = Callable[[], Awaitable[Optional[Union[str, "os.PathLike[str]"]]]]


@dataclass(frozen=True)
class ImportBundle:
    tours: Tuple[Tour, ...]
    theme: Optional[Dict[str, Any]] = None
    widget: Optional[Dict[str, Any]] = None


class MergeMode(str, Enum):
    REPLACE_ALL = "replaceAll"
    REPLACE_MATCHING = "replaceMatching"
    ADD_TO_EXISTING = "addToExisting"


# Validation -----------------------------------------------------------------


def validate_import_data(data: Any) -> ImportBundle:
    if not isinstance(data, Mapping):
        raise ValidationError("Import data must be a JSON object")
    tours = data.get("tours")
    if not isinstance(tours, list):
        raise ValidationError('Import data must contain a "tours" array')
    for i, tour in enumerate(tours):
        if not isinstance(tour, Mapping):
            raise ValidationError(f"Tour at index {i} is not an object", context={"index": i})
        name = tour.get("tourName")
        if not name or not isinstance(name, str):
            raise ValidationError(f'Tour at index {i} is missing a valid "tourName"', context={"index": i})
        tour_id = tour.get("tourId")
        if not tour_id or not isinstance(tour_id, str):
            raise ValidationError(f'Tour at index {i} is missing a valid "tourId"', context={"index": i})
        if not isinstance(tour.get("steps"), list):
            raise ValidationError(f'Tour "{name}" is missing a "steps" array', context={"index": i})

    theme = data.get("theme")
    widget = data.get("widget")
    return ImportBundle(
        tours=tuple(Tour.from_dict(t) for t in tours),
        theme=dict(theme) if isinstance(theme, Mapping) else None,
        widget=dict(widget) if isinstance(widget, Mapping) else None,
    )


def parse_import_text(text: str) -> ImportBundle:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise ValidationError(f"Invalid import file: {e}") from e
    return validate_import_data(data)


# Merge ----------------------------------------------------------------------


def _parse_mode(mode: Union[MergeMode, str]) -> Optional[MergeMode]:
    try:
        return MergeMode(mode)
    except ValueError:
        return None


def merge_tours(
    existing: Sequence[Tour],
    imported: Sequence[Tour],
    mode: Union[MergeMode, str],
    *,
    id_factory: Callable[[], str] = new_tour_id,
) -> List[Tour]:
    """Combine ``imported`` into ``existing``.

    - ``replaceAll``: imported only, every tour gets a fresh id
    - ``replaceMatching``: same ``tourName`` replaces in place keeping the
      existing id; unmatched tours are appended with fresh ids
    - ``addToExisting`` (and any unknown mode): append with fresh ids
    """
    parsed = _parse_mode(mode)
    if parsed is MergeMode.REPLACE_ALL:
        return [t.with_id(id_factory()) for t in imported]
    if parsed is MergeMode.REPLACE_MATCHING:
        result = list(existing)
        for tour in imported:
            idx = next((i for i, t in enumerate(result) if t.tour_name == tour.tour_name), -1)
            if idx >= 0:
                result[idx] = tour.with_id(result[idx].tour_id or id_factory())
            else:
                result.append(tour.with_id(id_factory()))
        return result
    if parsed is None:
        _logger.warning('Unknown import mode "%s", defaulting to addToExisting', mode)
    return list(existing) + [t.with_id(id_factory()) for t in imported]


# Export ---------------------------------------------------------------------


def _theme_dict(theme: Union[ThemeConfig, Mapping[str, Any], None]) -> Dict[str, Any]:
    if isinstance(theme, ThemeConfig):
        return theme.to_dict()
    return dict(theme or {})


def build_export_document(
    tours: Sequence[Union[Tour, Mapping[str, Any]]],
    theme: Union[ThemeConfig, Mapping[str, Any], None] = None,
    widget: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "version": settings.EXPORT_VERSION,
        "exportedAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "tours": [t.to_dict() if isinstance(t, Tour) else dict(t) for t in tours],
        "theme": _theme_dict(theme),
        "widget": dict(widget or {}),
    }


def export_to_file(
    path: Union[str, "os.PathLike[str]"],
    tours: Sequence[Union[Tour, Mapping[str, Any]]],
    theme: Union[ThemeConfig, Mapping[str, Any], None] = None,
    widget: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    doc = build_export_document(tours, theme, widget)
    parent = os.path.dirname(os.fspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(doc, fh, indent=2)
    _logger.info("Exported %d tour(s) to %s", len(doc["tours"]), os.fspath(path))
    return doc


# Import ---------------------------------------------------------------------


def _read_text(path) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


async def import_from_file(picker: FilePicker, *, bus: EventBus | None = None) -> ImportBundle:
    """Ask ``picker`` for a file, then read and validate it.

    Raises :class:`ImportCancelledError` when the picker returns ``None``,
    :class:`ImportFileError` when the file cannot be read and
    :class:`ValidationError` when its content is not a valid bundle.
    """
    path = await picker()
    if path is None:
        raise ImportCancelledError("Import cancelled")
    try:
        text = await asyncio.to_thread(_read_text, path)
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFileError("Failed to read file", context={"path": os.fspath(path)}) from e
    try:
        bundle = parse_import_text(text)
    except ValidationError as e:
        if str(e).startswith("Invalid import file"):
            raise
        raise ValidationError(f"Invalid import file: {e}", context=e.context) from e
    _logger.info("Import file parsed: %d tour(s)", len(bundle.tours))
    if bus is not None:
        bus.publish(TourEvent.TOURS_IMPORTED, {"count": len(bundle.tours), "path": os.fspath(path)})
    return bundle
