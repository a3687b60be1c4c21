"""Versioned CSS selector registry for host platform objects.

When the host client DOM changes (new release, cloud update) only this table
needs editing. Entries map ``platform -> codePath -> selector templates``;
every platform has a ``default`` code path and named code paths are shallow
merged on top of it.

``objectById`` is a template with a single ``{object_id}`` placeholder so the
lookup stays a pure function of ``(platform, codePath, id)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping

from config import settings

_logger = logging.getLogger(__name__)

__all__ = ["SelectorSet", "get_selectors", "available_platforms", "DEFAULT_CODE_PATH"]

DEFAULT_CODE_PATH = "default"

SelectorTemplates = Dict[str, str]

_SELECTORS: dict[str, dict[str, SelectorTemplates]] = {
    "client-managed": {
        "default": {
            # The object id is embedded in a class on the .qv-object element;
            # there is no data-id attribute on it.
            "objectById": ".qv-object-{object_id}",
            "allObjects": ".qv-object",
            "sheetContainer": ".qv-sheet, .qv-panel-sheet, .qv-panel-content",
            "sheetTitle": ".sheet-title-container, .qs-sheet-title",
            "toolbar": ".qv-toolbar-container, .qs-toolbar",
        },
        # Pre-2019 clients render the grid without the panel wrappers.
        "legacy": {
            "sheetContainer": "#grid, .qv-sheet",
            "toolbar": ".qui-toolbar, .qv-toolbar-container",
        },
    },
    "cloud": {
        "default": {
            # data-testid first, class-based selector as the fallback
            "objectById": '[data-testid="object-{object_id}"], .qv-object-{object_id}',
            "allObjects": '[data-testid^="object-"], .qv-object',
            "objectIdAttr": "data-testid",
            "sheetContainer": '[data-testid="sheet-container"], .qv-sheet',
            "sheetTitle": '[data-testid="sheet-title"]',
            "toolbar": '[data-testid="toolbar"]',
        },
    },
}


@dataclass(frozen=True)
class SelectorSet:
    platform: str
    code_path: str
    templates: Mapping[str, str]

    def object_by_id(self, object_id: str) -> str:
        return self.templates["objectById"].format(object_id=object_id)

    def __getitem__(self, key: str) -> str:
        return self.templates[key]

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.templates.get(key, default)


def available_platforms() -> list[str]:
    return list(_SELECTORS.keys())


def get_selectors(platform: str | None, code_path: str | None = None) -> SelectorSet:
    """Return the selector set for ``platform``/``code_path``.

    Unknown platforms resolve to the baseline platform's defaults (logged,
    not raised). Unknown code paths resolve to the platform's ``default``.
    """
    entries = _SELECTORS.get(platform or "")
    if entries is None:
        _logger.warning(
            "Unknown platform %r, using %s selectors", platform, settings.BASELINE_PLATFORM
        )
        base = _SELECTORS[settings.BASELINE_PLATFORM][DEFAULT_CODE_PATH]
        return SelectorSet(settings.BASELINE_PLATFORM, DEFAULT_CODE_PATH, dict(base))
    base = entries[DEFAULT_CODE_PATH]
    if code_path and code_path != DEFAULT_CODE_PATH:
        override = entries.get(code_path)
        if override is not None:
            return SelectorSet(platform, code_path, {**base, **override})  # type: ignore[arg-type]
        _logger.debug("No code path %r for %s, using default selectors", code_path, platform)
    return SelectorSet(platform, DEFAULT_CODE_PATH, dict(base))  # type: ignore[arg-type]
