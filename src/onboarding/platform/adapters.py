"""Platform adapters: client-managed and cloud hosts.

An adapter bundles everything platform-specific the engine needs at runtime:

 - resolve the current location (sheet) identifier
 - list the objects on the current sheet that a step can target
 - map an object id to a CSS selector (via the selector registry)
 - inject stylesheets into the host document

Host capabilities arrive through :class:`HostContext`; the adapter consumes
them and never owns them. The engine API (``get_all_infos`` / ``get_object``)
is the same on both platforms, so object listing lives on the base class.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .dom import HostDocument
from .selectors import DEFAULT_CODE_PATH, SelectorSet, get_selectors

_logger = logging.getLogger(__name__)

__all__ = [
    "HostContext",
    "NavigationApi",
    "AppModel",
    "SheetObject",
    "PlatformAdapter",
    "ClientManagedAdapter",
    "CloudAdapter",
    "adapter_for",
]

SHEET_URL_RE = re.compile(r"/sheet/([a-zA-Z0-9-]+)")

# Engine object types that are never valid tour targets
EXCLUDED_TYPES = frozenset(
    {
        "sheet",
        "story",
        "appprops",
        "loadmodel",
        "dimension",
        "measure",
        "masterobject",
        "qix-system-dimension",
        "onboard-qs",
    }
)
ENRICH_TITLE_LIMIT = 100


class NavigationApi(Protocol):
    def get_current_sheet_id(self) -> Any: ...  # pragma: no cover - structural


class ObjectHandle(Protocol):
    async def get_layout(self) -> Mapping[str, Any]: ...  # pragma: no cover


class AppModel(Protocol):
    async def get_all_infos(self) -> List[Mapping[str, Any]]: ...  # pragma: no cover

    async def get_object(self, object_id: str) -> ObjectHandle: ...  # pragma: no cover


@dataclass
class HostContext:
    """Capabilities supplied by the hosting environment.

    Attributes
    ----------
    location:
        Current location string (page URL).
    document:
        Queryable host DOM; ``None`` when running without one.
    navigation:
        Optional navigation API exposing ``get_current_sheet_id()``.
    http_client:
        Optional ``httpx.AsyncClient`` used for host API calls during
        detection; ``None`` disables the asynchronous detection path.
    """

    location: str
    document: Optional[HostDocument] = None
    navigation: Optional[NavigationApi] = None
    http_client: Any = None


@dataclass(frozen=True)
class SheetObject:
    id: str
    title: str
    type: str


class PlatformAdapter:
    platform_type = "client-managed"

    def __init__(self, host: HostContext, *, version: str | None = None, code_path: str = DEFAULT_CODE_PATH):
        self.host = host
        self.version = version
        self.code_path = code_path

    # Selectors ----------------------------------------------------------
    @property
    def selectors(self) -> SelectorSet:
        return get_selectors(self.platform_type, self.code_path)

    def selector_for_object(self, object_id: str) -> str:
        return self.selectors.object_by_id(object_id)

    # Location -------------------------------------------------------------
    def _sheet_id_from_url(self) -> Optional[str]:
        match = SHEET_URL_RE.search(self.host.location or "")
        return match.group(1) if match else None

    def current_location_id(self) -> Optional[str]:
        sheet_id = self._sheet_id_from_url()
        if sheet_id:
            _logger.debug("Sheet ID via URL pattern: %s", sheet_id)
            return sheet_id
        _logger.debug("Could not detect sheet ID")
        return None

    def is_edit_mode(self, options: Mapping[str, Any] | None = None) -> bool:
        options = options or {}
        if options.get("readOnly") is not None:
            return not options["readOnly"]
        return "/state/edit" in (self.host.location or "")

    # Styles -----------------------------------------------------------------
    def inject_stylesheet(self, css: str, element_id: str) -> bool:
        """Inject ``css`` once per ``element_id``; returns False when skipped."""
        doc = self.host.document
        if doc is None:
            _logger.debug("No host document; stylesheet %s not injected", element_id)
            return False
        if doc.get_element_by_id(element_id) is not None:
            return False
        doc.upsert_style(css, element_id)
        return True

    # Objects ----------------------------------------------------------------
    async def list_objects(self, app: AppModel) -> List[SheetObject]:
        """Return targetable objects on the current sheet, sorted by title."""
        try:
            infos = list(await app.get_all_infos())
            sheet_id = self.current_location_id()
            if sheet_id:
                infos = await self._restrict_to_sheet(app, sheet_id, infos)
            objects = [
                SheetObject(
                    id=info["qId"],
                    title=info.get("qTitle") or info["qId"],
                    type=info.get("qType", ""),
                )
                for info in infos
                if info.get("qType", "") not in EXCLUDED_TYPES
                and "system" not in info.get("qType", "")
            ]
            if len(objects) < ENRICH_TITLE_LIMIT:
                objects = list(await asyncio.gather(*(self._enrich(app, o) for o in objects)))
            return sorted(objects, key=lambda o: o.title.casefold())
        except Exception as e:  # noqa: BLE001 - host API failures degrade to empty
            _logger.error("Failed to get sheet objects: %s", e)
            return []

    async def _restrict_to_sheet(
        self, app: AppModel, sheet_id: str, infos: List[Mapping[str, Any]]
    ) -> List[Mapping[str, Any]]:
        try:
            sheet = await app.get_object(sheet_id)
            layout = await sheet.get_layout()
        except Exception as e:  # noqa: BLE001
            _logger.warning("Could not filter by sheet: %s", e)
            return infos
        ids = [c.get("name") for c in layout.get("cells") or []]
        child_items = (layout.get("qChildList") or {}).get("qItems") or []
        for item in child_items:
            child_id = item.get("qInfo", {}).get("qId")
            if child_id and child_id not in ids:
                ids.append(child_id)
        filtered = [i for i in infos if i.get("qId") in ids]
        return filtered or infos

    async def _enrich(self, app: AppModel, obj: SheetObject) -> SheetObject:
        if obj.title != obj.id:
            return obj
        try:
            handle = await app.get_object(obj.id)
            layout = await handle.get_layout()
        except Exception:  # noqa: BLE001 - keep the bare id as title
            return obj
        meta = layout.get("qMeta") or {}
        info = layout.get("qInfo") or {}
        return SheetObject(
            id=obj.id,
            title=layout.get("title") or meta.get("title") or obj.id,
            type=info.get("qType") or obj.type,
        )


class ClientManagedAdapter(PlatformAdapter):
    platform_type = "client-managed"

    def current_location_id(self) -> Optional[str]:
        sheet_id = self._sheet_id_from_url()
        if sheet_id:
            _logger.debug("Sheet ID via URL pattern: %s", sheet_id)
            return sheet_id
        nav = self.host.navigation
        if nav is not None:
            try:
                raw = nav.get_current_sheet_id()
                nav_id = raw if isinstance(raw, str) else (raw or {}).get("id")
                if nav_id:
                    _logger.debug("Sheet ID via navigation API: %s", nav_id)
                    return nav_id
            except Exception as e:  # noqa: BLE001 - fall through to DOM lookup
                _logger.debug("Navigation API failed: %s", e)
        dom_id = self._sheet_id_from_dom()
        if dom_id:
            _logger.debug("Sheet ID via DOM: %s", dom_id)
            return dom_id
        _logger.debug("Could not detect sheet ID")
        return None

    def _sheet_id_from_dom(self) -> Optional[str]:
        doc = self.host.document
        if doc is None:
            return None
        el = doc.query_selector(self.selectors["sheetContainer"])
        if el is None:
            return None
        dom_id = el.get("data-id") or el.get("data-qid")
        if not dom_id:
            raw_id = el.get("id")
            dom_id = raw_id.replace("qv-sheet-", "") if raw_id else None
        # short ids are generic container names, not sheet ids
        if dom_id and len(dom_id) > 5:
            return dom_id
        return None


class CloudAdapter(PlatformAdapter):
    platform_type = "cloud"


_ADAPTERS: Dict[str, type[PlatformAdapter]] = {
    "client-managed": ClientManagedAdapter,
    "cloud": CloudAdapter,
}


def adapter_for(
    platform_type: str, host: HostContext, *, version: str | None = None, code_path: str = DEFAULT_CODE_PATH
) -> PlatformAdapter:
    cls = _ADAPTERS.get(platform_type, ClientManagedAdapter)
    return cls(host, version=version, code_path=code_path)
