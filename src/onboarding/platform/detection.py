"""Platform detection as an explicit resolution state machine.

``PENDING -> RESOLVED``  asynchronous host lookup succeeded
``PENDING -> DEGRADED``  lookup failed / timed out / unavailable; the
                         synchronous location heuristic supplied the type

Either way consumers read the outcome through the same surface
(:meth:`PlatformResolver.current`, :meth:`PlatformResolver.adapter`). While
pending, ``current()`` is ``None``: the platform is unknown and must not be
guessed. Resolution happens once per resolver; later ``detect()`` calls
return the cached value without touching the host again.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from config import settings
from core.async_http import AsyncHttpError, fetch_json

from onboarding.errors import PlatformDetectionError
from onboarding.services.event_bus import EventBus, TourEvent
from .adapters import HostContext, PlatformAdapter, adapter_for
from .selectors import DEFAULT_CODE_PATH

_logger = logging.getLogger(__name__)

__all__ = [
    "PlatformInfo",
    "ResolutionState",
    "PlatformResolver",
    "detect_from_location",
    "code_path_for_version",
    "CODE_PATH_RULES",
]

CLOUD_URL_PATTERNS = (
    re.compile(r"qlikcloud\.com", re.IGNORECASE),
    re.compile(r"\.qlik\.com/sense", re.IGNORECASE),
)

# (platform, major version strictly below) -> code path; first match wins
CODE_PATH_RULES: Tuple[Tuple[str, int, str], ...] = (("client-managed", 13, "legacy"),)


class ResolutionState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class PlatformInfo:
    type: str
    version: Optional[str] = None
    code_path: str = DEFAULT_CODE_PATH


def detect_from_location(location: str) -> PlatformInfo:
    """Synchronous fallback: derive the platform type from the location shape."""
    if any(p.search(location or "") for p in CLOUD_URL_PATTERNS):
        return PlatformInfo(type="cloud")
    return PlatformInfo(type="client-managed")


def _major(version: str) -> Optional[int]:
    head = version.split(".", 1)[0]
    return int(head) if head.isdigit() else None


def code_path_for_version(platform_type: str, version: Optional[str]) -> str:
    if not version:
        return DEFAULT_CODE_PATH
    major = _major(version)
    if major is None:
        return DEFAULT_CODE_PATH
    for rule_platform, below, code_path in CODE_PATH_RULES:
        if rule_platform == platform_type and major < below:
            return code_path
    return DEFAULT_CODE_PATH


def _product_info_url(location: str) -> str:
    parts = urlsplit(location)
    if not parts.scheme or not parts.netloc:
        raise PlatformDetectionError(
            f"Location {location!r} has no origin", context={"location": location}
        )
    return f"{parts.scheme}://{parts.netloc}{settings.PRODUCT_INFO_PATH}"


def _info_from_product_document(location: str, doc: Any) -> PlatformInfo:
    if not isinstance(doc, Mapping):
        raise PlatformDetectionError("Product info is not an object")
    composition = doc.get("composition")
    if not isinstance(composition, Mapping) or not composition.get("version"):
        raise PlatformDetectionError("Product info lacks composition.version")
    version = str(composition["version"])
    deployment = str(composition.get("deploymentType") or "").lower()
    if deployment in {"cloud", "qliksenseservice"}:
        platform_type = "cloud"
    else:
        platform_type = detect_from_location(location).type
    return PlatformInfo(
        type=platform_type,
        version=version,
        code_path=code_path_for_version(platform_type, version),
    )


class PlatformResolver:
    def __init__(
        self,
        host: HostContext,
        *,
        bus: EventBus | None = None,
        timeout: float | None = None,
    ) -> None:
        self.host = host
        self._bus = bus
        self._timeout = timeout if timeout is not None else settings.PLATFORM_DETECT_TIMEOUT
        self._state = ResolutionState.PENDING
        self._info: Optional[PlatformInfo] = None
        self._adapter: Optional[PlatformAdapter] = None
        self._task: Optional[asyncio.Task[PlatformInfo]] = None
        self.host_calls = 0

    # Query surface ----------------------------------------------------------
    @property
    def state(self) -> ResolutionState:
        return self._state

    def current(self) -> Optional[PlatformInfo]:
        return self._info

    def adapter(self) -> Optional[PlatformAdapter]:
        return self._adapter

    # Detection ----------------------------------------------------------------
    async def detect(self) -> PlatformInfo:
        if self._info is not None:
            return self._info
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._task)

    async def _run(self) -> PlatformInfo:
        try:
            info = await asyncio.wait_for(self._detect_async(), timeout=self._timeout)
        except asyncio.TimeoutError:
            _logger.warning("Platform detection timed out after %.1fs; using fallback", self._timeout)
            return self._settle(detect_from_location(self.host.location), ResolutionState.DEGRADED)
        except PlatformDetectionError as e:
            _logger.warning("Platform detection failed (%s); using fallback", e)
            return self._settle(detect_from_location(self.host.location), ResolutionState.DEGRADED)
        except Exception as e:  # noqa: BLE001 - any host failure degrades to the location heuristic
            _logger.warning("Platform detection raised %r; using fallback", e)
            return self._settle(detect_from_location(self.host.location), ResolutionState.DEGRADED)
        return self._settle(info, ResolutionState.RESOLVED)

    async def _detect_async(self) -> PlatformInfo:
        client = self.host.http_client
        if client is None:
            raise PlatformDetectionError("Host API unavailable")
        url = _product_info_url(self.host.location)
        self.host_calls += 1
        try:
            doc = await fetch_json(url, client=client)
        except AsyncHttpError as e:
            raise PlatformDetectionError(str(e), context={"url": url}) from e
        return _info_from_product_document(self.host.location, doc)

    def _settle(self, info: PlatformInfo, state: ResolutionState) -> PlatformInfo:
        self._info = info
        self._state = state
        self._adapter = adapter_for(
            info.type, self.host, version=info.version, code_path=info.code_path
        )
        _logger.info(
            "Platform detected: %s (version=%s, codePath=%s, %s)",
            info.type,
            info.version,
            info.code_path,
            state.value,
        )
        if self._bus is not None:
            self._bus.publish(TourEvent.PLATFORM_RESOLVED, {"platform": info, "state": state})
        return info

    def resolve_degraded(self) -> PlatformInfo:
        """Settle immediately from the location when no event loop is available."""
        if self._info is not None:
            return self._info
        return self._settle(detect_from_location(self.host.location), ResolutionState.DEGRADED)
