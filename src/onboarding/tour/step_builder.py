"""Compile a :class:`Tour` into playback-ready :class:`RunnableStep` values.

A step survives compilation iff

  - ``selectorType == none`` (standalone dialog), or
  - ``selectorType == css`` with a non-empty ``customCssSelector``, or
  - it has a non-empty ``targetObjectId``

Targeted steps carry a zero-argument ``target`` resolver that queries the
host document when called. It is deliberately not evaluated at build time:
host objects render asynchronously and may not exist yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from config import settings

from onboarding.errors import SelectorResolutionError
from onboarding.platform.dom import Element, HostDocument
from onboarding.platform.selectors import DEFAULT_CODE_PATH, get_selectors
from .markdown import render
from .models import (
    DEFAULT_DIALOG_HEIGHT,
    DEFAULT_DIALOG_WIDTH,
    DialogSize,
    SelectorType,
    Step,
    Tour,
)

_logger = logging.getLogger(__name__)

__all__ = [
    "Popover",
    "DialogDirective",
    "RunnableStep",
    "TargetResolver",
    "build_steps",
    "build_session_options",
    "dialog_directive",
    "step_survives",
    "selector_for_step",
    "POPOVER_CLASS",
    "PROGRESS_TEXT",
]

POPOVER_CLASS = "onboard-qs-popover"
PROGRESS_TEXT = "{{current}} of {{total}}"

TargetResolver = Callable[[], Optional[Element]]


@dataclass(frozen=True)
class Popover:
    title: str
    html: str
    side: str = "bottom"
    align: str = "center"


@dataclass(frozen=True)
class DialogDirective:
    size: DialogSize
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def css_class(self) -> str:
        return f"onboard-qs-dialog-{self.size.value}"

    def style(self) -> Dict[str, str]:
        if self.width is None or self.height is None:
            return {}
        return {
            "width": f"{self.width}px",
            "maxWidth": f"{self.width}px",
            "minHeight": f"{self.height}px",
        }


def dialog_directive(step: Step) -> DialogDirective:
    if step.dialog_size is DialogSize.CUSTOM:
        return DialogDirective(
            size=DialogSize.CUSTOM,
            width=step.custom_dialog_width or DEFAULT_DIALOG_WIDTH,
            height=step.custom_dialog_height or DEFAULT_DIALOG_HEIGHT,
        )
    return DialogDirective(size=step.dialog_size)


@dataclass(frozen=True)
class RunnableStep:
    source: Step
    popover: Popover
    disable_interaction: bool
    selector: Optional[str] = None
    target: Optional[TargetResolver] = field(default=None, compare=False)
    dialog: Optional[DialogDirective] = None

    @property
    def is_dialog(self) -> bool:
        return self.dialog is not None

    def require_target(self) -> Element:
        """Resolve the target now; raise when it is missing."""
        element = self.target() if self.target is not None else None
        if element is None:
            raise SelectorResolutionError(
                f"No element for selector {self.selector!r}", context={"selector": self.selector}
            )
        return element

    def resolve_target(self) -> Optional[Element]:
        try:
            return self.require_target()
        except SelectorResolutionError as e:
            _logger.debug("%s", e)
            return None

    def to_driver_step(self) -> Dict[str, Any]:
        popover: Dict[str, Any] = {
            "title": self.popover.title,
            "description": self.popover.html,
            "side": self.popover.side,
            "align": self.popover.align,
        }
        out: Dict[str, Any] = {"popover": popover, "disableActiveInteraction": self.disable_interaction}
        if self.dialog is not None:
            popover["popoverClass"] = f"{POPOVER_CLASS} {self.dialog.css_class}"
            style = self.dialog.style()
            if style:
                popover["style"] = style
        else:
            out["element"] = self.target
        return out


def step_survives(step: Step) -> bool:
    if step.selector_type is SelectorType.NONE:
        return True
    if step.selector_type is SelectorType.CSS and step.custom_css_selector:
        return True
    return bool(step.target_object_id)


def selector_for_step(step: Step, platform: str, code_path: str = DEFAULT_CODE_PATH) -> Optional[str]:
    """CSS selector for a targeted step; None for dialogs and untargeted steps."""
    if step.selector_type is SelectorType.NONE:
        return None
    if step.selector_type is SelectorType.CSS and step.custom_css_selector:
        return step.custom_css_selector
    if step.target_object_id:
        return get_selectors(platform, code_path).object_by_id(step.target_object_id)
    return None


def _make_target(document: Optional[HostDocument], selector: str) -> TargetResolver:
    def resolve() -> Optional[Element]:
        if document is None:
            return None
        try:
            return document.query_selector(selector)
        except SelectorResolutionError as e:
            _logger.warning("%s", e)
            return None

    return resolve


def build_steps(
    tour: Tour,
    platform: str,
    code_path: str = DEFAULT_CODE_PATH,
    *,
    document: Optional[HostDocument] = None,
    sanitize: Optional[bool] = None,
) -> List[RunnableStep]:
    sanitize = settings.SANITIZE_POPOVER_HTML if sanitize is None else sanitize
    out: List[RunnableStep] = []
    for step in tour.steps:
        if not step_survives(step):
            continue
        popover = Popover(
            title=step.popover_title,
            html=render(step.popover_description, sanitize=sanitize),
            side=step.popover_side,
            align=step.popover_align,
        )
        if step.selector_type is SelectorType.NONE:
            out.append(
                RunnableStep(
                    source=step,
                    popover=popover,
                    disable_interaction=step.disable_interaction,
                    dialog=dialog_directive(step),
                )
            )
            continue
        selector = selector_for_step(step, platform, code_path)
        assert selector is not None  # guaranteed by step_survives
        out.append(
            RunnableStep(
                source=step,
                popover=popover,
                disable_interaction=step.disable_interaction,
                selector=selector,
                target=_make_target(document, selector),
            )
        )
    return out


def build_session_options(tour: Tour) -> Dict[str, Any]:
    """Top-level renderer options (navigation, overlay, captions)."""
    opacity = tour.overlay_opacity / 100 if tour.overlay_opacity is not None else 0.6
    return {
        "animate": True,
        "smoothScroll": True,
        "allowClose": True,
        "allowKeyboardControl": tour.allow_keyboard,
        "showProgress": tour.show_progress,
        "progressText": PROGRESS_TEXT,
        "showButtons": ["next", "previous", "close"],
        "overlayColor": tour.overlay_color or "rgba(0, 0, 0, 0.6)",
        "overlayOpacity": opacity,
        "stagePadding": tour.stage_padding or 8,
        "stageRadius": tour.stage_radius or 5,
        "popoverClass": POPOVER_CLASS,
        "nextBtnText": tour.next_btn_text or "Next",
        "prevBtnText": tour.prev_btn_text or "Previous",
        "doneBtnText": tour.done_btn_text or "Done",
    }
