"""Tour / Step data model.

Values are owned by the host document model and arrive as camelCase
mappings. They are parsed into frozen dataclasses; any change the engine
makes (id backfill, merge) produces new values for the host to persist.
Keys the engine does not know about are kept in ``extras`` so a parse /
serialize round trip never drops author data.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

_logger = logging.getLogger(__name__)

__all__ = [
    "SelectorType",
    "DialogSize",
    "Step",
    "Tour",
    "new_tour_id",
    "DEFAULT_DIALOG_WIDTH",
    "DEFAULT_DIALOG_HEIGHT",
]

DEFAULT_DIALOG_WIDTH = 500
DEFAULT_DIALOG_HEIGHT = 350


def new_tour_id() -> str:
    return str(uuid.uuid4())


class SelectorType(str, Enum):
    OBJECT = "object"
    CSS = "css"
    NONE = "none"

    @classmethod
    def parse(cls, raw: Any) -> "SelectorType":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw)) if raw else cls.OBJECT
        except ValueError:
            _logger.debug("Unknown selectorType %r treated as object", raw)
            return cls.OBJECT


class DialogSize(str, Enum):
    DYNAMIC = "dynamic"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    X_LARGE = "x-large"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, raw: Any) -> "DialogSize":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw)) if raw else cls.MEDIUM
        except ValueError:
            _logger.debug("Unknown dialogSize %r treated as medium", raw)
            return cls.MEDIUM


def _opt_int(raw: Any) -> Optional[int]:
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    try:
        return int(float(raw))
    except (TypeError, ValueError):
        return None


def _opt_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None


def _split(raw: Mapping[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {k: v for k, v in raw.items() if k not in known}


_STEP_KEYS = (
    "selectorType",
    "targetObjectId",
    "customCssSelector",
    "popoverTitle",
    "popoverDescription",
    "popoverSide",
    "popoverAlign",
    "disableInteraction",
    "dialogSize",
    "customDialogWidth",
    "customDialogHeight",
)


@dataclass(frozen=True)
class Step:
    selector_type: SelectorType = SelectorType.OBJECT
    target_object_id: str = ""
    custom_css_selector: str = ""
    popover_title: str = ""
    popover_description: str = ""
    popover_side: str = "bottom"
    popover_align: str = "center"
    disable_interaction: bool = True
    dialog_size: DialogSize = DialogSize.MEDIUM
    custom_dialog_width: Optional[int] = None
    custom_dialog_height: Optional[int] = None
    extras: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Step":
        return cls(
            selector_type=SelectorType.parse(raw.get("selectorType")),
            target_object_id=str(raw.get("targetObjectId") or ""),
            custom_css_selector=str(raw.get("customCssSelector") or ""),
            popover_title=str(raw.get("popoverTitle") or ""),
            popover_description=str(raw.get("popoverDescription") or ""),
            popover_side=str(raw.get("popoverSide") or "bottom"),
            popover_align=str(raw.get("popoverAlign") or "center"),
            disable_interaction=raw.get("disableInteraction") is not False,
            dialog_size=DialogSize.parse(raw.get("dialogSize")),
            custom_dialog_width=_opt_int(raw.get("customDialogWidth")),
            custom_dialog_height=_opt_int(raw.get("customDialogHeight")),
            extras=_split(raw, _STEP_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extras)
        out.update(
            selectorType=self.selector_type.value,
            targetObjectId=self.target_object_id,
            customCssSelector=self.custom_css_selector,
            popoverTitle=self.popover_title,
            popoverDescription=self.popover_description,
            popoverSide=self.popover_side,
            popoverAlign=self.popover_align,
            disableInteraction=self.disable_interaction,
            dialogSize=self.dialog_size.value,
        )
        if self.custom_dialog_width is not None:
            out["customDialogWidth"] = self.custom_dialog_width
        if self.custom_dialog_height is not None:
            out["customDialogHeight"] = self.custom_dialog_height
        return out


_TOUR_KEYS = (
    "tourId",
    "tourName",
    "tourVersion",
    "autoStart",
    "showOnce",
    "showProgress",
    "allowKeyboard",
    "overlayColor",
    "overlayOpacity",
    "stagePadding",
    "stageRadius",
    "nextBtnText",
    "prevBtnText",
    "doneBtnText",
    "steps",
)


@dataclass(frozen=True)
class Tour:
    tour_id: Optional[str] = None
    tour_name: str = ""
    tour_version: int = 1
    auto_start: bool = False
    show_once: bool = True
    show_progress: bool = True
    allow_keyboard: bool = True
    overlay_color: str = "rgba(0, 0, 0, 0.6)"
    overlay_opacity: Optional[float] = 60
    stage_padding: int = 8
    stage_radius: int = 5
    next_btn_text: str = "Next"
    prev_btn_text: str = "Previous"
    done_btn_text: str = "Done"
    steps: Tuple[Step, ...] = ()
    extras: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Tour":
        steps = raw.get("steps")
        opacity = raw.get("overlayOpacity", 60)
        return cls(
            tour_id=str(raw["tourId"]) if raw.get("tourId") else None,
            tour_name=str(raw.get("tourName") or ""),
            tour_version=_opt_int(raw.get("tourVersion")) or 1,
            auto_start=bool(raw.get("autoStart", False)),
            show_once=raw.get("showOnce", True) is not False,
            show_progress=raw.get("showProgress", True) is not False,
            allow_keyboard=raw.get("allowKeyboard", True) is not False,
            overlay_color=str(raw.get("overlayColor") or "rgba(0, 0, 0, 0.6)"),
            overlay_opacity=_opt_float(opacity),
            stage_padding=_opt_int(raw.get("stagePadding")) or 8,
            stage_radius=_opt_int(raw.get("stageRadius")) or 5,
            next_btn_text=str(raw.get("nextBtnText") or "Next"),
            prev_btn_text=str(raw.get("prevBtnText") or "Previous"),
            done_btn_text=str(raw.get("doneBtnText") or "Done"),
            steps=tuple(Step.from_dict(s) for s in steps or () if isinstance(s, Mapping)),
            extras=_split(raw, _TOUR_KEYS),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extras)
        if self.tour_id:
            out["tourId"] = self.tour_id
        opacity = self.overlay_opacity
        if opacity is not None and float(opacity).is_integer():
            opacity = int(opacity)
        out.update(
            tourName=self.tour_name,
            tourVersion=self.tour_version,
            autoStart=self.auto_start,
            showOnce=self.show_once,
            showProgress=self.show_progress,
            allowKeyboard=self.allow_keyboard,
            overlayColor=self.overlay_color,
            overlayOpacity=opacity,
            stagePadding=self.stage_padding,
            stageRadius=self.stage_radius,
            nextBtnText=self.next_btn_text,
            prevBtnText=self.prev_btn_text,
            doneBtnText=self.done_btn_text,
            steps=[s.to_dict() for s in self.steps],
        )
        return out

    def with_id(self, tour_id: str) -> "Tour":
        return replace(self, tour_id=tour_id)
