"""Theme cascade: named preset + per-property overrides -> CSS variables.

Resolution per declared key:

 1. override present and non-empty -> override (picker colors normalized)
 2. otherwise -> ``preset[key]``
 3. pixel keys are coerced to a number and suffixed with ``px``; values
    that do not coerce are kept verbatim

Unknown preset names resolve against the ``default`` preset. Overrides may
come from the property panel (color keys at the layout root) or from an
import file (everything under ``theme``); both normalize to the same
:class:`ThemeConfig` and therefore to the same output map.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

from onboarding.platform.dom import HostDocument
from .color_utils import extract_picker_color, is_picker_value
from .presets import DEFAULT_PRESET, default_preset, get_preset

_logger = logging.getLogger(__name__)

__all__ = [
    "ThemeConfig",
    "resolve_theme",
    "build_theme_css",
    "inject_theme_style",
    "CSS_VAR_MAP",
    "COLOR_PICKER_KEYS",
    "PX_PROPERTIES",
    "POPOVER_SCOPE",
    "THEME_STYLE_ID",
]

POPOVER_SCOPE = ".onboard-qs-popover"
THEME_STYLE_ID = "onboard-qs-theme"

CSS_VAR_MAP: Dict[str, str] = {
    "buttonBgColor": "--oqs-btn-bg",
    "buttonTextColor": "--oqs-btn-text",
    "buttonHoverBgColor": "--oqs-btn-hover-bg",
    "buttonBorderColor": "--oqs-btn-border",
    "buttonFontSize": "--oqs-btn-font-size",
    "buttonBorderRadius": "--oqs-btn-border-radius",
    "buttonFontWeight": "--oqs-btn-font-weight",
    "menuBgColor": "--oqs-menu-bg",
    "menuTextColor": "--oqs-menu-text",
    "menuHoverBgColor": "--oqs-menu-hover-bg",
    "popoverBgColor": "--oqs-popover-bg",
    "popoverTextColor": "--oqs-popover-text",
    "popoverTitleColor": "--oqs-popover-title",
    "popoverButtonBgColor": "--oqs-popover-btn-bg",
    "popoverButtonTextColor": "--oqs-popover-btn-text",
    "popoverButtonHoverBgColor": "--oqs-popover-btn-hover-bg",
    "popoverPrevBgColor": "--oqs-popover-prev-bg",
    "popoverPrevTextColor": "--oqs-popover-prev-text",
    "popoverPrevHoverBgColor": "--oqs-popover-prev-hover-bg",
    "popoverFontSize": "--oqs-popover-font-size",
    "popoverBorderRadius": "--oqs-popover-border-radius",
    "progressBarColor": "--oqs-progress-color",
    "fontFamily": "--oqs-font-family",
}

# Keys edited with the host color picker; stored at the layout root
COLOR_PICKER_KEYS = frozenset(
    {
        "buttonBgColor",
        "buttonTextColor",
        "buttonHoverBgColor",
        "buttonBorderColor",
        "popoverBgColor",
        "popoverTextColor",
        "popoverTitleColor",
        "popoverButtonBgColor",
        "popoverButtonTextColor",
        "popoverButtonHoverBgColor",
        "progressBarColor",
        "menuBgColor",
        "menuTextColor",
        "menuHoverBgColor",
    }
)

PX_PROPERTIES = frozenset(
    {"buttonFontSize", "buttonBorderRadius", "popoverFontSize", "popoverBorderRadius"}
)

OverrideValue = Union[str, int, float, Mapping[str, Any]]


def _is_empty(raw: Any) -> bool:
    if raw is None or raw == "":
        return True
    if is_picker_value(raw):
        return extract_picker_color(raw) is None
    return False


@dataclass(frozen=True)
class ThemeConfig:
    preset: str = DEFAULT_PRESET
    overrides: Mapping[str, OverrideValue] = field(default_factory=dict)

    @classmethod
    def _collect(cls, preset: Any, lookup) -> "ThemeConfig":
        overrides: Dict[str, OverrideValue] = {}
        for key in CSS_VAR_MAP:
            raw = lookup(key)
            if not _is_empty(raw):
                overrides[key] = raw
        return cls(preset=str(preset or DEFAULT_PRESET), overrides=overrides)

    @classmethod
    def from_dict(cls, theme: Mapping[str, Any] | None) -> "ThemeConfig":
        """Theme object as found in import/export files."""
        theme = theme or {}
        return cls._collect(theme.get("preset"), theme.get)

    @classmethod
    def from_layout(cls, layout: Mapping[str, Any]) -> "ThemeConfig":
        """Property-panel layout: picker colors live at the root, the rest under ``theme``."""
        theme = layout.get("theme") or {}

        def lookup(key: str) -> Any:
            if key in COLOR_PICKER_KEYS and not _is_empty(layout.get(key)):
                return layout.get(key)
            return theme.get(key)

        return cls._collect(theme.get("preset"), lookup)

    def to_dict(self) -> Dict[str, Any]:
        """Flat form suitable for export (preset + non-empty overrides)."""
        out: Dict[str, Any] = {"preset": self.preset}
        for key, raw in self.overrides.items():
            out[key] = extract_picker_color(raw) if is_picker_value(raw) else raw
        return out


def _to_pixels(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        try:
            num = float(str(value).strip())
        except ValueError:
            return value
    if math.isnan(num) or math.isinf(num):
        return value
    text = str(int(num)) if num.is_integer() else repr(num)
    return f"{text}px"


def resolve_theme(config: ThemeConfig | Mapping[str, Any] | None) -> Dict[str, str]:
    """Return CSS custom property name -> value for every declared key."""
    if not isinstance(config, ThemeConfig):
        config = ThemeConfig.from_dict(config)
    preset = get_preset(config.preset)
    if preset is None:
        _logger.debug("Unknown theme preset %r, using %s", config.preset, DEFAULT_PRESET)
        preset = default_preset()

    css_vars: Dict[str, str] = {}
    for key, css_var in CSS_VAR_MAP.items():
        raw = config.overrides.get(key)
        if _is_empty(raw):
            value: Any = preset[key]
        elif is_picker_value(raw):
            value = extract_picker_color(raw)  # type: ignore[arg-type]
        else:
            value = raw
        if key in PX_PROPERTIES:
            value = _to_pixels(value)
        css_vars[css_var] = str(value)
    return css_vars


def build_theme_css(css_vars: Mapping[str, str], selector: str = POPOVER_SCOPE) -> str:
    """Scope the variables to ``selector`` (popovers are attached to body)."""
    declarations = "\n".join(f"  {prop}: {value};" for prop, value in css_vars.items())
    return f"{selector} {{\n{declarations}\n}}"


def inject_theme_style(document: HostDocument, css_text: str, element_id: str = THEME_STYLE_ID) -> None:
    """Create or update the theme ``<style>`` element in the host document."""
    document.upsert_style(css_text, element_id, replace=True)
