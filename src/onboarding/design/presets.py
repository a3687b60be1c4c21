"""Theme presets for the tour widget, menu and popover.

Each preset is a complete mapping over the declared theme keys (see
``theme_resolver.CSS_VAR_MAP``) and serves as the cascade base for user
overrides. Numeric sizing values are plain numbers; the resolver appends the
``px`` unit. Pure data, no rendering dependencies.
"""

from __future__ import annotations

from typing import Dict, Mapping, Union

PresetValue = Union[str, int]
PresetMap = Dict[str, PresetValue]

DEFAULT_PRESET = "default"
_FONT_STACK_QLIK = "'QlikView Sans', 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif"
_FONT_STACK_OPEN = "'Open Sans', Arial, sans-serif"

_PRESETS: dict[str, PresetMap] = {
    # Neutral, minimal palette; a blank canvas for overrides
    "default": {
        "buttonBgColor": "#595959",
        "buttonTextColor": "#ffffff",
        "buttonHoverBgColor": "#404040",
        "buttonBorderColor": "#595959",
        "buttonFontSize": 13,
        "buttonBorderRadius": 4,
        "buttonFontWeight": 500,
        "menuBgColor": "#ffffff",
        "menuTextColor": "#333333",
        "menuHoverBgColor": "#f0f0f0",
        "popoverBgColor": "#ffffff",
        "popoverTextColor": "#555555",
        "popoverTitleColor": "#333333",
        "popoverButtonBgColor": "#595959",
        "popoverButtonTextColor": "#ffffff",
        "popoverButtonHoverBgColor": "#404040",
        "popoverPrevBgColor": "#e8e8e8",
        "popoverPrevTextColor": "#333333",
        "popoverPrevHoverBgColor": "#d0d0d0",
        "popoverFontSize": 13,
        "popoverBorderRadius": 4,
        "progressBarColor": "#595959",
        "fontFamily": _FONT_STACK_QLIK,
    },
    "leanGreen": {
        "buttonBgColor": "#009845",
        "buttonTextColor": "#ffffff",
        "buttonHoverBgColor": "#007a38",
        "buttonBorderColor": "#009845",
        "buttonFontSize": 13,
        "buttonBorderRadius": 4,
        "buttonFontWeight": 500,
        "menuBgColor": "#ffffff",
        "menuTextColor": "#333333",
        "menuHoverBgColor": "#e8f5ee",
        "popoverBgColor": "#ffffff",
        "popoverTextColor": "#555555",
        "popoverTitleColor": "#006b30",
        "popoverButtonBgColor": "#009845",
        "popoverButtonTextColor": "#ffffff",
        "popoverButtonHoverBgColor": "#007a38",
        "popoverPrevBgColor": "#e8f5ee",
        "popoverPrevTextColor": "#006b30",
        "popoverPrevHoverBgColor": "#c8ebd5",
        "popoverFontSize": 13,
        "popoverBorderRadius": 4,
        "progressBarColor": "#00b856",
        "fontFamily": _FONT_STACK_QLIK,
    },
    # Authoritative blue with gold accents
    "corporateBlue": {
        "buttonBgColor": "#165A9B",
        "buttonTextColor": "#ffffff",
        "buttonHoverBgColor": "#0C3256",
        "buttonBorderColor": "#165A9B",
        "buttonFontSize": 14,
        "buttonBorderRadius": 3,
        "buttonFontWeight": 600,
        "menuBgColor": "#ffffff",
        "menuTextColor": "#222222",
        "menuHoverBgColor": "#e6eef6",
        "popoverBgColor": "#ffffff",
        "popoverTextColor": "#404041",
        "popoverTitleColor": "#0C3256",
        "popoverButtonBgColor": "#165A9B",
        "popoverButtonTextColor": "#ffffff",
        "popoverButtonHoverBgColor": "#0C3256",
        "popoverPrevBgColor": "#EFEFEF",
        "popoverPrevTextColor": "#222222",
        "popoverPrevHoverBgColor": "#D0D2D3",
        "popoverFontSize": 14,
        "popoverBorderRadius": 3,
        "progressBarColor": "#FFCC33",
        "fontFamily": _FONT_STACK_OPEN,
    },
    # Warm gold with blue accents
    "corporateGold": {
        "buttonBgColor": "#FFCC33",
        "buttonTextColor": "#222222",
        "buttonHoverBgColor": "#FFE494",
        "buttonBorderColor": "#222222",
        "buttonFontSize": 14,
        "buttonBorderRadius": 3,
        "buttonFontWeight": 600,
        "menuBgColor": "#ffffff",
        "menuTextColor": "#222222",
        "menuHoverBgColor": "#FFFAE6",
        "popoverBgColor": "#ffffff",
        "popoverTextColor": "#404041",
        "popoverTitleColor": "#0C3256",
        "popoverButtonBgColor": "#165A9B",
        "popoverButtonTextColor": "#ffffff",
        "popoverButtonHoverBgColor": "#0C3256",
        "popoverPrevBgColor": "#EFEFEF",
        "popoverPrevTextColor": "#222222",
        "popoverPrevHoverBgColor": "#D0D2D3",
        "popoverFontSize": 14,
        "popoverBorderRadius": 3,
        "progressBarColor": "#165A9B",
        "fontFamily": _FONT_STACK_OPEN,
    },
}

PRESET_LABELS: dict[str, str] = {
    "default": "Default",
    "leanGreen": "The Lean Green Machine",
    "corporateBlue": "Corporate Blue",
    "corporateGold": "Corporate Gold",
}


def get_preset(name: str) -> Mapping[str, PresetValue] | None:
    return _PRESETS.get(name)


def default_preset() -> Mapping[str, PresetValue]:
    return _PRESETS[DEFAULT_PRESET]


def available_presets() -> list[str]:
    return list(_PRESETS.keys())


__all__ = [
    "get_preset",
    "default_preset",
    "available_presets",
    "PRESET_LABELS",
    "DEFAULT_PRESET",
    "PresetValue",
]
