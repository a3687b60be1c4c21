"""Theme presets and the preset/override cascade."""

from .presets import PRESET_LABELS, available_presets, get_preset  # noqa: F401
from .theme_resolver import (  # noqa: F401
    ThemeConfig,
    resolve_theme,
    build_theme_css,
    inject_theme_style,
)
