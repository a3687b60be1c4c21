"""Color value helpers for theme overrides.

Property panels hand colors over either as plain strings or as the color
picker's structured form ``{"color": "009845", "index": -1}``. Older
persisted values may lack the leading ``#``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

__all__ = ["normalize_hex", "extract_picker_color", "is_picker_value"]


def normalize_hex(value: str) -> str:
    """Prefix ``#`` when missing; leave everything else untouched."""
    v = value.strip()
    return v if v.startswith("#") else f"#{v}"


def is_picker_value(raw: Any) -> bool:
    return isinstance(raw, Mapping) and isinstance(raw.get("color"), str)


def extract_picker_color(raw: Mapping[str, Any]) -> Optional[str]:
    """Return the normalized color of a picker value, or None when empty."""
    color = raw.get("color") or ""
    if not color.strip():
        return None
    return normalize_hex(color)
