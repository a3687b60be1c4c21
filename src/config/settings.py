"""Global configuration and constants for the onboarding tour engine."""

from __future__ import annotations

import os
from typing import Final

# Persisted seen-state keys live under this prefix (``<ns>:<app>:<sheet>:<tour>:v<n>``)
STORAGE_NAMESPACE: Final = "onboard-qs"
DATA_DIR: Final = os.environ.get("ONBOARD_DATA_DIR", "data")
SEEN_STATE_FILENAME: Final = "seen_state.json"

DEFAULT_USER_AGENT: Final = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0 Safari/537.36"
)
DEFAULT_TIMEOUT: Final = 10  # seconds, per HTTP request
DEFAULT_RETRIES: Final = 1
DEFAULT_BACKOFF_FACTOR: Final = 0.3

# Platform detection
PRODUCT_INFO_PATH: Final = "/resources/autogenerated/product-info.json"
PLATFORM_DETECT_TIMEOUT: Final = float(os.environ.get("ONBOARD_DETECT_TIMEOUT", "5"))
BASELINE_PLATFORM: Final = "client-managed"

# Playback timing
PREVIEW_DISMISS_SECONDS: Final = 3.0
AUTO_START_DELAY_SECONDS: Final = 0.5

# Import / export
EXPORT_VERSION: Final = 1
DEFAULT_EXPORT_FILENAME: Final = "onboard-qs-tours.json"

SANITIZE_POPOVER_HTML: Final = os.environ.get("ONBOARD_SANITIZE_HTML", "0").lower() in {
    "1",
    "true",
    "yes",
}
LOG_LEVEL: Final = os.environ.get("ONBOARD_LOG_LEVEL", "INFO")
