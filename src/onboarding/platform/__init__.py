"""Host platform detection, adapters and the selector registry."""

from .selectors import SelectorSet, get_selectors, DEFAULT_CODE_PATH  # noqa: F401
from .dom import HostDocument  # noqa: F401
from .adapters import (  # noqa: F401
    HostContext,
    PlatformAdapter,
    ClientManagedAdapter,
    CloudAdapter,
    SheetObject,
    adapter_for,
)
from .detection import (  # noqa: F401
    PlatformInfo,
    PlatformResolver,
    ResolutionState,
    detect_from_location,
    code_path_for_version,
)
