"""Storage module for ember_library.

Resolves host directories and per-app build locations.

Public Interface:
    - PathSet: Per-app path resolution
    - get_root_dir: Get EMBER_CLI_ROOT
    - get_config_dir: Get config directory
    - get_log_dir: Get log directory
"""

from .paths import PathSet
from .paths import get_config_dir
from .paths import get_log_dir
from .paths import get_root_dir

__all__ = [
    "PathSet",
    "get_root_dir",
    "get_config_dir",
    "get_log_dir",
]
