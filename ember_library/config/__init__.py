"""Configuration module for ember_library.

Provides settings loading from YAML and environment variables.

Public Interface:
    - EmberCliSettings: Settings model
    - AppOptions: Per-app options
    - HostContext: Explicit host configuration passed to apps
    - load_config: Load configuration
    - create_default_config: Create default config file
    - get_config_path: Get config file path
"""

from .loader import create_default_config
from .loader import get_config_path
from .loader import load_config
from .models import AppOptions
from .models import HostContext
from .settings import EmberCliSettings

__all__ = [
    "AppOptions",
    "EmberCliSettings",
    "HostContext",
    "load_config",
    "create_default_config",
    "get_config_path",
]
