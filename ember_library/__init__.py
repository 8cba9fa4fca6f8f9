"""Ember build coordination library.

This is the business logic layer that sits between emberd (host surface)
and the external ember-cli build tool.

Public Interface:
    Modules:
    - app: Build lifecycle for one app
    - registry: Named collection of apps
    - shell: Subprocess management for ember-cli
    - storage: Path resolution
    - config: Configuration loading
    - assets: Host asset pipeline registration
"""

from .app import EmberApp
from .assets import AssetPipeline
from .config import HostContext
from .errors import BuildError
from .errors import BuildTimeoutError
from .registry import EmberCli

__all__ = [
    "AssetPipeline",
    "BuildError",
    "BuildTimeoutError",
    "EmberApp",
    "EmberCli",
    "HostContext",
]
