"""Path resolution for ember apps.

Module-level helpers resolve host-wide defaults from EMBER_CLI_* environment
variables. PathSet resolves every file and directory one app's build uses.

Contract:
- Inputs: App name, app options, host context
- Outputs: Resolved Path objects
- Side Effects: Creates directories if they don't exist
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import DependencyError

if TYPE_CHECKING:
    from ..config.models import AppOptions
    from ..config.models import HostContext


def get_root_dir() -> Path:
    """Get EMBER_CLI_ROOT from environment.

    Returns:
        Path to host root directory (default: current directory)
    """
    root = os.environ.get("EMBER_CLI_ROOT", ".")
    return Path(root).resolve()


def get_config_dir() -> Path:
    """Get configuration directory.

    Returns:
        Path to config directory ($EMBER_CLI_ROOT/config)

    Environment Variables:
        EMBER_CLI_CONFIG_DIR: Override config directory location
    """
    config_dir: Path = get_root_dir() / "config"

    env_override: str | None = os.environ.get("EMBER_CLI_CONFIG_DIR")
    if env_override is not None:
        config_dir = Path(env_override).resolve()

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_dir(root: Path | None = None) -> Path:
    """Get log directory.

    Args:
        root: Host root to place ``log/`` under (default: EMBER_CLI_ROOT)

    Returns:
        Path to log directory (<root>/log)

    Environment Variables:
        EMBER_CLI_LOG_DIR: Override log directory location
    """
    log_dir: Path = (root if root is not None else get_root_dir()) / "log"

    env_override: str | None = os.environ.get("EMBER_CLI_LOG_DIR")
    if env_override is not None:
        log_dir = Path(env_override).resolve()

    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


class PathSet:
    """Every location one app's build touches.

    Directory accessors create the directory on access. File accessors
    never touch the filesystem.

    Example:
        >>> paths = PathSet("frontend", AppOptions(), context)
        >>> paths.lockfile.name
        'build.lock'
    """

    def __init__(self: PathSet, app_name: str, options: AppOptions, context: HostContext) -> None:
        self.app_name = app_name
        self.options = options
        self.context = context

    # Host locations

    @property
    def root_path(self: PathSet) -> Path:
        return self.context.root_path

    @property
    def tool_root(self: PathSet) -> Path:
        return self.context.tool_root

    @property
    def environment(self: PathSet) -> str:
        return self.context.environment

    # Ember project

    @property
    def root(self: PathSet) -> Path:
        """Ember project directory (``path`` option or ``<root_path>/<app>``)."""
        if self.options.path:
            path = Path(self.options.path).expanduser()
            if not path.is_absolute():
                path = self.root_path / path
            return path
        return self.root_path / self.app_name

    @property
    def tmp(self: PathSet) -> Path:
        return _mkpath(self.root / "tmp")

    @property
    def log(self: PathSet) -> Path:
        log_dir = get_log_dir(self.root_path)
        return log_dir / f"ember-{self.app_name}.{self.environment}.log"

    @property
    def lockfile(self: PathSet) -> Path:
        return self.tmp / "build.lock"

    @property
    def build_error_file(self: PathSet) -> Path:
        return self.tmp / "error.txt"

    @property
    def package_json_file(self: PathSet) -> Path:
        return self.root / "package.json"

    @property
    def bower_json(self: PathSet) -> Path:
        return self.root / "bower.json"

    @property
    def gemfile(self: PathSet) -> Path:
        return self.root / "Gemfile"

    @property
    def node_modules(self: PathSet) -> Path:
        return self.root / "node_modules"

    # Build output and asset exposure

    @property
    def dist(self: PathSet) -> Path:
        return _mkpath(self.tool_root / "apps" / self.app_name)

    @property
    def assets(self: PathSet) -> Path:
        return _mkpath(self.tool_root / "assets")

    @property
    def app_assets(self: PathSet) -> Path:
        return self.assets / self.app_name

    @property
    def applications(self: PathSet) -> Path:
        return _mkpath(self.root_path / "public" / "_apps")

    # Executables

    @property
    def ember(self: PathSet) -> Path:
        """Project-local ember-cli binary.

        Raises:
            DependencyError: If ember-cli is not installed in node_modules
        """
        ember = self.node_modules / ".bin" / "ember"
        if not ember.exists():
            raise DependencyError(
                f"ember-cli executable not found at {ember}. "
                f"Make sure dependencies are installed for {self.app_name!r} (npm install)."
            )
        return ember

    @property
    def npm(self: PathSet) -> str:
        return self._executable("npm")

    @property
    def bower(self: PathSet) -> str:
        return self._executable("bower")

    @property
    def bundler(self: PathSet) -> str:
        return self._executable("bundler", command="bundle")

    def _executable(self: PathSet, key: str, command: str | None = None) -> str:
        configured = self.context.executables.get(key)
        if configured:
            return configured

        found = shutil.which(command or key)
        if found is None:
            raise DependencyError(f"{command or key} executable not found on PATH (required by {self.app_name!r})")
        return found


def _mkpath(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path
