"""Settings model for ember build coordination.

Contract:
- Inputs: Environment variables (EMBER_CLI_*), YAML values passed as kwargs
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pathlib import Path

from pydantic import field_validator
from pydantic import model_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

from .models import AppOptions


class EmberCliSettings(BaseSettings):
    """Configuration for the host process managing ember apps.

    Attributes:
        environment: Host environment name (default: development)
        root_path: Host application root (default: cwd)
        tool_root: Working directory for build output and asset symlinks
            (default: <root_path>/tmp/ember-cli)
        poll_interval: Seconds between lockfile checks while waiting
        wait_timeout: Default wait timeout in seconds (None waits forever)
        log_level: Logging level for the daemon
        host: Listen address for emberd
        port: Listen port for emberd
        apps: Configured apps keyed by name

    Example:
        >>> settings = EmberCliSettings()
        >>> assert settings.environment == "development"
        >>> assert settings.poll_interval == 0.1
    """

    model_config = SettingsConfigDict(
        env_prefix="EMBER_CLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"
    root_path: str = "."
    tool_root: str | None = None

    poll_interval: float = 0.1
    wait_timeout: float | None = None

    log_level: str = "info"
    host: str = "127.0.0.1"
    port: int = 8430

    # Executable overrides; resolved from PATH when unset
    npm_path: str | None = None
    bower_path: str | None = None
    bundler_path: str | None = None

    apps: dict[str, AppOptions] = {}

    @field_validator("root_path")
    @classmethod
    def expand_and_resolve_path(cls, v: str) -> str:
        """Expand ~ and resolve to absolute path."""
        return str(Path(v).expanduser().resolve())

    @model_validator(mode="after")
    def default_tool_root(self) -> "EmberCliSettings":
        """Place tool_root under root_path unless configured."""
        if self.tool_root is None:
            self.tool_root = str(Path(self.root_path) / "tmp" / "ember-cli")
        else:
            tool_root = Path(self.tool_root).expanduser()
            if not tool_root.is_absolute():
                tool_root = Path(self.root_path) / tool_root
            self.tool_root = str(tool_root.resolve())
        return self
