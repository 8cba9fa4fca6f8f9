"""Configuration models for ember apps and the host context."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

from ..assets import AssetPipeline

if TYPE_CHECKING:
    from .settings import EmberCliSettings

PRODUCTION = "production"


class AppOptions(BaseModel):
    """Per-app options."""

    name: str | None = Field(
        default=None,
        description="Override for the app name read from package.json",
    )
    path: str | None = Field(
        default=None,
        description="Ember project directory, relative to root_path (default: <root_path>/<app>)",
    )
    exclude_ember_deps: list[str] = Field(
        default_factory=list,
        description="Dependencies left out of the vendor bundle",
    )
    watcher: str | None = Field(
        default=None,
        description="Watcher passed to `ember build --watch` (e.g. 'polling')",
    )

    @field_validator("exclude_ember_deps", mode="before")
    @classmethod
    def wrap_single_dependency(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


@dataclass
class HostContext:
    """Everything an app needs from its host, passed explicitly.

    Attributes:
        environment: Host environment name
        root_path: Host application root
        tool_root: Directory holding build output and asset symlinks
        pipeline: Host asset pipeline that receives registrations
        poll_interval: Seconds between lockfile checks
        wait_timeout: Default wait timeout (None waits forever)
        executables: Optional overrides for npm/bower/bundler
    """

    environment: str
    root_path: Path
    tool_root: Path
    pipeline: AssetPipeline = field(default_factory=AssetPipeline)
    poll_interval: float = 0.1
    wait_timeout: float | None = None
    executables: dict[str, str] = field(default_factory=dict)

    @property
    def production(self) -> bool:
        return self.environment == PRODUCTION

    @classmethod
    def from_settings(cls, settings: EmberCliSettings, pipeline: AssetPipeline | None = None) -> HostContext:
        executables = {
            key: value
            for key, value in (
                ("npm", settings.npm_path),
                ("bower", settings.bower_path),
                ("bundler", settings.bundler_path),
            )
            if value
        }
        return cls(
            environment=settings.environment,
            root_path=Path(settings.root_path),
            tool_root=Path(settings.tool_root or Path(settings.root_path) / "tmp" / "ember-cli"),
            pipeline=pipeline or AssetPipeline(),
            poll_interval=settings.poll_interval,
            wait_timeout=settings.wait_timeout,
            executables=executables,
        )
