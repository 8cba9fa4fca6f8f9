"""Registry of the ember apps a host manages.

Contract:
- Inputs: Host context, per-app options
- Outputs: EmberApp instances looked up by name
- Side Effects: Bulk operations delegate to each app
"""

import logging
from collections.abc import Iterator
from typing import Any

from .app import CONFIGURED_TIMEOUT
from .app import EmberApp
from .config.models import HostContext
from .config.settings import EmberCliSettings

logger = logging.getLogger(__name__)


class EmberCli:
    """Named collection of EmberApp instances sharing one host context.

    Example:
        >>> ember = EmberCli.from_settings(load_config())
        >>> ember.app("frontend", exclude_ember_deps=["jquery"])
        >>> ember.compile()
    """

    def __init__(self: "EmberCli", context: HostContext) -> None:
        self.context = context
        self._apps: dict[str, EmberApp] = {}

    @classmethod
    def from_settings(cls, settings: EmberCliSettings) -> "EmberCli":
        """Build a registry holding every app configured in settings."""
        registry = cls(HostContext.from_settings(settings))
        for name, options in settings.apps.items():
            registry.app(name, **options.model_dump(exclude_none=True))
        return registry

    def app(self: "EmberCli", name: str, **options: Any) -> EmberApp:
        """Register an app, replacing any previous app with the same name."""
        app = EmberApp(name, self.context, **options)
        self._apps[app.name] = app
        logger.debug(f"Registered ember app {app.name!r}")
        return app

    def __getitem__(self: "EmberCli", name: str) -> EmberApp:
        try:
            return self._apps[name]
        except KeyError:
            raise KeyError(f"Unknown ember app: {name!r}. Registered: {', '.join(self._apps) or 'none'}") from None

    def __contains__(self: "EmberCli", name: object) -> bool:
        return name in self._apps

    def __iter__(self: "EmberCli") -> Iterator[EmberApp]:
        return iter(self._apps.values())

    def __len__(self: "EmberCli") -> int:
        return len(self._apps)

    @property
    def apps(self: "EmberCli") -> dict[str, EmberApp]:
        return dict(self._apps)

    def compile(self: "EmberCli") -> None:
        for app in self:
            app.compile()

    def install_dependencies(self: "EmberCli") -> None:
        for app in self:
            app.install_dependencies()

    def wait(self: "EmberCli", timeout: float | None = CONFIGURED_TIMEOUT) -> None:
        for app in self:
            app.wait(timeout=timeout)

    def any_running(self: "EmberCli") -> bool:
        return any(app.running() for app in self)

    def stop(self: "EmberCli") -> None:
        for app in self:
            app.stop()
