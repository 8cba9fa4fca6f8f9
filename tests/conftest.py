"""
Shared pytest fixtures for the test suite.

Provides fixtures for:
- Isolated host directories and EMBER_CLI_* environment
- Host contexts for development and production
- A fake process runner standing in for ember-cli
- Apps with a package.json ready to build
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from ember_library.app import EmberApp
from ember_library.config.models import HostContext

INDEX_HTML = "<!DOCTYPE html>\n<html><head><title>my-app</title></head><body><div id=app></div></body></html>\n"


class FakeShell:
    """Process runner double that simulates ember-cli builds on disk.

    A build writes ``dist/index.html``. Setting ``error`` makes the next
    builds write it to the build error file instead.
    """

    def __init__(self, paths: Any = None, env: dict[str, str] | None = None, options: Any = None) -> None:
        self.paths = paths
        self.env = env or {}
        self.options = options
        self.calls: list[str] = []
        self.error: str | None = None
        self.index_html = INDEX_HTML
        self.on_compile: Callable[[], None] | None = None
        self._running = False

    def _build(self) -> None:
        if self.paths is None:
            return
        if self.error is not None:
            self.paths.build_error_file.write_text(self.error)
            return
        (self.paths.dist / "index.html").write_text(self.index_html)

    def install(self) -> None:
        self.calls.append("install")

    def compile(self) -> None:
        self.calls.append("compile")
        if self.on_compile is not None:
            self.on_compile()
        else:
            self._build()

    def run(self) -> None:
        self.calls.append("run")
        if not self._running:
            self._running = True
            self._build()

    def running(self) -> bool:
        return self._running

    def stop(self) -> bool:
        was_running = self._running
        self._running = False
        return was_running

    def test(self) -> str:
        self.calls.append("test")
        return "tests passed"


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    """Temporary host application root."""
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def mock_storage_env(host_root: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point EMBER_CLI_ROOT at the temporary host root.

    Clears EMBER_CLI_* overrides so tests see defaults.
    """
    for var in ("EMBER_CLI_CONFIG_DIR", "EMBER_CLI_LOG_DIR", "EMBER_CLI_ENVIRONMENT", "EMBER_CLI_TOOL_ROOT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("EMBER_CLI_ROOT", str(host_root))
    return host_root


@pytest.fixture
def context(host_root: Path) -> HostContext:
    """Development host context with a fast poll interval."""
    return HostContext(
        environment="development",
        root_path=host_root,
        tool_root=host_root / "tmp" / "ember-cli",
        poll_interval=0.01,
    )


@pytest.fixture
def production_context(host_root: Path) -> HostContext:
    return HostContext(
        environment="production",
        root_path=host_root,
        tool_root=host_root / "tmp" / "ember-cli",
        poll_interval=0.01,
    )


@pytest.fixture
def fake_shell(monkeypatch: pytest.MonkeyPatch) -> type[FakeShell]:
    """Replace the real process runner for apps created during the test."""
    monkeypatch.setattr("ember_library.app.Shell", FakeShell)
    return FakeShell


@pytest.fixture
def make_app(context: HostContext, fake_shell: type[FakeShell]) -> Callable[..., EmberApp]:
    """Factory for apps whose project directory holds a package.json.

    Example:
        >>> def test_build(make_app):
        ...     app = make_app("frontend")
        ...     assert app.compile()
    """

    def _make(name: str = "frontend", host: HostContext | None = None, **options: Any) -> EmberApp:
        app = EmberApp(name, host or context, **options)
        app.paths.root.mkdir(parents=True, exist_ok=True)
        app.paths.package_json_file.write_text(json.dumps({"name": "my-app", "version": "0.0.0"}))
        return app

    return _make
