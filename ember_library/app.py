"""Build lifecycle for one ember app.

EmberApp prepares the host for an app's assets, drives the external build
through the process runner, and turns the build tool's error file into a
BuildError.

Contract:
- Inputs: App name, options, host context
- Outputs: Rendered index.html, asset logical paths, BuildError on failure
- Side Effects: Deletes stale build error files, symlinks build output into
  the host asset directory, registers asset patterns, copies index.html in
  production

Concurrency:
    Several worker processes may manage the same app at once. The
    ``_prepared``/``_compiled`` flags only dedupe work inside one process,
    where a per-instance lock serializes request threads. The build error
    file and lockfile are the cross-process signals, and the asset symlink
    tolerates a concurrent creator.
"""

import json
import logging
import os
import re
import shutil
import threading
import time
from pathlib import Path
from typing import Any

from .config.models import AppOptions
from .config.models import HostContext
from .errors import BuildError
from .errors import BuildTimeoutError
from .html_page import HtmlPage
from .shell import Shell
from .storage.paths import PathSet

logger = logging.getLogger(__name__)

# Environment variable names read by the ember-cli-rails addon inside the build
HOST_ENV_VAR = "RAILS_ENV"
EXCLUDED_DEPS_VAR = "EXCLUDE_EMBER_ASSETS"
GEMFILE_VAR = "BUNDLE_GEMFILE"

# Default for wait(): fall back to the host's configured wait_timeout
CONFIGURED_TIMEOUT: Any = object()


class EmberApp:
    """One ember app managed by the host.

    Example:
        >>> context = HostContext(environment="development", root_path=root, tool_root=root / "tmp/ember-cli")
        >>> app = EmberApp("frontend", context, exclude_ember_deps=["jquery"])
        >>> app.compile()
        True
        >>> app.application_assets
        'frontend/assets/my-app'
    """

    def __init__(
        self: "EmberApp",
        name: str,
        context: HostContext,
        shell: Shell | None = None,
        **options: Any,
    ) -> None:
        """Initialize an app.

        Args:
            name: App identifier, used to namespace asset paths
            context: Host configuration
            shell: Process runner (default: a Shell bound to this app)
            **options: AppOptions fields (name, path, exclude_ember_deps, watcher)
        """
        self.name = str(name)
        self.context = context
        self.options = AppOptions.model_validate(options)
        self.paths = PathSet(self.name, self.options, context)
        self.shell = shell or Shell(paths=self.paths, env=self.env_hash(), options=self.options)

        self._prepared = False
        self._compiled = False
        # Held across prepare and compile; request threads share one instance
        self._lock = threading.RLock()
        self._ember_app_name: str | None = None
        self._package_json: dict[str, Any] | None = None

    def __repr__(self: "EmberApp") -> str:
        return f"EmberApp(name={self.name!r}, environment={self.context.environment!r})"

    @property
    def root(self: "EmberApp") -> Path:
        return self.paths.root

    @property
    def prepared(self: "EmberApp") -> bool:
        return self._prepared

    @property
    def compiled(self: "EmberApp") -> bool:
        return self._compiled

    # Lifecycle

    def prepare(self: "EmberApp") -> None:
        """Set up the host for this app's assets, once per instance.

        Steps run in order: clear a stale build error, link the build
        output into the host asset directory, register the asset pattern.
        """
        with self._lock:
            if self._prepared:
                return

            self._reset_build_error()
            self._symlink_to_assets_root()
            self._add_assets_to_precompile_list()

            self._prepared = True
        logger.info(f"Prepared {self.name!r}")

    def compile(self: "EmberApp") -> bool:
        """Run a one-shot build, once per instance.

        A failed build is not memoized; the next call builds again.

        Returns:
            True once the app has been built

        Raises:
            BuildError: If the build wrote to the build error file
        """
        if self._compiled:
            return True

        with self._lock:
            if self._compiled:
                return True

            self.prepare()
            logger.info(f"Compiling {self.name!r}")
            self.shell.compile()
            self.check_for_build_error()
            self._copy_index_html_file()

            self._compiled = True
        logger.info(f"Compiled {self.name!r}")
        return True

    def run(self: "EmberApp") -> None:
        """Make sure the watching dev server is running."""
        self.prepare()
        self.shell.run()
        self._copy_index_html_file()

    def running(self: "EmberApp") -> bool:
        return self.shell.running()

    def stop(self: "EmberApp") -> bool:
        return self.shell.stop()

    def run_tests(self: "EmberApp") -> Any:
        self.prepare()
        return self.shell.test()

    def install_dependencies(self: "EmberApp") -> None:
        self.shell.install()

    def wait(self: "EmberApp", timeout: float | None = CONFIGURED_TIMEOUT) -> None:
        """Block until the in-progress build finishes.

        Polls the lockfile every ``poll_interval`` seconds and checks the
        build error file before each poll.

        Args:
            timeout: Seconds to wait before giving up. Defaults to the host's
                wait_timeout; an explicit None waits indefinitely.

        Raises:
            BuildError: If the build fails while waiting
            BuildTimeoutError: If the timeout elapses first
        """
        if timeout is CONFIGURED_TIMEOUT:
            timeout = self.context.wait_timeout
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            self.check_for_build_error()
            if not self.paths.lockfile.exists():
                return
            if deadline is not None and time.monotonic() >= deadline:
                raise BuildTimeoutError(self.name, timeout)
            time.sleep(self.context.poll_interval)

    # Build errors

    def build_error(self: "EmberApp") -> bool:
        """Whether the build error file exists and is non-empty."""
        try:
            return self.paths.build_error_file.stat().st_size > 0
        except FileNotFoundError:
            return False

    def check_for_build_error(self: "EmberApp") -> None:
        if self.build_error():
            self._raise_build_error()

    def _raise_build_error(self: "EmberApp") -> None:
        content = self.paths.build_error_file.read_text(encoding="utf-8", errors="replace")
        trace = [line.rstrip() for line in content.splitlines() if line.strip()]
        summary = trace[0] if trace else ""

        message = f'"{self.name}" has failed to build: {summary}'
        logger.error(message)
        raise BuildError(message, app_name=self.name, trace=trace)

    def _reset_build_error(self: "EmberApp") -> None:
        error_file = self.paths.build_error_file
        try:
            error_file.unlink()
            logger.debug(f"Removed stale build error file {error_file}")
        except FileNotFoundError:
            pass

    # Asset exposure

    def _symlink_to_assets_root(self: "EmberApp") -> None:
        try:
            # Relative targets resolve from the link's own directory
            self.paths.app_assets.symlink_to(self.paths.dist.resolve(), target_is_directory=True)
        except FileExistsError:
            # Another worker created it first
            logger.debug(f"Asset symlink {self.paths.app_assets} already exists")

    def _add_assets_to_precompile_list(self: "EmberApp") -> None:
        self.context.pipeline.register(re.compile(rf"\A{re.escape(self.name)}/"))

    @property
    def vendor_assets(self: "EmberApp") -> str:
        return f"{self.name}/assets/vendor"

    @property
    def application_assets(self: "EmberApp") -> str:
        return f"{self.name}/assets/{self.ember_app_name}"

    @property
    def exposed_js_assets(self: "EmberApp") -> list[str]:
        return [self.vendor_assets, self.application_assets]

    exposed_css_assets = exposed_js_assets

    @property
    def ember_app_name(self: "EmberApp") -> str:
        if self._ember_app_name is None:
            self._ember_app_name = self.options.name or self.package_json["name"]
        return self._ember_app_name

    @property
    def package_json(self: "EmberApp") -> dict[str, Any]:
        if self._package_json is None:
            self._package_json = json.loads(self.paths.package_json_file.read_text(encoding="utf-8"))
        return self._package_json

    # index.html

    def index_html(self: "EmberApp", head: str = "", body: str = "") -> str:
        """Render the built index.html with extra head/body markup."""
        page = HtmlPage(
            content=self.index_file.read_text(encoding="utf-8"),
            head=head,
            body=body,
        )
        return page.render()

    @property
    def index_file(self: "EmberApp") -> Path:
        if self.context.production:
            return self.paths.applications / f"{self.name}.html"
        return self.paths.dist / "index.html"

    def _copy_index_html_file(self: "EmberApp") -> None:
        if self.context.production:
            shutil.copyfile(self.paths.dist / "index.html", self.index_file)
            logger.debug(f"Copied index.html for {self.name!r} to {self.index_file}")

    # Subprocess environment

    def env_hash(self: "EmberApp") -> dict[str, str]:
        """Environment for the build subprocess."""
        env = dict(os.environ)
        env[HOST_ENV_VAR] = self.context.environment
        env[EXCLUDED_DEPS_VAR] = ",".join(self.options.exclude_ember_deps)
        if self.paths.gemfile.exists():
            env[GEMFILE_VAR] = str(self.paths.gemfile)
        return env
