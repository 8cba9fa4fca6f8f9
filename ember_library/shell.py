"""Subprocess management for the external ember-cli build tool.

Contract:
- Inputs: PathSet, environment variables for the child process, app options
- Outputs: CompletedProcess results, dev server liveness
- Side Effects: Spawns npm/bower/bundle/ember processes, appends to the app log
"""

import builtins
import logging
import subprocess
import threading
from pathlib import Path

import psutil

from .config.models import PRODUCTION
from .config.models import AppOptions
from .errors import CommandError
from .storage.paths import PathSet

logger = logging.getLogger(__name__)


class EmberCommand:
    """Builds ember-cli argument lists for one app."""

    def __init__(self: "EmberCommand", paths: PathSet, options: AppOptions) -> None:
        self.paths = paths
        self.options = options

    def build(self: "EmberCommand", watch: bool = False) -> list[str]:
        command = [str(self.paths.ember), "build"]
        if watch:
            command.append("--watch")
            if self.options.watcher:
                command.extend(["--watcher", self.options.watcher])
        command.extend(
            [
                "--environment",
                self.build_environment,
                "--output-path",
                str(self.paths.dist),
            ]
        )
        return command

    def test(self: "EmberCommand") -> list[str]:
        return [str(self.paths.ember), "test"]

    @property
    def build_environment(self: "EmberCommand") -> str:
        # ember-cli only distinguishes production builds from everything else
        return PRODUCTION if self.paths.environment == PRODUCTION else "development"


class Shell:
    """Runs the external build tool on behalf of one EmberApp.

    One-shot builds block until ember exits. The watching dev server is
    started once and tracked by pid until stopped.

    Example:
        >>> shell = Shell(paths=paths, env=dict(os.environ), options=AppOptions())
        >>> shell.run()
        >>> shell.running()
        True
    """

    def __init__(
        self: "Shell",
        paths: PathSet,
        env: dict[str, str],
        options: AppOptions,
    ) -> None:
        self.paths = paths
        self.env = env
        self.options = options
        self.ember = EmberCommand(paths, options)
        self._process: subprocess.Popen | None = None
        self._pid: int | None = None
        # Held across the running check and the spawn
        self._lock = threading.Lock()

    def install(self: "Shell") -> None:
        """Install bundler, npm and bower dependencies for the app.

        Raises:
            CommandError: If any install step fails
            DependencyError: If a required package manager is missing
        """
        if self.paths.gemfile.exists():
            self._exec([self.paths.bundler, "install"])

        self._exec([self.paths.npm, "prune"])
        self._exec([self.paths.npm, "install"])

        if self.paths.bower_json.exists():
            self._exec([self.paths.bower, "prune"])
            self._exec([self.paths.bower, "install"])

    def compile(self: "Shell") -> subprocess.CompletedProcess:
        """Run a one-shot build and wait for it to exit.

        A non-zero exit is logged but not raised; build failures are
        reported through the build error file.
        """
        result = self._exec(self.ember.build(), check=False)
        if result.returncode != 0:
            logger.warning(f"ember build for {self.paths.app_name!r} exited with code {result.returncode}")
        return result

    def run(self: "Shell") -> None:
        """Start `ember build --watch` in the background unless already running."""
        with self._lock:
            if self.running():
                logger.debug(f"Dev server for {self.paths.app_name!r} already running (PID {self._pid})")
                return

            command = self.ember.build(watch=True)
            logger.info(f"Starting dev server for {self.paths.app_name!r}: {' '.join(command)}")

            with builtins.open(str(self.paths.log), "a") as log_file:
                process = subprocess.Popen(
                    command,
                    cwd=str(self.paths.root),
                    env=self.env,
                    stdout=log_file,
                    stderr=log_file,
                    start_new_session=True,
                )
            self._process = process
            self._pid = process.pid
        logger.info(f"Dev server for {self.paths.app_name!r} started (PID {process.pid}, logs: {self.paths.log})")

    def running(self: "Shell") -> bool:
        if self._pid is None:
            return False

        # poll() reaps our own child once it exits
        if self._process is not None and self._process.poll() is not None:
            return False

        try:
            proc = psutil.Process(self._pid)
            return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return False

    def stop(self: "Shell", timeout: int = 5) -> bool:
        """Stop the dev server gracefully, force killing after timeout.

        Returns:
            True if a running dev server was stopped
        """
        with self._lock:
            pid = self._pid
            if pid is None or not self.running():
                self._process = None
                self._pid = None
                return False

            try:
                proc = psutil.Process(pid)
                proc.terminate()
                try:
                    proc.wait(timeout=timeout)
                except psutil.TimeoutExpired:
                    logger.warning(f"Dev server for {self.paths.app_name!r} did not stop gracefully, force killing")
                    proc.kill()
                    proc.wait(timeout=2)
            except psutil.NoSuchProcess:
                pass

            self._process = None
            self._pid = None
        logger.info(f"Dev server for {self.paths.app_name!r} stopped (PID {pid})")
        return True

    def test(self: "Shell") -> subprocess.CompletedProcess:
        """Run `ember test`.

        Raises:
            CommandError: If the test run fails
        """
        return self._exec(self.ember.test())

    def _exec(self: "Shell", command: list[str], check: bool = True) -> subprocess.CompletedProcess:
        logger.info(f"Running {' '.join(command)} in {self.paths.root}")

        log_path: Path = self.paths.log
        with builtins.open(str(log_path), "a") as log_file:
            result = subprocess.run(
                command,
                cwd=str(self.paths.root),
                env=self.env,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                check=False,
            )

        if check and result.returncode != 0:
            raise CommandError(command, result.returncode)
        return result
