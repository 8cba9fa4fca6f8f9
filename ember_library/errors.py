"""Exceptions raised by ember_library.

Contract:
- BuildError carries the failed app's name and the diagnostic trace read
  from the build error file
- Everything derives from EmberCliError so callers can catch one type
"""


class EmberCliError(Exception):
    """Base class for ember_library errors."""

    pass


class BuildError(EmberCliError):
    """Raised when the external build reports a failure.

    Attributes:
        app_name: Name of the app whose build failed
        trace: Non-blank lines of the build error file
    """

    def __init__(self, message: str, app_name: str = "", trace: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.app_name = app_name
        self.trace = list(trace or [])

    @property
    def summary(self) -> str:
        """First line of the build output, or an empty string."""
        return self.trace[0] if self.trace else ""


class BuildTimeoutError(EmberCliError, TimeoutError):
    """Raised when waiting on a build exceeds the caller's timeout."""

    def __init__(self, app_name: str, timeout: float) -> None:
        super().__init__(f"{app_name!r} did not finish building within {timeout}s")
        self.app_name = app_name
        self.timeout = timeout


class DependencyError(EmberCliError):
    """Raised when a required executable (ember, npm, bower, bundle) is missing."""

    pass


class CommandError(EmberCliError):
    """Raised when a subprocess exits with a non-zero status."""

    def __init__(self, command: list[str], returncode: int) -> None:
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(command)}")
        self.command = command
        self.returncode = returncode
