"""Response models for ember app endpoints."""

from pydantic import Field

from .base import CamelCaseModel


class AppStatus(CamelCaseModel):
    """State of one managed app.

    Attributes:
        name: App identifier
        running: Whether the watching dev server is alive
        prepared: Whether this worker has prepared the app
        compiled: Whether this worker has completed a one-shot build
        build_error: Whether the build error file currently reports a failure
        js_assets: Logical paths of the vendor and application bundles
    """

    name: str = Field(..., description="App identifier")
    running: bool = Field(..., description="Dev server alive")
    prepared: bool = Field(..., description="Prepared in this worker")
    compiled: bool = Field(..., description="Built in this worker")
    build_error: bool = Field(..., description="Build error file is non-empty")
    js_assets: list[str] = Field(default_factory=list, description="Vendor and application bundle paths")


class AppList(CamelCaseModel):
    apps: list[AppStatus] = Field(default_factory=list)


class BuildResult(CamelCaseModel):
    name: str
    status: str = Field(..., description="'compiled' or 'ready'")


class BuildErrorResponse(CamelCaseModel):
    """Body returned when a build fails.

    Attributes:
        error: Error message
        trace: Lines of the build error file
    """

    error: str = Field(..., description="Error message")
    trace: list[str] = Field(default_factory=list, description="Build output lines")
