"""Thin HTTP wrapper around ember_library apps.

Architecture: This router contains ONLY HTTP handling.
All build logic is in ember_library.

Endpoints that block on a build are plain functions so FastAPI runs them
in its threadpool.
"""

import logging
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi.responses import JSONResponse

from ember_library.app import CONFIGURED_TIMEOUT
from ember_library.app import EmberApp
from ember_library.errors import BuildError
from ember_library.errors import BuildTimeoutError
from ember_library.errors import EmberCliError
from ember_library.registry import EmberCli

from ..dependencies import get_ember_app
from ..dependencies import get_registry
from ..models import AppList
from ..models import AppStatus
from ..models import BuildErrorResponse
from ..models import BuildResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["apps"])


def _status(app: EmberApp) -> AppStatus:
    try:
        js_assets = app.exposed_js_assets
    except (OSError, ValueError, KeyError) as exc:
        logger.warning(f"Could not resolve asset paths for {app.name!r}: {exc}")
        js_assets = []

    return AppStatus(
        name=app.name,
        running=app.running(),
        prepared=app.prepared,
        compiled=app.compiled,
        build_error=app.build_error(),
        js_assets=js_assets,
    )


def build_error_response(exc: BuildError) -> JSONResponse:
    body = BuildErrorResponse(error=exc.message, trace=exc.trace)
    return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/apps", response_model=AppList)
def list_apps(
    registry: Annotated[EmberCli, Depends(get_registry)],
) -> AppList:
    """List managed apps with their build state."""
    return AppList(apps=[_status(app) for app in registry])


@router.get("/apps/{name}", response_model=AppStatus)
def get_app(
    app: Annotated[EmberApp, Depends(get_ember_app)],
) -> AppStatus:
    return _status(app)


@router.post("/apps/{name}/compile", response_model=BuildResult, responses={500: {"model": BuildErrorResponse}})
def compile_app(
    app: Annotated[EmberApp, Depends(get_ember_app)],
):
    """Run a one-shot build for the app (no-op if already built by this worker)."""
    try:
        app.compile()
    except BuildError as exc:
        return build_error_response(exc)
    except EmberCliError as exc:
        logger.error(f"Failed to compile {app.name!r}: {exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return BuildResult(name=app.name, status="compiled")


@router.get("/apps/{name}/wait", response_model=BuildResult, responses={500: {"model": BuildErrorResponse}})
def wait_for_app(
    app: Annotated[EmberApp, Depends(get_ember_app)],
    timeout: float | None = Query(None, description="Seconds to wait before giving up"),
):
    """Block until the app's in-progress build finishes."""
    try:
        app.wait(timeout=CONFIGURED_TIMEOUT if timeout is None else timeout)
    except BuildError as exc:
        return build_error_response(exc)
    except BuildTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc

    return BuildResult(name=app.name, status="ready")
