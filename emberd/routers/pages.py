"""Serve built ember apps at /<app name>.

Requests block until the app's build is ready. In production the app is
built once; elsewhere the watching dev server is started and the request
waits for its lockfile to clear.
"""

import html
import logging
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi.responses import HTMLResponse

from ember_library.app import EmberApp
from ember_library.errors import BuildError
from ember_library.errors import BuildTimeoutError
from ember_library.errors import EmberCliError

from ..dependencies import get_ember_app

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


def render_build_error(exc: BuildError) -> HTMLResponse:
    trace = "\n".join(html.escape(line) for line in exc.trace)
    content = (
        "<!DOCTYPE html>\n"
        "<html><head><title>Build error</title></head>\n"
        f"<body><h1>{html.escape(exc.message)}</h1>\n<pre>{trace}</pre></body></html>\n"
    )
    return HTMLResponse(content=content, status_code=500)


def serve_app(app: EmberApp, head: str = "", body: str = "") -> HTMLResponse:
    """Build (or wait for) the app, then render its index.html."""
    try:
        if app.context.production:
            app.compile()
        else:
            app.run()
            app.wait()
        return HTMLResponse(content=app.index_html(head=head, body=body))
    except BuildError as exc:
        return render_build_error(exc)
    except BuildTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except (EmberCliError, FileNotFoundError) as exc:
        logger.error(f"Failed to serve {app.name!r}: {exc}")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/{name}", response_class=HTMLResponse)
def app_root(
    app: Annotated[EmberApp, Depends(get_ember_app)],
) -> HTMLResponse:
    return serve_app(app)


@router.get("/{name}/{path:path}", response_class=HTMLResponse)
def app_route(
    app: Annotated[EmberApp, Depends(get_ember_app)],
    path: str,
) -> HTMLResponse:
    # Client-side routes all render the same index.html
    return serve_app(app)
