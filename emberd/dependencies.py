"""Shared dependency factories for FastAPI endpoints."""

from fastapi import HTTPException
from fastapi import Request

from ember_library.app import EmberApp
from ember_library.registry import EmberCli


def get_registry(request: Request) -> EmberCli:
    """Get the app registry created at startup.

    Returns:
        EmberCli instance stored on the application state
    """
    return request.app.state.ember


def get_ember_app(name: str, request: Request) -> EmberApp:
    """Look up an app by path parameter.

    Raises:
        HTTPException: 404 if the app is not registered
    """
    registry = get_registry(request)
    if name not in registry:
        raise HTTPException(status_code=404, detail=f"Ember app not found: {name}")
    return registry[name]
