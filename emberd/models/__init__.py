"""API models for emberd."""

from .apps import AppList
from .apps import AppStatus
from .apps import BuildErrorResponse
from .apps import BuildResult
from .base import CamelCaseModel

__all__ = [
    "AppList",
    "AppStatus",
    "BuildErrorResponse",
    "BuildResult",
    "CamelCaseModel",
]
