"""Domain layer: errors, constants and schemas."""

from .errors import (
    AppError,
    ErrorCodes,
    FlowError,
    RenderError,
    RepositoryError,
    TemplateNotFoundError,
)
from .schemas import (
    Dashboard,
    User,
    UserStats,
)

__all__ = [
    "AppError",
    "ErrorCodes",
    "FlowError",
    "RenderError",
    "RepositoryError",
    "TemplateNotFoundError",
    "Dashboard",
    "User",
    "UserStats",
]
