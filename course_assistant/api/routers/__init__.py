"""API routers."""

from .chat import chat_validation_error_handler
from .chat import router as chat_router
from .courses import router as courses_router
from .health import router as health_router

__all__ = [
    "chat_router",
    "chat_validation_error_handler",
    "courses_router",
    "health_router",
]
