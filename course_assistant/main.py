"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, uvicorn, course_assistant.api, course_assistant.observability, course_assistant.configs
System role: Application initialization and configuration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from course_assistant import __version__
from course_assistant.api import api_router
from course_assistant.api.deps import ServiceCache, build_service_cache
from course_assistant.api.routers import chat_router, chat_validation_error_handler
from course_assistant.configs import get_settings
from course_assistant.core.generation.prompt import register_instructions_prompt
from course_assistant.observability.logger import configure_logging
from course_assistant.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging, loads the catalog and builds the shared services.
    A service cache already set on ``app.state`` (tests) is kept.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    if getattr(app.state, "services", None) is None:
        app.state.services = build_service_cache(settings)

    services: ServiceCache = app.state.services
    logger.info(
        "Application startup complete",
        extra={"courses": len(services.catalog), "environment": settings.environment},
    )

    if settings.llm.use_prompt_registry:
        register_instructions_prompt(
            model_id=settings.llm.model,
            temperature=settings.llm.temperature,
            labels=[settings.llm.prompt_label] if settings.llm.prompt_label else None,
        )

    yield

    # Shutdown
    logger.info("Application shutdown")


def create_app(services: ServiceCache | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        services: Pre-built service cache (tests); built at startup when None

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="Course Assistant API",
        description="Chat assistant for job-training course information",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, chat_validation_error_handler)
    app.include_router(chat_router)
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "course_assistant.main:app",
        host="localhost",
        port=8082,
        reload=get_settings().debug,
    )
