"""
Health check API endpoints.

Routes: GET /health, GET /health/catalog

Dependencies: course_assistant.core.catalog
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from course_assistant.api.deps import get_catalog
from course_assistant.core.catalog import CourseCatalog
from course_assistant.models.course import LifecycleState


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


class CatalogHealthResponse(HealthResponse):
    """Catalog health with per-state course counts."""

    courses: int
    by_state: dict[str, int]


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/catalog", response_model=CatalogHealthResponse)
async def health_check_catalog(catalog: CourseCatalog = Depends(get_catalog)) -> CatalogHealthResponse:
    """Catalog health check. An empty catalog reports degraded."""
    by_state = {state.value: 0 for state in LifecycleState}
    for course in catalog:
        by_state[course.state.value] += 1

    if len(catalog) == 0:
        return CatalogHealthResponse(
            status="degraded",
            message="Catalog is empty",
            courses=0,
            by_state=by_state,
        )
    return CatalogHealthResponse(
        status="healthy",
        message="Catalog loaded",
        courses=len(catalog),
        by_state=by_state,
    )
