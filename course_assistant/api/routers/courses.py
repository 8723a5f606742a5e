"""
Course catalog API endpoints.

Routes:
- GET /courses - List courses that may be promoted (open and upcoming)
- GET /courses/{course_id} - Course record behind a "más info" reference link

Dependencies: course_assistant.core.catalog, course_assistant.core.policy_engine
System role: Read-only course catalog HTTP API
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from course_assistant.api.deps import get_catalog, get_policy
from course_assistant.core.catalog import CourseCatalog
from course_assistant.core.exceptions import CourseNotFoundError
from course_assistant.core.policy_engine import PolicyEngine
from course_assistant.models.chat import ErrorResponse
from course_assistant.models.course import Course

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


class CourseSummary(BaseModel):
    """Listing entry."""

    id: str
    title: str
    short_description: str
    state: str
    label: str
    reference_link: str
    enrollment_form_url: str | None = None


class CourseDetail(BaseModel):
    """Full sanitized course record plus its lifecycle label."""

    label: str
    reference_link: str
    course: dict[str, Any] = Field(description="Course record with source field names")


def map_course_to_summary(course: Course, policy: PolicyEngine) -> CourseSummary:
    return CourseSummary(
        id=course.id,
        title=course.title,
        short_description=course.short_description,
        state=course.state.value,
        label=policy.label(course),
        reference_link=policy.reference_link(course),
        enrollment_form_url=course.enrollment_form_url if policy.may_show_enrollment_link(course) else None,
    )


def map_course_to_detail(course: Course, policy: PolicyEngine) -> CourseDetail:
    """Full record; the form URL is blanked unless enrollment is open."""
    record = course.model_dump(mode="json", by_alias=True)
    if not policy.may_show_enrollment_link(course):
        record["formulario"] = ""
    return CourseDetail(
        label=policy.label(course),
        reference_link=policy.reference_link(course),
        course=record,
    )


@router.get("", response_model=list[CourseSummary])
async def list_courses(
    catalog: CourseCatalog = Depends(get_catalog),
    policy: PolicyEngine = Depends(get_policy),
) -> list[CourseSummary]:
    """List listable courses in catalog order."""
    return [map_course_to_summary(course, policy) for course in catalog if policy.is_listable(course)]


@router.get(
    "/{course_id}",
    response_model=CourseDetail,
    responses={404: {"model": ErrorResponse}},
)
async def get_course(
    course_id: str,
    catalog: CourseCatalog = Depends(get_catalog),
    policy: PolicyEngine = Depends(get_policy),
) -> CourseDetail | JSONResponse:
    """
    Get a single course.

    Raises:
        HTTPException(404): Unknown course id (as ``{"error": ...}``)
    """
    try:
        course = catalog.get(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)
    except CourseNotFoundError as e:
        logger.warning("Course not found", extra={"course_id": e.course_id})
        return JSONResponse(status_code=404, content=ErrorResponse(error=e.message).model_dump())

    return map_course_to_detail(course, policy)
