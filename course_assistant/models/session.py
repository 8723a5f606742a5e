"""
Conversation session models.

Dependencies: pydantic
System role: Per-session conversation memory
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatTurn(BaseModel):
    """Single history entry."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class OfferedCourse(BaseModel):
    """Course whose enrollment link was last shown to the user."""

    model_config = ConfigDict(frozen=True)

    course_id: str
    title: str
    enrollment_form_url: str


class SessionState(BaseModel):
    """Rolling history window plus the last offered enrollment link."""

    history: list[ChatTurn] = Field(default_factory=list)
    last_offered_course: OfferedCourse | None = None
