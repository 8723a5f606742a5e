"""
Intent models.

Dependencies: pydantic
System role: Classifier output contract
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class IntentType(str, Enum):
    """What the user is asking for."""

    ENROLLMENT_LINK = "enrollment_link"
    SCHEDULE = "schedule"
    REQUIREMENTS = "requirements"
    MATERIALS = "materials"
    LOCATION = "location"
    START_DATE = "start_date"
    END_DATE = "end_date"
    DURATION = "duration"
    UNPUBLISHED_FIELD = "unpublished_field"
    GENERAL_INFO = "general_info"
    TOPIC_LISTING = "topic_listing"
    LOCALITY_LISTING = "locality_listing"
    ENROLLMENT_GENERAL = "enrollment_general"
    UNKNOWN = "unknown"


class Intent(BaseModel):
    """Classified user intent."""

    model_config = ConfigDict(frozen=True)

    type: IntentType
    # Set for course-specific intents
    course_id: str | None = None
    # Set for LOCALITY_LISTING: normalized for matching, and as the user wrote it
    locality: str | None = None
    locality_text: str | None = None
    # TOPIC_LISTING restricted to courses with open enrollment
    available_now: bool = False
    # GENERAL_INFO phrased as "tell me more"; answered by the model
    open_ended: bool = False
