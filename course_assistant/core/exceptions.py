"""
Exception hierarchy for the course assistant.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CourseAssistantException(Exception):
    """Base exception for all course assistant errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(CourseAssistantException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: User-facing error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class CatalogLoadError(CourseAssistantException):
    """Raised when the course catalog source cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize catalog load error.

        Args:
            message: Error message
            source: Path or identifier of the catalog source
            details: Additional context
        """
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class CourseNotFoundError(CourseAssistantException):
    """Raised when a course id is not present in the catalog."""

    def __init__(self, course_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["course_id"] = course_id
        self.course_id = course_id
        super().__init__(f"Course not found: {course_id}", details)


class GenerationError(CourseAssistantException):
    """Raised when the text generation service fails after retries."""

    def __init__(
        self,
        message: str,
        model: str | None = None,
        attempts: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize generation error.

        Args:
            message: Error message
            model: Model identifier that was called
            attempts: Number of attempts made
            details: Additional context
        """
        details = details or {}
        if model:
            details["model"] = model
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(message, details)
