"""
Course catalog.

Validates raw records into immutable Course values once at startup and
exposes read-only lookups. The catalog never changes while the process runs.

Dependencies: pydantic, course_assistant.models.course, course_assistant.boundary.catalog
System role: In-memory course registry
"""

import html
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from pydantic import ValidationError as PydanticValidationError

from course_assistant.boundary.catalog.json_source import load_raw_records
from course_assistant.core.exceptions import CatalogLoadError
from course_assistant.models.course import Course

logger = logging.getLogger(__name__)


def _url_key(url: str) -> str:
    """Comparable form of a URL: no scheme, no "www.", lowercase host, no trailing slash."""
    url = html.unescape(url).strip()
    parts = urlsplit(url if "://" in url else f"//{url}")
    key = f"{parts.netloc.lower().removeprefix('www.')}{parts.path}".rstrip("/")
    return f"{key}?{parts.query}" if parts.query else key


class CourseCatalog:
    """Immutable, ordered collection of courses."""

    def __init__(self, courses: Iterable[Course] = ()) -> None:
        self._courses: tuple[Course, ...] = tuple(courses)
        self._by_id = {course.id: course for course in self._courses}
        self._by_form_url: dict[str, Course] = {}
        for course in self._courses:
            if course.enrollment_form_url:
                self._by_form_url.setdefault(_url_key(course.enrollment_form_url), course)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "CourseCatalog":
        """
        Build a catalog from raw records, skipping the ones that fail validation.

        Args:
            records: Raw course dicts in catalog order

        Returns:
            CourseCatalog: Catalog with every valid record
        """
        courses = []
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning("Skipping catalog record %d: not an object", index)
                continue
            try:
                courses.append(Course.model_validate(record))
            except PydanticValidationError as e:
                logger.warning(
                    "Skipping catalog record %d: %d validation error(s)",
                    index,
                    e.error_count(),
                    extra={"record_id": record.get("id")},
                )
        return cls(courses)

    @classmethod
    def load(cls, path: str | Path) -> "CourseCatalog":
        """
        Load the catalog file, degrading to an empty catalog on failure.

        Args:
            path: Path to the JSON catalog

        Returns:
            CourseCatalog: Loaded catalog (empty if the source is unusable)
        """
        try:
            records = load_raw_records(path)
        except CatalogLoadError as e:
            logger.warning("Catalog unavailable, starting empty: %s", e)
            return cls()

        catalog = cls.from_records(records)
        logger.info("Courses loaded: %d", len(catalog))
        return catalog

    @property
    def courses(self) -> tuple[Course, ...]:
        return self._courses

    def __len__(self) -> int:
        return len(self._courses)

    def __iter__(self) -> Iterator[Course]:
        return iter(self._courses)

    def get(self, course_id: str) -> Course | None:
        """Look up a course by id."""
        return self._by_id.get(str(course_id))

    def find_by_form_url(self, url: str) -> Course | None:
        """Return the course whose enrollment form is ``url``, if any."""
        return self._by_form_url.get(_url_key(url))
