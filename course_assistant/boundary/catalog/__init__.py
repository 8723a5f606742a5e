"""Catalog data sources."""

from course_assistant.boundary.catalog.json_source import load_raw_records

__all__ = ["load_raw_records"]
