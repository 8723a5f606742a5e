"""Adapters for external data sources and services."""
