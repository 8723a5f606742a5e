"""Deterministic intent-resolution and disclosure-policy core."""
