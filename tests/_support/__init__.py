"""Test helpers (in-memory Redis double)."""
