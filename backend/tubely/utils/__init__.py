"""Utility helpers: upload validation, storage keys and logging."""
