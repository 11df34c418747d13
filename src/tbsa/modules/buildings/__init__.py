"""Buildings module - building registry and water consumption reports."""
