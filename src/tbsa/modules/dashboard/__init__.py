"""Dashboard module - administrator and owner statistics."""
