"""Sessions module - login sessions and their invalidation."""
