"""Water meters module - meters, readings and their validation."""
