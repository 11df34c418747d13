"""Contact module - public contact form."""
