"""TBSA - residential property management API."""

__version__ = "0.1.0"
