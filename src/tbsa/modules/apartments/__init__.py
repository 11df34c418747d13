"""Apartments module - apartment registry and bulk import."""
