"""Organizations module - multi-tenancy support."""
