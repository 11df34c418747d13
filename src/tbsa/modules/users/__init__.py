"""Users module - accounts and administrator/owner profiles."""
