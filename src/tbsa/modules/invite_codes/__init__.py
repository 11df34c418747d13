"""Invite codes module - codes that let owners claim apartments."""
