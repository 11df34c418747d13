"""Subscriptions module - plans, feature modules and plan limits."""
