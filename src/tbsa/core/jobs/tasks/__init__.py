"""Background job tasks."""

from tbsa.core.jobs.tasks.cleanup import cleanup_expired_sessions, expire_invite_codes


__all__ = [
    "cleanup_expired_sessions",
    "expire_invite_codes",
]
