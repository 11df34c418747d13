"""Database layer - session management, base models, and mixins."""

from tbsa.core.database.base import (
    AwareDateTime,
    Base,
    OrganizationMixin,
    TimestampMixin,
    UUIDMixin,
    utcnow,
)
from tbsa.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)


__all__ = [
    "AwareDateTime",
    "Base",
    "OrganizationMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "utcnow",
]
