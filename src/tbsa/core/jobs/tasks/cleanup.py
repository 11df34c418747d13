"""Periodic cleanup of sessions and invite codes."""

from typing import Any

import structlog

from tbsa.modules.invite_codes.services import InviteCodeService
from tbsa.modules.sessions.services import SessionService


log = structlog.get_logger()


async def cleanup_expired_sessions(ctx: dict[str, Any]) -> dict[str, int]:
    """Delete expired and invalidated sessions.

    Args:
        ctx: Worker context containing the database session factory

    Returns:
        Dict with the number of deleted sessions
    """
    session_factory = ctx["db_session_factory"]

    async with session_factory() as session:
        deleted = await SessionService(session).cleanup_expired_sessions()
        await session.commit()

    log.info("cleanup_expired_sessions_complete", sessions_deleted=deleted)
    return {"sessions_deleted": deleted}


async def expire_invite_codes(ctx: dict[str, Any]) -> dict[str, int]:
    """Move ACTIVE invite codes past their expiry date to EXPIRED.

    Redemption rejects expired codes on its own; this keeps listings
    accurate.
    """
    session_factory = ctx["db_session_factory"]

    async with session_factory() as session:
        expired = await InviteCodeService(session).expire_overdue()
        await session.commit()

    log.info("expire_invite_codes_complete", codes_expired=expired)
    return {"codes_expired": expired}
