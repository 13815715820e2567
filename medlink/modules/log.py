# medlink/modules/log.py
from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.users.models import AuditLog

logger = logging.getLogger(__name__)


def _format_details(details: str | Mapping[str, Any] | None) -> str | None:
    if details is None or isinstance(details, str):
        return details
    return " ".join(f"{k}={v}" for k, v in details.items())


async def write_audit_log(
    session: AsyncSession,
    user_id: UUID | None,
    action: str,
    details: str | Mapping[str, Any] | None = None,
) -> None:
    """
    Append an audit row inside the caller's transaction, so it is committed
    or rolled back together with the change it describes.

    `details` may be a preformatted string or a mapping rendered as
    "key=value" pairs.
    """
    text = _format_details(details)
    await session.execute(insert(AuditLog).values(user_id=user_id, action=action, details=text))
    logger.debug("audit %s by %s: %s", action, user_id, text)
