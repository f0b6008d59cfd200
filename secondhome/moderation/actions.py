from __future__ import annotations

import logging
from datetime import datetime

from ..analytics.store import record_event
from ..listings.data_store import get_mess, get_messes
from ..listings.models import Mess
from .errors import MessNotFound

logger = logging.getLogger(__name__)


def list_pending_messes() -> list[Mess]:
    """Messes awaiting a decision, oldest first."""
    pending = [m for m in get_messes().values() if not m.is_approved and not m.is_rejected]
    return sorted(pending, key=lambda m: m.created_at or datetime.min)


def approve_mess(mess_id: str, admin: str, now: datetime | None = None) -> Mess:
    mess = get_mess(mess_id)
    if mess is None:
        raise MessNotFound(mess_id)

    mess.is_approved = True
    mess.is_rejected = False
    mess.approved_at = now or datetime.now()
    mess.approved_by = admin

    logger.info("Mess %s approved by %s", mess_id, admin)
    record_event("moderation", {"mess_id": mess_id, "action": "approve", "admin": admin})
    return mess


def reject_mess(
    mess_id: str,
    admin: str,
    reason: str | None = None,
    now: datetime | None = None,
) -> Mess:
    mess = get_mess(mess_id)
    if mess is None:
        raise MessNotFound(mess_id)

    mess.is_approved = False
    mess.is_rejected = True
    mess.rejected_at = now or datetime.now()
    mess.rejected_by = admin
    mess.rejection_reason = reason

    logger.info("Mess %s rejected by %s: %s", mess_id, admin, reason)
    record_event("moderation", {"mess_id": mess_id, "action": "reject", "admin": admin})
    return mess
