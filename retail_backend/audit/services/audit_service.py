# audit/services/audit_service.py

import logging

from audit.models import AuditLog

logger = logging.getLogger(__name__)


def log_action(*, store, actor, action: str, details: str = "") -> AuditLog:
    """
    Append one audit row. Runs inside the caller's transaction, so a
    rolled-back workflow leaves no audit trace either.

    actor: anything with .id / .name (store.services.context.Actor), or None
    for system actions.
    """
    actor_id = str(getattr(actor, "id", "") or "") if actor is not None else ""
    actor_name = str(getattr(actor, "name", "") or "") if actor is not None else "system"

    row = AuditLog.objects.create(
        store=store,
        actor_id=actor_id,
        actor_name=actor_name,
        action=action,
        details=details or "",
    )

    logger.info(
        "Audit: %s",
        action,
        extra={"store_id": str(store.pk), "actor_id": actor_id},
    )
    return row
