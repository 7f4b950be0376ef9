import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog
from ..models.user import User

logger = logging.getLogger(__name__)

ACTIONS = ("LOGIN", "CREATE", "UPDATE", "DELETE")


def record(db: Session, action: str, entity: str, details: str, actor: Optional[User]) -> None:
    """Append an audit entry. Never raises into the calling operation."""
    entry = AuditLog(
        user_id=actor.id if actor else None,
        user_name=actor.name if actor else "system",
        action=action,
        entity=entity,
        details=details,
    )
    try:
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Could not write audit entry %s/%s: %s", action, entity, details)
