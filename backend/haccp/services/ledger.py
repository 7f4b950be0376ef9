from __future__ import annotations

import uuid
from typing import List, Optional

from ..models.alert import Alert
from ..models.user import User
from . import audit
from .alerts import AlertDraft
from .repository import HaccpRepository


class AlertNotFound(Exception):
    """Raised when resolving an alert id that was never recorded."""


class AlertLedger:
    """Append-only alert collection with administrator resolve actions.

    Alerts are never deleted; resolving only flips ``resolved`` and leaves
    the originating reading untouched. Both resolve operations are
    idempotent and write an audit entry on every call.
    """

    def __init__(self, repo: HaccpRepository):
        self.repo = repo

    def append(self, draft: AlertDraft) -> Alert:
        alert = Alert(
            id=f"ALERT-{uuid.uuid4().hex[:12]}",
            reading_id=draft.reading_id,
            facility_id=draft.facility_id,
            facility_name=draft.facility_name,
            target_name=draft.target_name,
            checkpoint_name=draft.checkpoint_name,
            value=draft.value,
            min=draft.min,
            max=draft.max,
            timestamp=draft.timestamp,
            user_id=draft.user_id,
            user_name=draft.user_name,
            resolved=False,
        )
        return self.repo.add_alert(alert)

    def resolve(self, alert_id: str, actor: Optional[User]) -> Alert:
        alert = self.repo.get_alert(alert_id)
        if alert is None:
            raise AlertNotFound(alert_id)
        if not alert.resolved:
            alert.resolved = True
            self.repo.commit()
        audit.record(self.repo.db, "UPDATE", "ALERTS", f"Alert {alert_id} marked as resolved", actor)
        return alert

    def resolve_all(self, actor: Optional[User]) -> int:
        pending = self.unresolved()
        for alert in pending:
            alert.resolved = True
        if pending:
            self.repo.commit()
        audit.record(self.repo.db, "UPDATE", "ALERTS", f"All alerts marked as resolved ({len(pending)})", actor)
        return len(pending)

    def unresolved(self) -> List[Alert]:
        return self.repo.list_alerts(resolved=False)

    def all(self, limit: Optional[int] = None) -> List[Alert]:
        return self.repo.list_alerts(limit=limit)
