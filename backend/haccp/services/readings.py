from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..models.reading import Reading
from ..schemas.common import ReadingIn
from .alerts import AlertDraft, evaluate
from .ledger import AlertLedger
from .recipients import Recipients, resolve_recipients
from .repository import HaccpRepository
from .thresholds import resolve_band

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingNotification:
    notice: AlertDraft
    recipients: Recipients


def submit_reading(repo: HaccpRepository, payload: ReadingIn) -> Tuple[Reading, Optional[PendingNotification]]:
    """Persist a reading, then evaluate it and record an alert if out of range.

    Notification is left to the caller; the returned PendingNotification is
    None when the reading is compliant or its checkpoint is not configured.
    """
    reading = Reading(
        id=payload.id or f"R-{uuid.uuid4().hex}",
        target_id=payload.target_id,
        target_type=payload.target_type,
        checkpoint_name=payload.checkpoint_name,
        value=payload.value,
        timestamp=payload.timestamp or datetime.utcnow(),
        user_id=payload.user_id,
        facility_id=payload.facility_id,
        reason=payload.reason,
    )
    reading = repo.save_reading(reading)

    band = resolve_band(repo, reading.target_type, reading.target_id, reading.checkpoint_name, reading.facility_id)
    if band is None:
        logger.debug("No band for %s %s/%s, evaluation skipped",
                     reading.target_type, reading.target_id, reading.checkpoint_name)
        return reading, None

    draft = evaluate(reading, band, repo.display_names(reading))
    if draft is None:
        return reading, None

    AlertLedger(repo).append(draft)
    logger.warning("Reading %s out of range: %.1f not in [%g, %g] at %s",
                   reading.id, draft.value, draft.min, draft.max, draft.facility_name)
    recipients = resolve_recipients(reading.facility_id, repo.query_active_alert_recipients(reading.facility_id))
    return reading, PendingNotification(notice=draft, recipients=recipients)
