from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .repository import DisplayNames
from .thresholds import Band


@dataclass(frozen=True)
class AlertDraft:
    """An alert candidate; names are copied so later renames leave it unchanged."""
    reading_id: str
    facility_id: str
    facility_name: str
    target_name: str
    checkpoint_name: str
    value: float
    min: float
    max: float
    timestamp: datetime
    user_id: str
    user_name: str
    reason: Optional[str] = None


def is_violation(value: float, band: Band) -> bool:
    # Closed interval: min and max themselves are compliant
    return value < band.min_temp or value > band.max_temp


def evaluate(reading, band: Optional[Band], names: DisplayNames) -> Optional[AlertDraft]:
    """Return an AlertDraft when the reading falls outside its band.

    ``reading`` is anything exposing the Reading attributes. A manually
    supplied reason does not suppress the alert.
    """
    if band is None:
        return None
    if not is_violation(reading.value, band):
        return None
    return AlertDraft(
        reading_id=reading.id,
        facility_id=reading.facility_id,
        facility_name=names.facility,
        target_name=names.target,
        checkpoint_name=reading.checkpoint_name,
        value=reading.value,
        min=band.min_temp,
        max=band.max_temp,
        timestamp=reading.timestamp,
        user_id=reading.user_id,
        user_name=names.user,
        reason=reading.reason or None,
    )
