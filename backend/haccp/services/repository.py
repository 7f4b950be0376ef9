"""Persistence collaborator used by the alerting core.

Wraps a SQLAlchemy session so evaluation, resolution and the ledger never
query the database directly. Reads tolerate dangling references: a facility,
user or target that no longer exists resolves to ``UNKNOWN`` instead of
failing the caller.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.alert import Alert
from ..models.equipment import Checkpoint, EquipmentType
from ..models.facility import Facility, Refrigerator
from ..models.reading import Reading
from ..models.user import User

UNKNOWN = "Unknown"


class DuplicateReading(Exception):
    """Raised when a reading id has already been recorded."""


@dataclass(frozen=True)
class DisplayNames:
    facility: str
    target: str
    user: str


class HaccpRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── readings ──────────────────────────────────────────────────────────
    def save_reading(self, reading: Reading) -> Reading:
        if self.db.get(Reading, reading.id) is not None:
            raise DuplicateReading(reading.id)
        self.db.add(reading)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateReading(reading.id) from exc
        self.db.refresh(reading)
        return reading

    def existing_reading_ids(self, ids: List[str]) -> List[str]:
        if not ids:
            return []
        return [row[0] for row in self.db.query(Reading.id).filter(Reading.id.in_(ids)).all()]

    def list_readings(self, limit: int = 1000) -> List[Reading]:
        return self.db.query(Reading).order_by(Reading.timestamp.desc()).limit(limit).all()

    # ── users / facilities ────────────────────────────────────────────────
    def query_user(self, user_id: Optional[str]) -> Optional[User]:
        return self.db.get(User, user_id) if user_id else None

    def query_facility(self, facility_id: Optional[str]) -> Optional[Facility]:
        return self.db.get(Facility, facility_id) if facility_id else None

    def query_active_alert_recipients(self, facility_id: str) -> List[User]:
        """Active users subscribed to any channel whose scope covers the facility."""
        return (
            self.db.query(User)
            .filter(User.status == "Active")
            .filter(or_(User.email_alerts.is_(True), User.telegram_alerts.is_(True)))
            .filter(or_(User.all_facilities_alerts.is_(True), User.facility_id == facility_id))
            .order_by(User.id)
            .all()
        )

    def find_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.username) == username.lower()).first()

    # ── catalog ───────────────────────────────────────────────────────────
    def query_refrigerator(self, refrigerator_id: str) -> Optional[Refrigerator]:
        return self.db.get(Refrigerator, refrigerator_id)

    def query_type(self, type_id: Optional[str]) -> Optional[EquipmentType]:
        return self.db.get(EquipmentType, type_id) if type_id else None

    def query_checkpoint(self, type_id: Optional[str], name: str) -> Optional[Checkpoint]:
        if not type_id:
            return None
        return (
            self.db.query(Checkpoint)
            .filter(Checkpoint.type_id == type_id, Checkpoint.name == name)
            .first()
        )

    def display_names(self, reading: Reading) -> DisplayNames:
        facility = self.query_facility(reading.facility_id)
        user = self.query_user(reading.user_id)
        if reading.target_type == "refrigerator":
            fridge = self.query_refrigerator(reading.target_id)
            target = fridge.name if fridge else UNKNOWN
        else:
            # Menus are not modelled beyond their id
            target = reading.target_id
        return DisplayNames(
            facility=facility.name if facility else UNKNOWN,
            target=target,
            user=user.name if user else UNKNOWN,
        )

    # ── alerts ────────────────────────────────────────────────────────────
    def _next_seq(self) -> int:
        return (self.db.query(func.max(Alert.seq)).scalar() or 0) + 1

    def add_alert(self, alert: Alert, attempts: int = 5) -> Alert:
        # seq is unique; a concurrent insert that took the same value forces a retry
        for attempt in range(attempts):
            alert.seq = self._next_seq()
            self.db.add(alert)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                if attempt == attempts - 1:
                    raise
                continue
            self.db.refresh(alert)
            return alert

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        return self.db.get(Alert, alert_id)

    def list_alerts(self, resolved: Optional[bool] = None, limit: Optional[int] = None) -> List[Alert]:
        q = self.db.query(Alert)
        if resolved is not None:
            q = q.filter(Alert.resolved.is_(resolved))
        q = q.order_by(Alert.seq)
        if limit:
            q = q.limit(limit)
        return q.all()

    def commit(self) -> None:
        self.db.commit()
