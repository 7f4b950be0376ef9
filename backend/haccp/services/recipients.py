from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List


@dataclass(frozen=True)
class Recipients:
    email_targets: List[str] = field(default_factory=list)
    chat_eligible: bool = False

    @property
    def empty(self) -> bool:
        return not self.email_targets and not self.chat_eligible


def is_candidate(user, facility_id: str) -> bool:
    if user.status != "Active":
        return False
    if not (user.email_alerts or user.telegram_alerts):
        return False
    return bool(user.all_facilities_alerts) or user.facility_id == facility_id


def resolve_recipients(facility_id: str, users: Iterable) -> Recipients:
    """Decide who hears about an alert at ``facility_id``.

    Pure function of its inputs. Chat delivery goes to one shared
    destination, so only eligibility is reported; per-user chat ids on the
    user record are not consulted.
    """
    emails: List[str] = []
    seen = set()
    chat = False
    for user in users:
        if not is_candidate(user, facility_id):
            continue
        if user.telegram_alerts:
            chat = True
        address = (user.email or "").strip()
        if user.email_alerts and "@" in address:
            key = address.lower()
            if key not in seen:
                seen.add(key)
                emails.append(address)
    return Recipients(email_targets=emails, chat_eligible=chat)
