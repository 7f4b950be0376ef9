"""
Threshold catalog.

Maps a reading's target to the temperature band of the named checkpoint:
  - refrigerator → refrigerator type → checkpoint
  - menu         → facility cooking method → checkpoint
Every missing link yields ``None``; missing configuration is not an error.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .repository import HaccpRepository


@dataclass(frozen=True)
class Band:
    checkpoint: str
    min_temp: float
    max_temp: float


# Reference data installed on first start
DEFAULT_TYPES = [
    {"id": "RT1", "name": "Kühlschrank (+2 bis +7°C)", "kind": "refrigerator",
     "checkpoints": [{"name": "Luft", "min_temp": 2.0, "max_temp": 7.0}]},
    {"id": "RT2", "name": "Tiefkühler (-18 bis -22°C)", "kind": "refrigerator",
     "checkpoints": [{"name": "Luft", "min_temp": -22.0, "max_temp": -18.0}]},
    {"id": "CM1", "name": "Standard Cook & Serve", "kind": "menu",
     "checkpoints": [{"name": "Kern", "min_temp": 72.0, "max_temp": 95.0}]},
]


def resolve_band(
    repo: HaccpRepository,
    target_type: str,
    target_id: str,
    checkpoint_name: str,
    facility_id: str,
) -> Optional[Band]:
    if target_type == "refrigerator":
        fridge = repo.query_refrigerator(target_id)
        type_id = fridge.type_id if fridge else None
    elif target_type == "menu":
        facility = repo.query_facility(facility_id)
        type_id = facility.cooking_method_id if facility else None
    else:
        return None

    cp = repo.query_checkpoint(type_id, checkpoint_name)
    if cp is None:
        return None
    return Band(checkpoint=cp.name, min_temp=cp.min_temp, max_temp=cp.max_temp)
