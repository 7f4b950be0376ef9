from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models.equipment import Checkpoint, EquipmentType
from ..models.user import User
from ..schemas.common import EquipmentTypeIn, EquipmentTypeOut
from ..services import audit
from .deps import get_current_user, require_admin

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/types", response_model=List[EquipmentTypeOut])
def list_types(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return db.query(EquipmentType).order_by(EquipmentType.id).all()


@router.post("/types", response_model=EquipmentTypeOut)
def upsert_type(payload: EquipmentTypeIn, db: Session = Depends(get_db), actor: User = Depends(require_admin)):
    t = db.get(EquipmentType, payload.id)
    created = t is None
    if created:
        t = EquipmentType(id=payload.id)
        db.add(t)
    t.name = payload.name
    t.kind = payload.kind
    # Edit checkpoints in place so existing names keep their rows
    wanted = {c.name: c for c in payload.checkpoints}
    for cp in list(t.checkpoints):
        if cp.name not in wanted:
            t.checkpoints.remove(cp)
    existing = {cp.name: cp for cp in t.checkpoints}
    for name, c in wanted.items():
        cp = existing.get(name)
        if cp is None:
            t.checkpoints.append(Checkpoint(name=name, min_temp=c.min_temp, max_temp=c.max_temp))
        else:
            cp.min_temp, cp.max_temp = c.min_temp, c.max_temp
    db.commit(); db.refresh(t)
    audit.record(db, "CREATE" if created else "UPDATE", "SETTINGS", f"Type {t.name} saved with {len(t.checkpoints)} checkpoint(s)", actor)
    return t
