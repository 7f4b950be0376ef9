from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models.equipment import EquipmentType
from ..models.facility import Facility, Refrigerator
from ..models.user import User
from ..schemas.common import FacilityIn, FacilityOut, RefrigeratorIn, RefrigeratorOut
from ..services import audit
from .deps import get_current_user, require_admin

router = APIRouter(tags=["facilities"])


def _check_type(db: Session, type_id, kind: str):
    if type_id is None:
        return
    t = db.get(EquipmentType, type_id)
    if t is None or t.kind != kind:
        raise HTTPException(status_code=422, detail=f"Unknown {kind} type: {type_id}")


@router.get("/facilities/", response_model=List[FacilityOut])
def list_facilities(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return db.query(Facility).order_by(Facility.name).all()


@router.post("/facilities/", response_model=FacilityOut)
def upsert_facility(payload: FacilityIn, db: Session = Depends(get_db), actor: User = Depends(require_admin)):
    _check_type(db, payload.cooking_method_id, "menu")
    f = db.get(Facility, payload.id)
    created = f is None
    if created:
        f = Facility(id=payload.id)
        db.add(f)
    f.name = payload.name
    f.supervisor_id = payload.supervisor_id
    f.cooking_method_id = payload.cooking_method_id
    db.commit(); db.refresh(f)
    audit.record(db, "CREATE" if created else "UPDATE", "FACILITIES", f"Facility {f.name} saved", actor)
    return f


@router.get("/refrigerators/", response_model=List[RefrigeratorOut])
def list_refrigerators(facility_id: str | None = None, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    q = db.query(Refrigerator)
    if facility_id:
        q = q.filter(Refrigerator.facility_id == facility_id)
    return q.order_by(Refrigerator.name).all()


@router.post("/refrigerators/", response_model=RefrigeratorOut)
def upsert_refrigerator(payload: RefrigeratorIn, db: Session = Depends(get_db), actor: User = Depends(require_admin)):
    if db.get(Facility, payload.facility_id) is None:
        raise HTTPException(status_code=404, detail="Facility not found")
    _check_type(db, payload.type_id, "refrigerator")
    r = db.get(Refrigerator, payload.id)
    created = r is None
    if created:
        r = Refrigerator(id=payload.id)
        db.add(r)
    r.name = payload.name
    r.facility_id = payload.facility_id
    r.type_id = payload.type_id
    db.commit(); db.refresh(r)
    audit.record(db, "CREATE" if created else "UPDATE", "REFRIGERATORS", f"Refrigerator {r.name} saved", actor)
    return r
