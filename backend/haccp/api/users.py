import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.security import hash_password
from ..db.session import get_db
from ..models.user import User
from ..schemas.common import AlertSubscription, UserIn, UserOut
from ..services import audit
from ..services.repository import HaccpRepository
from .deps import require_admin

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return db.query(User).order_by(User.name).all()


@router.post("/", response_model=UserOut)
def upsert_user(payload: UserIn, db: Session = Depends(get_db), actor: User = Depends(require_admin)):
    repo = HaccpRepository(db)
    clash = repo.find_user_by_username(payload.username)
    if clash is not None and clash.id != payload.id:
        raise HTTPException(status_code=409, detail=f'Username "{payload.username}" is already taken')
    if actor.role == "Manager" and payload.role != "User":
        raise HTTPException(status_code=403, detail="Managers may only manage users with role User")

    u = repo.query_user(payload.id)
    if actor.role == "Manager" and u is not None and u.role != "User":
        raise HTTPException(status_code=403, detail="Managers may only manage users with role User")
    created = u is None
    if created:
        if not payload.password:
            raise HTTPException(status_code=422, detail="Password is required for new users")
        u = User(id=payload.id or f"U-{uuid.uuid4().hex[:10]}")
        db.add(u)
    data = payload.model_dump(exclude={"id", "password"})
    for key, value in data.items():
        setattr(u, key, value)
    if payload.password:
        u.hashed_password = hash_password(payload.password)
    db.commit(); db.refresh(u)
    audit.record(db, "CREATE" if created else "UPDATE", "USERS", f"User {u.name} ({u.username}) saved", actor)
    return u


@router.patch("/{user_id}/alerts", response_model=UserOut)
def update_alert_subscription(
    user_id: str,
    payload: AlertSubscription,
    db: Session = Depends(get_db),
    actor: User = Depends(require_admin),
):
    u = db.get(User, user_id)
    if u is None:
        raise HTTPException(status_code=404, detail="User not found")
    changes = payload.model_dump(exclude_none=True)
    for key, value in changes.items():
        setattr(u, key, value)
    db.commit(); db.refresh(u)
    summary = ", ".join(f"{k}={v}" for k, v in changes.items()) or "no changes"
    audit.record(db, "UPDATE", "SYSTEM", f"Alert channels for {u.name} updated: {summary}", actor)
    return u
