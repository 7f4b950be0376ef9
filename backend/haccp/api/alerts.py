from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..models.user import User
from ..schemas.common import AlertOut, ResolveAllOut
from ..services.ledger import AlertLedger, AlertNotFound
from ..services.repository import HaccpRepository
from .deps import get_current_user, get_repo, require_admin

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("/", response_model=List[AlertOut])
def list_alerts(limit: int = 500, repo: HaccpRepository = Depends(get_repo), _: User = Depends(get_current_user)):
    return AlertLedger(repo).all(limit=max(1, min(limit, 5000)))


@router.get("/active", response_model=List[AlertOut])
def active_alerts(repo: HaccpRepository = Depends(get_repo), _: User = Depends(get_current_user)):
    return AlertLedger(repo).unresolved()


@router.post("/resolve-all", response_model=ResolveAllOut)
def resolve_all(repo: HaccpRepository = Depends(get_repo), actor: User = Depends(require_admin)):
    return ResolveAllOut(resolved=AlertLedger(repo).resolve_all(actor))


@router.post("/{alert_id}/resolve", response_model=AlertOut)
def resolve(alert_id: str, repo: HaccpRepository = Depends(get_repo), actor: User = Depends(require_admin)):
    try:
        return AlertLedger(repo).resolve(alert_id, actor)
    except AlertNotFound:
        raise HTTPException(status_code=404, detail="Alert not found")
