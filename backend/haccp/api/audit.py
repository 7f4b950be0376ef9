from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models.audit_log import AuditLog
from ..models.user import User
from ..schemas.common import AuditLogOut
from .deps import require_admin

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("/", response_model=List[AuditLogOut])
def list_audit_logs(limit: int = 200, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    limit = max(1, min(limit, 1000))
    return db.query(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
