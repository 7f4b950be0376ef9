from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from ..db.session import get_db
from ..models.user import User
from ..schemas.common import LoginIn, UserOut, Token
from ..core.security import verify_password, create_access_token
from ..services import audit
from ..services.repository import HaccpRepository
from .deps import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=Token)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    u = HaccpRepository(db).find_user_by_username(payload.username)
    if not u or u.status != "Active" or not verify_password(payload.password, u.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    audit.record(db, "LOGIN", "AUTH", "Successful sign-in", u)
    return Token(access_token=create_access_token(sub=u.id))

@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
