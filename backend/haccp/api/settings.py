import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db.session import get_db
from ..models.user import User
from ..schemas.common import (
    BotStatus,
    ChatConfig,
    ChatConfigOut,
    SmtpConfig,
    SmtpConfigOut,
    TestEmailIn,
)
from ..services import audit, channels, notifier
from .deps import require_admin

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/smtp", response_model=Optional[SmtpConfigOut])
def get_smtp(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return channels.smtp_public(channels.get_smtp_config(db))


@router.put("/smtp", response_model=SmtpConfigOut)
def put_smtp(payload: SmtpConfig, db: Session = Depends(get_db), actor: User = Depends(require_admin)):
    saved = channels.save_smtp_config(db, payload)
    audit.record(db, "UPDATE", "SYSTEM", f"SMTP settings saved ({saved.host}:{saved.port})", actor)
    return channels.smtp_public(saved)


@router.post("/smtp/test")
async def test_smtp(payload: TestEmailIn, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    config = channels.get_smtp_config(db)
    if config is None:
        raise HTTPException(status_code=400, detail="SMTP is not configured")
    to = payload.to or config.user
    try:
        await asyncio.to_thread(
            notifier.send_mail, config, [to], "HACCP test message",
            "This is a test message from the HACCP compliance log.",
        )
    except notifier.ChannelError as exc:
        return {"success": False, "error": str(exc)}
    return {"success": True}


@router.get("/chat", response_model=Optional[ChatConfigOut])
def get_chat(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return channels.chat_public(channels.get_chat_config(db))


@router.put("/chat", response_model=ChatConfigOut)
def put_chat(payload: ChatConfig, db: Session = Depends(get_db), actor: User = Depends(require_admin)):
    saved = channels.save_chat_config(db, payload)
    audit.record(db, "UPDATE", "SYSTEM", "Chat bot settings saved", actor)
    return channels.chat_public(saved)


@router.post("/chat/verify", response_model=BotStatus)
async def verify_chat(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    config = channels.get_chat_config(db)
    if config is None:
        raise HTTPException(status_code=400, detail="Chat bot is not configured")
    return await notifier.verify_bot(config.bot_token)
