"""Stored SMTP and chat settings, falling back to environment defaults."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.channel_config import ChannelConfig
from ..schemas.common import ChatConfig, ChatConfigOut, SmtpConfig, SmtpConfigOut

SMTP_KEY = "smtp"
CHAT_KEY = "chat"


def _load(db: Session, key: str) -> Optional[dict]:
    row = db.get(ChannelConfig, key)
    return dict(row.data) if row else None


def _store(db: Session, key: str, data: dict) -> None:
    row = db.get(ChannelConfig, key)
    if row is None:
        db.add(ChannelConfig(key=key, data=data))
    else:
        row.data = data
    db.commit()


def get_smtp_config(db: Session) -> Optional[SmtpConfig]:
    data = _load(db, SMTP_KEY)
    if data is not None:
        return SmtpConfig(**data)
    if settings.SMTP_HOST and settings.SMTP_USER:
        return SmtpConfig(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_address=settings.SMTP_FROM or None,
        )
    return None


def save_smtp_config(db: Session, config: SmtpConfig) -> SmtpConfig:
    # A blank password keeps the one already stored
    if not config.password:
        current = get_smtp_config(db)
        if current is not None:
            config = config.model_copy(update={"password": current.password})
    _store(db, SMTP_KEY, config.model_dump())
    return config


def get_chat_config(db: Session) -> Optional[ChatConfig]:
    data = _load(db, CHAT_KEY)
    if data is not None:
        return ChatConfig(**data)
    if settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_CHAT_ID:
        return ChatConfig(bot_token=settings.TELEGRAM_BOT_TOKEN, chat_id=settings.TELEGRAM_CHAT_ID)
    return None


def save_chat_config(db: Session, config: ChatConfig) -> ChatConfig:
    _store(db, CHAT_KEY, config.model_dump())
    return config


def smtp_public(config: Optional[SmtpConfig]) -> Optional[SmtpConfigOut]:
    if config is None:
        return None
    return SmtpConfigOut(
        host=config.host,
        port=config.port,
        secure=config.use_ssl,
        user=config.user,
        from_address=config.sender,
        password_set=bool(config.password),
    )


def chat_public(config: Optional[ChatConfig]) -> Optional[ChatConfigOut]:
    if config is None:
        return None
    return ChatConfigOut(chat_id=config.chat_id, token_set=bool(config.bot_token))
