from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String

from ..db.session import Base


class ChannelConfig(Base):
    """Administrator-saved settings for one notification channel (smtp | chat)."""

    __tablename__ = "channel_configs"

    key = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
