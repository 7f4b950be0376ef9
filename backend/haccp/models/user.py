from sqlalchemy import Column, String, Boolean
from ..db.session import Base

ROLES = ("User", "Manager", "Admin", "SuperAdmin")
PRIVILEGED_ROLES = ("Manager", "Admin", "SuperAdmin")

class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    username = Column(String, nullable=False, unique=True, index=True)
    hashed_password = Column(String, nullable=False)
    email = Column(String, nullable=True)
    role = Column(String, nullable=False, default="User")
    status = Column(String, nullable=False, default="Active")
    facility_id = Column(String, nullable=True, index=True)
    email_alerts = Column(Boolean, nullable=False, default=False)
    telegram_alerts = Column(Boolean, nullable=False, default=False)
    # Stored for future per-user routing; chat alerts go to the shared destination
    telegram_chat_id = Column(String, nullable=True)
    all_facilities_alerts = Column(Boolean, nullable=False, default=False)
