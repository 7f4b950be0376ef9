from sqlalchemy import Column, String, Float, DateTime, Text
from ..db.session import Base

class Reading(Base):
    __tablename__ = "readings"
    id = Column(String, primary_key=True, index=True)
    target_id = Column(String, nullable=False, index=True)
    target_type = Column(String, nullable=False)
    checkpoint_name = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    user_id = Column(String, nullable=False)
    facility_id = Column(String, nullable=False, index=True)
    reason = Column(Text, nullable=True)
