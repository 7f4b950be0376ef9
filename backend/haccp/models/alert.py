from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey, DateTime
from ..db.session import Base

class Alert(Base):
    __tablename__ = "alerts"
    id = Column(String, primary_key=True, index=True)
    # Insertion sequence; unresolved() lists alerts in this order
    seq = Column(Integer, nullable=False, unique=True, index=True)
    reading_id = Column(String, ForeignKey("readings.id"), unique=True, nullable=False)
    facility_id = Column(String, nullable=False, index=True)
    facility_name = Column(String, nullable=False)
    target_name = Column(String, nullable=False)
    checkpoint_name = Column(String, nullable=False)
    value = Column(Float, nullable=False)
    min = Column(Float, nullable=False)
    max = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    resolved = Column(Boolean, nullable=False, default=False)
