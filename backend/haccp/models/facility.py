from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from ..db.session import Base

class Facility(Base):
    __tablename__ = "facilities"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    supervisor_id = Column(String, nullable=True)
    # Menu readings are checked against the facility's cooking method
    cooking_method_id = Column(String, ForeignKey("equipment_types.id", ondelete="SET NULL"), nullable=True)
    cooking_method = relationship("EquipmentType")

class Refrigerator(Base):
    __tablename__ = "refrigerators"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    facility_id = Column(String, ForeignKey("facilities.id", ondelete="CASCADE"), index=True, nullable=False)
    type_id = Column(String, ForeignKey("equipment_types.id", ondelete="SET NULL"), nullable=True)
    type = relationship("EquipmentType")
