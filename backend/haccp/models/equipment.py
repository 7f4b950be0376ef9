from sqlalchemy import Column, Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..db.session import Base

class EquipmentType(Base):
    """A refrigerator type or a cooking method, owning its checkpoints."""
    __tablename__ = "equipment_types"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    kind = Column(String, nullable=False)  # refrigerator | menu
    checkpoints = relationship("Checkpoint", back_populates="type", cascade="all, delete-orphan", order_by="Checkpoint.id")

class Checkpoint(Base):
    __tablename__ = "checkpoints"
    __table_args__ = (UniqueConstraint("type_id", "name", name="uq_checkpoint_type_name"),)
    id = Column(Integer, primary_key=True, index=True)
    type_id = Column(String, ForeignKey("equipment_types.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String, nullable=False)
    min_temp = Column(Float, nullable=False)
    max_temp = Column(Float, nullable=False)
    type = relationship("EquipmentType", back_populates="checkpoints")
