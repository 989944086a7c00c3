import uuid

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class ConsumableType(Base, TimestampMixin):
    __tablename__ = "consumable_types"
    __table_args__ = (UniqueConstraint('owner_id', 'name', name='_consumable_types_owner_name_uc'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False) # e.g., "PLA", "PETG", "TPU"
    description = Column(Text, nullable=True)
    print_temp_min = Column(Integer, nullable=True)
    print_temp_max = Column(Integer, nullable=True)
    bed_temp_min = Column(Integer, nullable=True)
    bed_temp_max = Column(Integer, nullable=True)

    consumables = relationship("Consumable", back_populates="type")
