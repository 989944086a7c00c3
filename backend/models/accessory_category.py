import uuid

from sqlalchemy import Boolean, Column, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class AccessoryCategory(Base, TimestampMixin):
    __tablename__ = "accessory_categories"
    __table_args__ = (UniqueConstraint('owner_id', 'name', name='_accessory_categories_owner_name_uc'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # NULL owner for preset categories shared by everyone
    owner_id = Column(String, index=True, nullable=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_preset = Column(Boolean, default=False, nullable=False)

    accessories = relationship("Accessory", back_populates="category")
