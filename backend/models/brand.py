import uuid

from sqlalchemy import Column, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class Brand(Base, TimestampMixin):
    __tablename__ = "brands"
    __table_args__ = (UniqueConstraint('owner_id', 'name', name='_brands_owner_name_uc'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    website = Column(String, nullable=True)

    consumables = relationship("Consumable", back_populates="brand")
    colors = relationship("BrandColor", back_populates="brand", cascade="all, delete-orphan", order_by="BrandColor.color_name")
