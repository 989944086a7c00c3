import uuid

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin

DEFAULT_COLOR_HEX = "#CCCCCC"


class BrandColor(Base, TimestampMixin):
    __tablename__ = "brand_colors"
    __table_args__ = (UniqueConstraint('brand_id', 'color_name', name='_brand_colors_brand_name_uc'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    brand_id = Column(String(36), ForeignKey("brands.id", ondelete="CASCADE"), index=True, nullable=False)
    color_name = Column(String, nullable=False) # e.g., "Jade White"
    color_hex = Column(String(7), default=DEFAULT_COLOR_HEX, nullable=False)

    brand = relationship("Brand", back_populates="colors")
