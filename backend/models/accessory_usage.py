import uuid

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class AccessoryUsage(Base, TimestampMixin):
    __tablename__ = "accessory_usage"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    accessory_id = Column(String(36), ForeignKey("accessories.id", ondelete="CASCADE"), index=True, nullable=False)
    usage_date = Column(Date, nullable=False)
    # Units taken from stock; 0 for a durable session record
    quantity = Column(Integer, default=0, nullable=False)
    duration = Column(Integer, nullable=True) # minutes, durable sessions only
    purpose = Column(Text, nullable=True)

    accessory = relationship("Accessory", back_populates="usage_records")
