import uuid

from sqlalchemy import CheckConstraint, Column, Date, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class UsageRecord(Base, TimestampMixin):
    __tablename__ = "usage_records"
    __table_args__ = (CheckConstraint('amount_used > 0', name='ck_usage_records_amount_positive'),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    consumable_id = Column(String(36), ForeignKey("consumables.id", ondelete="CASCADE"), index=True, nullable=False)
    amount_used = Column(Float, nullable=False) # grams
    usage_date = Column(Date, nullable=False)
    project_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    consumable = relationship("Consumable", back_populates="usage_records")
