import enum
import uuid

from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class AccessoryStatus(enum.Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    LOW_STOCK = "low_stock"
    DEPLETED = "depleted"


class AccessoryUsageType(enum.Enum):
    CONSUMABLE = "consumable" # nozzles, PTFE tube... counted down per use
    DURABLE = "durable"       # tools checked out and back in


class Accessory(Base, TimestampMixin):
    __tablename__ = "accessories"
    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_accessories_quantity_positive'),
        CheckConstraint('remaining_qty >= 0 AND remaining_qty <= quantity', name='ck_accessories_remaining_bounds'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    category_id = Column(String(36), ForeignKey("accessory_categories.id", ondelete="RESTRICT"), nullable=False)
    name = Column(String, nullable=False)
    brand = Column(String, nullable=True)
    model = Column(String, nullable=True)
    price = Column(Float, nullable=True)
    purchase_date = Column(Date, nullable=True)
    quantity = Column(Integer, default=1, nullable=False) # capacity
    remaining_qty = Column(Integer, default=1, nullable=False)
    replacement_cycle = Column(Integer, nullable=True) # days
    last_replaced_at = Column(DateTime(timezone=True), nullable=True)
    low_stock_threshold = Column(Integer, nullable=True)
    usage_type = Column(Enum(AccessoryUsageType), default=AccessoryUsageType.CONSUMABLE, nullable=False)
    status = Column(Enum(AccessoryStatus), default=AccessoryStatus.AVAILABLE, nullable=False)
    in_use_started_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    category = relationship("AccessoryCategory", back_populates="accessories")
    usage_records = relationship(
        "AccessoryUsage",
        back_populates="accessory",
        cascade="all, delete-orphan",
        order_by="[AccessoryUsage.usage_date.desc(), AccessoryUsage.created_at.desc()]",
    )
