import enum
import uuid

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Enum, Float, ForeignKey, String, Text,
)
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin
from utils.time_utils import days_since


class ConsumableStatus(enum.Enum):
    UNOPENED = "unopened"
    OPENED = "opened"
    DEPLETED = "depleted"


class Consumable(Base, TimestampMixin):
    __tablename__ = "consumables"
    __table_args__ = (
        CheckConstraint('weight > 0', name='ck_consumables_weight_positive'),
        CheckConstraint('remaining_weight >= 0 AND remaining_weight <= weight', name='ck_consumables_remaining_bounds'),
        CheckConstraint(
            '(is_opened AND opened_at IS NOT NULL) OR (NOT is_opened AND opened_at IS NULL)',
            name='ck_consumables_opened_at',
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, index=True, nullable=False)
    brand_id = Column(String(36), ForeignKey("brands.id", ondelete="RESTRICT"), nullable=False)
    type_id = Column(String(36), ForeignKey("consumable_types.id", ondelete="RESTRICT"), nullable=False)
    color = Column(String, nullable=False)
    color_hex = Column(String, nullable=True) # "#FF0000" or "#FF0000,#00FF00" for multi-color
    weight = Column(Float, nullable=False) # capacity in grams
    remaining_weight = Column(Float, nullable=False) # derived by replaying usage_records
    price = Column(Float, nullable=False)
    purchase_date = Column(Date, nullable=False)
    is_opened = Column(Boolean, default=False, nullable=False)
    opened_at = Column(Date, nullable=True)
    status = Column(Enum(ConsumableStatus), default=ConsumableStatus.UNOPENED, nullable=False)
    depleted_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    brand = relationship("Brand", back_populates="consumables")
    type = relationship("ConsumableType", back_populates="consumables")
    usage_records = relationship(
        "UsageRecord",
        back_populates="consumable",
        cascade="all, delete-orphan",
    )

    @property
    def opened_days(self):
        """Whole days since the spool was opened, None while sealed."""
        if not self.is_opened:
            return None
        return days_since(self.opened_at)
