from sqlalchemy import Column, DateTime, Float, Integer, String
from datetime import datetime
from database import Base
import pytz


class StockAudit(Base):
    __tablename__ = "stock_audit"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, index=True, nullable=False)
    resource_type = Column(String, nullable=False) # "consumable" or "accessory"
    resource_id = Column(String(36), index=True, nullable=False)
    change_type = Column(String, nullable=False) # "usage", "usage_update", "usage_revert", "restock" etc.
    change_amount = Column(Float, nullable=False) # Positive or negative
    old_quantity = Column(Float, nullable=False)
    new_quantity = Column(Float, nullable=False)
    changed_by = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(pytz.utc))
    note = Column(String, nullable=True)
