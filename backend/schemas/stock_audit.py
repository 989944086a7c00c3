from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class StockAudit(BaseModel):
    id: int
    resource_type: str
    resource_id: str
    change_type: str
    change_amount: float
    old_quantity: float
    new_quantity: float
    changed_by: Optional[str] = None
    note: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True
