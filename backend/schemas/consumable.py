from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime
from models.consumable import ConsumableStatus
from schemas.brand import BrandSummary
from schemas.consumable_type import ConsumableTypeSummary


class ConsumableBase(BaseModel):
    brand_id: str
    type_id: str
    color: str
    color_hex: Optional[str] = None # one or more comma-joined hex colors
    weight: float # grams
    price: float
    purchase_date: date
    notes: Optional[str] = None

class ConsumableCreate(ConsumableBase):
    is_opened: bool = False
    opened_at: Optional[date] = None

class ConsumableBatchCreate(ConsumableCreate):
    quantity: int

class ConsumableUpdate(BaseModel):
    brand_id: Optional[str] = None
    type_id: Optional[str] = None
    color: Optional[str] = None
    color_hex: Optional[str] = None
    weight: Optional[float] = None
    price: Optional[float] = None
    purchase_date: Optional[date] = None
    notes: Optional[str] = None
    # remaining_weight, status and the opened flag are system-managed

class MarkOpened(BaseModel):
    opened_at: Optional[date] = None

class Consumable(ConsumableBase):
    id: str
    owner_id: str
    remaining_weight: float
    is_opened: bool
    opened_at: Optional[date] = None
    opened_days: Optional[int] = None
    status: ConsumableStatus
    depleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    brand: Optional[BrandSummary] = None
    type: Optional[ConsumableTypeSummary] = None

    class Config:
        from_attributes = True

class ConsumableBatchResult(BaseModel):
    consumables: List[Consumable]
    count: int
