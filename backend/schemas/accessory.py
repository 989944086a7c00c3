from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime
from models.accessory import AccessoryStatus, AccessoryUsageType
from schemas.accessory_category import AccessoryCategorySummary


class AccessoryBase(BaseModel):
    category_id: str
    name: str
    brand: Optional[str] = None
    model: Optional[str] = None
    price: Optional[float] = None
    purchase_date: Optional[date] = None
    replacement_cycle: Optional[int] = None # days
    low_stock_threshold: Optional[int] = None
    notes: Optional[str] = None

class AccessoryCreate(AccessoryBase):
    quantity: int = 1
    usage_type: AccessoryUsageType = AccessoryUsageType.CONSUMABLE

class AccessoryUpdate(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    price: Optional[float] = None
    purchase_date: Optional[date] = None
    quantity: Optional[int] = None
    replacement_cycle: Optional[int] = None
    last_replaced_at: Optional[datetime] = None
    low_stock_threshold: Optional[int] = None
    notes: Optional[str] = None
    # usage_type, status, remaining_qty and the session are system-managed

class AccessoryUsageCreate(BaseModel):
    usage_date: date
    quantity: int
    purpose: Optional[str] = None

class StopUsing(BaseModel):
    notes: Optional[str] = None

class MarkReplaced(BaseModel):
    replaced_at: Optional[datetime] = None

class AccessoryUsage(BaseModel):
    id: str
    accessory_id: str
    usage_date: date
    quantity: int
    duration: Optional[int] = None # minutes
    purpose: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class Accessory(AccessoryBase):
    id: str
    owner_id: str
    quantity: int
    remaining_qty: int
    usage_type: AccessoryUsageType
    status: AccessoryStatus
    last_replaced_at: Optional[datetime] = None
    in_use_started_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    category: Optional[AccessoryCategorySummary] = None

    class Config:
        from_attributes = True

class AccessoryDetail(Accessory):
    usage_records: List[AccessoryUsage] = []

class AccessoryAlert(BaseModel):
    id: str
    accessory_id: str
    accessory_name: str
    category_name: str
    alert_type: str # "replacement_due" or "low_stock"
    message: str
