from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from schemas.consumable import Consumable


class UsageRecordBase(BaseModel):
    consumable_id: str
    amount_used: float # grams
    usage_date: date
    project_name: Optional[str] = None
    notes: Optional[str] = None

class UsageRecordCreate(UsageRecordBase):
    pass

class UsageRecordUpdate(BaseModel):
    amount_used: Optional[float] = None
    usage_date: Optional[date] = None
    project_name: Optional[str] = None
    notes: Optional[str] = None

class UsageRecord(UsageRecordBase):
    id: str
    owner_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UsageRecordResult(BaseModel):
    """A ledger mutation together with the re-derived consumable."""
    record: UsageRecord
    consumable: Consumable
    warning: Optional[str] = None
