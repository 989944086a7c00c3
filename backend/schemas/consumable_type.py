from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ConsumableTypeBase(BaseModel):
    name: str # e.g., "PLA", "PETG"
    description: Optional[str] = None
    print_temp_min: Optional[int] = None
    print_temp_max: Optional[int] = None
    bed_temp_min: Optional[int] = None
    bed_temp_max: Optional[int] = None

class ConsumableTypeCreate(ConsumableTypeBase):
    pass

class ConsumableTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    print_temp_min: Optional[int] = None
    print_temp_max: Optional[int] = None
    bed_temp_min: Optional[int] = None
    bed_temp_max: Optional[int] = None

class ConsumableTypeSummary(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True

class ConsumableType(ConsumableTypeBase):
    id: str
    owner_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
