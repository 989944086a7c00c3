from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AccessoryCategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

class AccessoryCategorySummary(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True

class AccessoryCategory(AccessoryCategoryCreate):
    id: str
    owner_id: Optional[str] = None # None for preset categories
    is_preset: bool
    created_at: datetime

    class Config:
        from_attributes = True
