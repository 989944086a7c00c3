from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class BrandColorBase(BaseModel):
    color_name: str
    color_hex: Optional[str] = None # "#RRGGBB", defaults to grey

class BrandColorCreate(BrandColorBase):
    pass

class BrandColorUpdate(BaseModel):
    color_name: Optional[str] = None
    color_hex: Optional[str] = None

class BrandColorImport(BaseModel):
    colors: List[BrandColorCreate]

class BrandColorImportResult(BaseModel):
    created: int

class BrandColor(BaseModel):
    id: str
    owner_id: str
    brand_id: str
    color_name: str
    color_hex: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
