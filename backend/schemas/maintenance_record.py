from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

from models.maintenance_record import MaintenanceType


class MaintenanceRecordBase(BaseModel):
    maintenance_date: date
    maintenance_type: MaintenanceType
    description: Optional[str] = None

class MaintenanceRecordCreate(MaintenanceRecordBase):
    pass

class MaintenanceRecordUpdate(BaseModel):
    maintenance_date: Optional[date] = None
    maintenance_type: Optional[MaintenanceType] = None
    description: Optional[str] = None

class MaintenanceRecord(MaintenanceRecordBase):
    id: str
    owner_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
