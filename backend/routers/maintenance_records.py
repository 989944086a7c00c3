from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from schemas.maintenance_record import MaintenanceRecord, MaintenanceRecordCreate, MaintenanceRecordUpdate
from crud import maintenance_record as crud_maintenance
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=MaintenanceRecord, status_code=status.HTTP_201_CREATED)
def create_maintenance_record(
    record: MaintenanceRecordCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    db_record = crud_maintenance.create_maintenance_record(
        db=db, record=record, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
    logger.info("Maintenance record %s (%s) created by owner %s", db_record.id, db_record.maintenance_type.value, owner_id)
    return db_record

@router.get("/", response_model=List[MaintenanceRecord])
def read_maintenance_records(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    return crud_maintenance.get_maintenance_records(db=db, owner_id=owner_id, start_date=start_date, end_date=end_date)

@router.get("/{record_id}", response_model=MaintenanceRecord)
def read_maintenance_record(record_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return crud_maintenance.require_maintenance_record(db=db, record_id=record_id, owner_id=owner_id)

@router.patch("/{record_id}", response_model=MaintenanceRecord)
def update_maintenance_record(
    record_id: str,
    record: MaintenanceRecordUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_maintenance.update_maintenance_record(
        db=db, record_id=record_id, record=record, owner_id=owner_id, changed_by=get_user_identifier(user)
    )

@router.delete("/{record_id}")
def delete_maintenance_record(record_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    crud_maintenance.delete_maintenance_record(db=db, record_id=record_id, owner_id=owner_id)
    logger.info("Maintenance record %s deleted by owner %s", record_id, owner_id)
    return {"message": "Record deleted successfully"}
