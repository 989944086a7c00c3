import logging
from typing import List, Optional
from datetime import date
from sqlalchemy.orm import Session
from models.maintenance_record import MaintenanceRecord
from schemas.maintenance_record import MaintenanceRecordCreate, MaintenanceRecordUpdate
from exceptions import NotFound, ValidationFailed
from crud.transaction import atomic

logger = logging.getLogger(__name__)


def get_maintenance_record(db: Session, record_id: str, owner_id: str):
    return db.query(MaintenanceRecord).filter(
        MaintenanceRecord.id == record_id,
        MaintenanceRecord.owner_id == owner_id
    ).first()

def require_maintenance_record(db: Session, record_id: str, owner_id: str) -> MaintenanceRecord:
    record = get_maintenance_record(db, record_id, owner_id)
    if record is None:
        raise NotFound("Record not found")
    return record

def get_maintenance_records(
    db: Session,
    owner_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[MaintenanceRecord]:
    """Maintenance history of an owner, most recent job first."""
    query = db.query(MaintenanceRecord).filter(MaintenanceRecord.owner_id == owner_id)
    if start_date:
        query = query.filter(MaintenanceRecord.maintenance_date >= start_date)
    if end_date:
        query = query.filter(MaintenanceRecord.maintenance_date <= end_date)
    return query.order_by(MaintenanceRecord.maintenance_date.desc(), MaintenanceRecord.created_at.desc()).all()

def create_maintenance_record(db: Session, record: MaintenanceRecordCreate, owner_id: str, changed_by: str = None):
    data = record.model_dump()
    if data.get("description") is not None:
        data["description"] = data["description"].strip() or None
    db_record = MaintenanceRecord(**data, owner_id=owner_id, created_by=changed_by, updated_by=changed_by)
    with atomic(db, "create maintenance record"):
        db.add(db_record)
    db.refresh(db_record)
    return db_record

def update_maintenance_record(db: Session, record_id: str, record: MaintenanceRecordUpdate, owner_id: str, changed_by: str = None):
    db_record = require_maintenance_record(db, record_id, owner_id)
    update_data = record.model_dump(exclude_unset=True)
    for field in ("maintenance_date", "maintenance_type"):
        if field in update_data and update_data[field] is None:
            raise ValidationFailed(f"{field} cannot be empty")
    if update_data.get("description") is not None:
        update_data["description"] = update_data["description"].strip() or None

    with atomic(db, "update maintenance record"):
        for key, value in update_data.items():
            setattr(db_record, key, value)
        db_record.updated_by = changed_by
    db.refresh(db_record)
    return db_record

def delete_maintenance_record(db: Session, record_id: str, owner_id: str):
    db_record = require_maintenance_record(db, record_id, owner_id)
    with atomic(db, "delete maintenance record"):
        db.delete(db_record)
    return db_record
