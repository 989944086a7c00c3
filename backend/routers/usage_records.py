from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from schemas.consumable import Consumable
from schemas.usage_record import UsageRecord, UsageRecordCreate, UsageRecordResult, UsageRecordUpdate
from crud import usage_record as crud_usage_record
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/usage-records", tags=["Usage Records"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=UsageRecordResult, status_code=status.HTTP_201_CREATED)
def create_usage_record(
    usage: UsageRecordCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """
    Record filament usage against a spool.

    Using more than is left is allowed; the spool bottoms out at zero and the
    response carries a warning.
    """
    record, consumable, warning = crud_usage_record.create_usage_record(
        db=db, data=usage, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
    if warning:
        logger.warning("Usage record %s left consumable %s overdrawn", record.id, consumable.id)
    return {"record": record, "consumable": consumable, "warning": warning}

@router.get("/", response_model=List[UsageRecord])
def read_usage_records(
    consumable_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    return crud_usage_record.get_usage_records(
        db=db, owner_id=owner_id, consumable_id=consumable_id, start_date=start_date, end_date=end_date
    )

@router.get("/total/{consumable_id}")
def get_total_usage(consumable_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    total = crud_usage_record.get_total_usage(db=db, consumable_id=consumable_id, owner_id=owner_id)
    return {"consumable_id": consumable_id, "total_usage": total}

@router.get("/{record_id}", response_model=UsageRecord)
def read_usage_record(record_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    record = crud_usage_record.get_usage_record(db=db, record_id=record_id, owner_id=owner_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Usage record not found")
    return record

@router.patch("/{record_id}", response_model=UsageRecordResult)
def update_usage_record(
    record_id: str,
    usage: UsageRecordUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    record, consumable, warning = crud_usage_record.update_usage_record(
        db=db, record_id=record_id, data=usage, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
    if warning:
        logger.warning("Usage record %s left consumable %s overdrawn", record.id, consumable.id)
    return {"record": record, "consumable": consumable, "warning": warning}

@router.delete("/{record_id}", response_model=Consumable)
def delete_usage_record(
    record_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """Delete a usage record and return the spool with its weight given back."""
    return crud_usage_record.delete_usage_record(
        db=db, record_id=record_id, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
