from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from models.accessory import AccessoryStatus
from schemas.accessory import (
    Accessory, AccessoryAlert, AccessoryCreate, AccessoryDetail, AccessoryUpdate, AccessoryUsageCreate,
    MarkReplaced, StopUsing,
)
from schemas.stock_audit import StockAudit
from crud import accessory as crud_accessory
from crud import stock_audit as crud_stock_audit
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/accessories", tags=["Accessories"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=Accessory, status_code=status.HTTP_201_CREATED)
def create_accessory(
    accessory: AccessoryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_accessory.create_accessory(db=db, data=accessory, owner_id=owner_id, changed_by=get_user_identifier(user))

@router.get("/", response_model=List[Accessory])
def read_accessories(
    category_id: Optional[str] = None,
    status_filter: Optional[AccessoryStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    return crud_accessory.get_accessories(db=db, owner_id=owner_id, category_id=category_id, status=status_filter)

@router.get("/alerts", response_model=List[AccessoryAlert])
def read_alerts(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Replacement-due and low-stock alerts. Read only."""
    return crud_accessory.get_alerts(db=db, owner_id=owner_id)

@router.get("/{accessory_id}", response_model=AccessoryDetail)
def read_accessory(accessory_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    db_accessory = crud_accessory.get_accessory(db=db, accessory_id=accessory_id, owner_id=owner_id, with_usage=True)
    if db_accessory is None:
        raise HTTPException(status_code=404, detail="Accessory not found")
    return db_accessory

@router.patch("/{accessory_id}", response_model=Accessory)
def update_accessory(
    accessory_id: str,
    accessory: AccessoryUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """Update details. Changing quantity is a restock: remaining is replayed from the usage history."""
    return crud_accessory.update_accessory(
        db=db, accessory_id=accessory_id, data=accessory, owner_id=owner_id, changed_by=get_user_identifier(user)
    )

@router.delete("/{accessory_id}")
def delete_accessory(accessory_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    crud_accessory.delete_accessory(db=db, accessory_id=accessory_id, owner_id=owner_id)
    logger.info("Accessory %s deleted via API by owner %s", accessory_id, owner_id)
    return {"message": "Accessory deleted successfully"}

@router.post("/{accessory_id}/usage", response_model=AccessoryDetail)
def record_accessory_usage(
    accessory_id: str,
    usage: AccessoryUsageCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_accessory.record_usage(
        db=db, accessory_id=accessory_id, data=usage, owner_id=owner_id, changed_by=get_user_identifier(user)
    )

@router.post("/{accessory_id}/start-using", response_model=Accessory)
def start_using(
    accessory_id: str,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_accessory.start_using(db=db, accessory_id=accessory_id, owner_id=owner_id, changed_by=get_user_identifier(user))

@router.post("/{accessory_id}/stop-using", response_model=AccessoryDetail)
def stop_using(
    accessory_id: str,
    payload: Optional[StopUsing] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    notes = payload.notes if payload else None
    return crud_accessory.stop_using(
        db=db, accessory_id=accessory_id, owner_id=owner_id, notes=notes, changed_by=get_user_identifier(user)
    )

@router.post("/{accessory_id}/replaced", response_model=Accessory)
def mark_replaced(
    accessory_id: str,
    payload: Optional[MarkReplaced] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    replaced_at = payload.replaced_at if payload else None
    return crud_accessory.mark_replaced(
        db=db, accessory_id=accessory_id, owner_id=owner_id, replaced_at=replaced_at, changed_by=get_user_identifier(user)
    )

@router.get("/{accessory_id}/audit", response_model=List[StockAudit])
def get_accessory_audit(
    accessory_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    crud_accessory.require_accessory(db, accessory_id, owner_id)
    return crud_stock_audit.get_stock_audits(
        db, crud_accessory.RESOURCE_TYPE, accessory_id, owner_id, start_date=start_date, end_date=end_date
    )
