from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from models.consumable import ConsumableStatus
from schemas.consumable import (
    Consumable, ConsumableBatchCreate, ConsumableBatchResult, ConsumableCreate, ConsumableUpdate, MarkOpened,
)
from schemas.stock_audit import StockAudit
from crud import consumable as crud_consumable
from crud import stock_audit as crud_stock_audit
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/consumables", tags=["Consumables"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=Consumable, status_code=status.HTTP_201_CREATED)
def create_consumable(
    consumable: ConsumableCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """Create one spool; remaining weight starts at the full weight."""
    return crud_consumable.create_consumable(db=db, data=consumable, owner_id=owner_id, changed_by=get_user_identifier(user))

@router.post("/batch", response_model=ConsumableBatchResult, status_code=status.HTTP_201_CREATED)
def batch_create_consumables(
    batch: ConsumableBatchCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """Create `quantity` identical spools, all or nothing."""
    consumables = crud_consumable.batch_create_consumables(db=db, data=batch, owner_id=owner_id, changed_by=get_user_identifier(user))
    return {"consumables": consumables, "count": len(consumables)}

@router.get("/", response_model=List[Consumable])
def read_consumables(
    brand_id: Optional[str] = None,
    type_id: Optional[str] = None,
    color: Optional[str] = None,
    color_hex: Optional[str] = None,
    is_opened: Optional[bool] = None,
    status_filter: Optional[ConsumableStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    return crud_consumable.get_consumables(
        db=db,
        owner_id=owner_id,
        brand_id=brand_id,
        type_id=type_id,
        color=color,
        color_hex=color_hex,
        is_opened=is_opened,
        status=status_filter
    )

@router.get("/{consumable_id}", response_model=Consumable)
def read_consumable(consumable_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    db_consumable = crud_consumable.get_consumable(db=db, consumable_id=consumable_id, owner_id=owner_id)
    if db_consumable is None:
        raise HTTPException(status_code=404, detail="Consumable not found")
    return db_consumable

@router.patch("/{consumable_id}", response_model=Consumable)
def update_consumable(
    consumable_id: str,
    consumable: ConsumableUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """Update spool details. A new weight replays the usage ledger against it."""
    return crud_consumable.update_consumable(
        db=db, consumable_id=consumable_id, data=consumable, owner_id=owner_id, changed_by=get_user_identifier(user)
    )

@router.patch("/{consumable_id}/open", response_model=Consumable)
def mark_consumable_opened(
    consumable_id: str,
    payload: Optional[MarkOpened] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    opened_at = payload.opened_at if payload else None
    return crud_consumable.mark_as_opened(
        db=db, consumable_id=consumable_id, owner_id=owner_id, opened_at=opened_at, changed_by=get_user_identifier(user)
    )

@router.delete("/{consumable_id}")
def delete_consumable(consumable_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Delete a spool together with its usage records."""
    crud_consumable.delete_consumable(db=db, consumable_id=consumable_id, owner_id=owner_id)
    logger.info("Consumable %s deleted via API by owner %s", consumable_id, owner_id)
    return {"message": "Consumable deleted successfully"}

@router.get("/{consumable_id}/audit", response_model=List[StockAudit])
def get_consumable_audit(
    consumable_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    crud_consumable.require_consumable(db, consumable_id, owner_id)
    return crud_stock_audit.get_stock_audits(
        db, crud_consumable.RESOURCE_TYPE, consumable_id, owner_id, start_date=start_date, end_date=end_date
    )
