from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.dashboard import InventoryOverview, InventoryStats, PriceStats, RemainingTotal
from crud import dashboard as crud_dashboard
from utils.auth_utils import get_owner_id

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("/inventory", response_model=InventoryOverview)
def get_inventory_overview(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return crud_dashboard.get_inventory_overview(db=db, owner_id=owner_id)

@router.get("/stats", response_model=InventoryStats)
def get_inventory_stats(
    low_stock_ratio: float = Query(crud_dashboard.DEFAULT_LOW_STOCK_RATIO),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_owner_id)
):
    """Totals plus spools at or below `low_stock_ratio` of their weight."""
    return crud_dashboard.get_inventory_stats(db=db, owner_id=owner_id, low_stock_ratio=low_stock_ratio)

@router.get("/prices", response_model=PriceStats)
def get_price_stats(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return crud_dashboard.get_price_stats(db=db, owner_id=owner_id)

@router.get("/remaining/brand/{brand_id}", response_model=RemainingTotal)
def get_remaining_by_brand(brand_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    total = crud_dashboard.get_total_remaining_by_brand(db=db, owner_id=owner_id, brand_id=brand_id)
    return {"group": "brand", "key": brand_id, "total_remaining_weight": total}

@router.get("/remaining/type/{type_id}", response_model=RemainingTotal)
def get_remaining_by_type(type_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    total = crud_dashboard.get_total_remaining_by_type(db=db, owner_id=owner_id, type_id=type_id)
    return {"group": "type", "key": type_id, "total_remaining_weight": total}

@router.get("/remaining/color/{color}", response_model=RemainingTotal)
def get_remaining_by_color(color: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Color names match case-insensitively."""
    total = crud_dashboard.get_total_remaining_by_color(db=db, owner_id=owner_id, color=color)
    return {"group": "color", "key": color, "total_remaining_weight": total}
