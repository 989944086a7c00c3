from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.brand_color import BrandColor, BrandColorCreate, BrandColorImport, BrandColorImportResult, BrandColorUpdate
from crud import brand_color as crud_brand_color
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/brands/{brand_id}/colors", tags=["Brand Colors"])
logger = logging.getLogger(__name__)

@router.get("/", response_model=List[BrandColor])
def read_brand_colors(brand_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Color palette of a brand, sorted by name."""
    return crud_brand_color.get_brand_colors(db=db, brand_id=brand_id, owner_id=owner_id)

@router.post("/", response_model=BrandColor, status_code=status.HTTP_201_CREATED)
def create_brand_color(
    brand_id: str,
    color: BrandColorCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    db_color = crud_brand_color.create_brand_color(
        db=db, brand_id=brand_id, color=color, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
    logger.info("Color '%s' added to brand %s by owner %s", db_color.color_name, brand_id, owner_id)
    return db_color

@router.post("/import", response_model=BrandColorImportResult)
def import_brand_colors(
    brand_id: str,
    payload: BrandColorImport,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    created = crud_brand_color.import_brand_colors(
        db=db, brand_id=brand_id, colors=payload.colors, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
    return {"created": created}

@router.patch("/{color_id}", response_model=BrandColor)
def update_brand_color(
    brand_id: str,
    color_id: str,
    color: BrandColorUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_brand_color.update_brand_color(
        db=db, brand_id=brand_id, color_id=color_id, color=color, owner_id=owner_id, changed_by=get_user_identifier(user)
    )

@router.delete("/{color_id}")
def delete_brand_color(brand_id: str, color_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    crud_brand_color.delete_brand_color(db=db, brand_id=brand_id, color_id=color_id, owner_id=owner_id)
    logger.info("Color %s of brand %s deleted by owner %s", color_id, brand_id, owner_id)
    return {"message": "Color deleted successfully"}
