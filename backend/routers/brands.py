from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.brand import Brand, BrandCreate, BrandUpdate
from crud import brand as crud_brand
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/brands", tags=["Brands"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=Brand, status_code=status.HTTP_201_CREATED)
def create_brand(
    brand: BrandCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    """Create a new brand."""
    db_brand = crud_brand.create_brand(db=db, brand=brand, owner_id=owner_id, changed_by=get_user_identifier(user))
    logger.info("Brand '%s' created by owner %s", db_brand.name, owner_id)
    return db_brand

@router.get("/", response_model=List[Brand])
def read_brands(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return crud_brand.get_brands(db=db, owner_id=owner_id)

@router.get("/{brand_id}", response_model=Brand)
def read_brand(brand_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    db_brand = crud_brand.get_brand(db=db, brand_id=brand_id, owner_id=owner_id)
    if db_brand is None:
        raise HTTPException(status_code=404, detail="Brand not found")
    return db_brand

@router.patch("/{brand_id}", response_model=Brand)
def update_brand(
    brand_id: str,
    brand: BrandUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_brand.update_brand(db=db, brand_id=brand_id, brand=brand, owner_id=owner_id, changed_by=get_user_identifier(user))

@router.delete("/{brand_id}")
def delete_brand(brand_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Delete a brand. Refused while consumables still reference it."""
    crud_brand.delete_brand(db=db, brand_id=brand_id, owner_id=owner_id)
    logger.info("Brand %s deleted by owner %s", brand_id, owner_id)
    return {"message": "Brand deleted successfully"}
