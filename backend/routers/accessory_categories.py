from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.accessory_category import AccessoryCategory, AccessoryCategoryCreate
from crud import accessory_category as crud_category
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/accessory-categories", tags=["Accessory Categories"])
logger = logging.getLogger(__name__)

@router.get("/", response_model=List[AccessoryCategory])
def read_categories(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    """Preset categories followed by the caller's own."""
    return crud_category.get_categories(db=db, owner_id=owner_id)

@router.post("/", response_model=AccessoryCategory, status_code=status.HTTP_201_CREATED)
def create_category(
    category: AccessoryCategoryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    db_category = crud_category.create_category(db=db, category=category, owner_id=owner_id, changed_by=get_user_identifier(user))
    logger.info("Accessory category '%s' created by owner %s", db_category.name, owner_id)
    return db_category

@router.delete("/{category_id}")
def delete_category(category_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    crud_category.delete_category(db=db, category_id=category_id, owner_id=owner_id)
    logger.info("Accessory category %s deleted by owner %s", category_id, owner_id)
    return {"message": "Category deleted successfully"}
