from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.consumable_type import ConsumableType, ConsumableTypeCreate, ConsumableTypeUpdate
from crud import consumable_type as crud_consumable_type
from utils.auth_utils import get_current_user, get_owner_id, get_user_identifier

router = APIRouter(prefix="/consumable-types", tags=["Consumable Types"])
logger = logging.getLogger(__name__)

@router.post("/", response_model=ConsumableType, status_code=status.HTTP_201_CREATED)
def create_consumable_type(
    consumable_type: ConsumableTypeCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    db_type = crud_consumable_type.create_consumable_type(
        db=db, consumable_type=consumable_type, owner_id=owner_id, changed_by=get_user_identifier(user)
    )
    logger.info("Consumable type '%s' created by owner %s", db_type.name, owner_id)
    return db_type

@router.get("/", response_model=List[ConsumableType])
def read_consumable_types(db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    return crud_consumable_type.get_consumable_types(db=db, owner_id=owner_id)

@router.get("/{type_id}", response_model=ConsumableType)
def read_consumable_type(type_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    db_type = crud_consumable_type.get_consumable_type(db=db, type_id=type_id, owner_id=owner_id)
    if db_type is None:
        raise HTTPException(status_code=404, detail="Consumable type not found")
    return db_type

@router.patch("/{type_id}", response_model=ConsumableType)
def update_consumable_type(
    type_id: str,
    consumable_type: ConsumableTypeUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    owner_id: str = Depends(get_owner_id)
):
    return crud_consumable_type.update_consumable_type(
        db=db, type_id=type_id, consumable_type=consumable_type, owner_id=owner_id, changed_by=get_user_identifier(user)
    )

@router.delete("/{type_id}")
def delete_consumable_type(type_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_owner_id)):
    crud_consumable_type.delete_consumable_type(db=db, type_id=type_id, owner_id=owner_id)
    logger.info("Consumable type %s deleted by owner %s", type_id, owner_id)
    return {"message": "Consumable type deleted successfully"}
