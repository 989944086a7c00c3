from sqlalchemy.orm import Session
from models.consumable_type import ConsumableType
from models.consumable import Consumable
from schemas.consumable_type import ConsumableTypeCreate, ConsumableTypeUpdate
from exceptions import Conflict, NotFound, ValidationFailed
from crud.transaction import atomic


def get_consumable_type(db: Session, type_id: str, owner_id: str):
    return db.query(ConsumableType).filter(ConsumableType.id == type_id, ConsumableType.owner_id == owner_id).first()

def get_consumable_types(db: Session, owner_id: str):
    return db.query(ConsumableType).filter(ConsumableType.owner_id == owner_id).order_by(ConsumableType.name.asc()).all()

def require_consumable_type(db: Session, type_id: str, owner_id: str) -> ConsumableType:
    consumable_type = get_consumable_type(db, type_id, owner_id)
    if consumable_type is None:
        raise NotFound("Consumable type not found")
    return consumable_type

def _validate(db: Session, data: dict, owner_id: str, exclude_id: str = None) -> dict:
    if "name" in data:
        name = (data["name"] or "").strip()
        if not name:
            raise ValidationFailed("Type name is required")
        query = db.query(ConsumableType).filter(ConsumableType.owner_id == owner_id, ConsumableType.name == name)
        if exclude_id:
            query = query.filter(ConsumableType.id != exclude_id)
        if query.first():
            raise Conflict("Consumable type with this name already exists")
        data["name"] = name
    for low, high in (("print_temp_min", "print_temp_max"), ("bed_temp_min", "bed_temp_max")):
        if data.get(low) is not None and data.get(high) is not None and data[low] > data[high]:
            raise ValidationFailed(f"{low} cannot be greater than {high}")
    return data

def create_consumable_type(db: Session, consumable_type: ConsumableTypeCreate, owner_id: str, changed_by: str = None):
    data = _validate(db, consumable_type.model_dump(), owner_id)
    db_type = ConsumableType(**data, owner_id=owner_id, created_by=changed_by, updated_by=changed_by)
    with atomic(db, "create consumable type"):
        db.add(db_type)
    db.refresh(db_type)
    return db_type

def update_consumable_type(db: Session, type_id: str, consumable_type: ConsumableTypeUpdate, owner_id: str, changed_by: str = None):
    db_type = require_consumable_type(db, type_id, owner_id)
    data = _validate(db, consumable_type.model_dump(exclude_unset=True), owner_id, exclude_id=type_id)
    with atomic(db, "update consumable type"):
        for key, value in data.items():
            setattr(db_type, key, value)
        db_type.updated_by = changed_by
    db.refresh(db_type)
    return db_type

def delete_consumable_type(db: Session, type_id: str, owner_id: str):
    db_type = require_consumable_type(db, type_id, owner_id)
    in_use = db.query(Consumable.id).filter(Consumable.type_id == type_id, Consumable.owner_id == owner_id).first()
    if in_use:
        raise Conflict("Consumable type has consumables and cannot be deleted")
    with atomic(db, "delete consumable type"):
        db.delete(db_type)
    return db_type
