import logging
from sqlalchemy.orm import Session
from models.brand import Brand
from models.consumable import Consumable
from schemas.brand import BrandCreate, BrandUpdate
from exceptions import Conflict, NotFound, ValidationFailed
from crud.transaction import atomic

logger = logging.getLogger(__name__)


def get_brand(db: Session, brand_id: str, owner_id: str):
    return db.query(Brand).filter(Brand.id == brand_id, Brand.owner_id == owner_id).first()

def get_brands(db: Session, owner_id: str):
    return db.query(Brand).filter(Brand.owner_id == owner_id).order_by(Brand.name.asc()).all()

def require_brand(db: Session, brand_id: str, owner_id: str) -> Brand:
    """Resolve a brand reference for this owner or raise NotFound."""
    brand = get_brand(db, brand_id, owner_id)
    if brand is None:
        raise NotFound("Brand not found")
    return brand

def _check_name(db: Session, name: str, owner_id: str, exclude_id: str = None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Brand name is required")
    query = db.query(Brand).filter(Brand.owner_id == owner_id, Brand.name == name)
    if exclude_id:
        query = query.filter(Brand.id != exclude_id)
    if query.first():
        raise Conflict("Brand with this name already exists")
    return name

def create_brand(db: Session, brand: BrandCreate, owner_id: str, changed_by: str = None):
    name = _check_name(db, brand.name, owner_id)
    db_brand = Brand(**brand.model_dump(exclude={"name"}), name=name, owner_id=owner_id, created_by=changed_by, updated_by=changed_by)
    with atomic(db, "create brand"):
        db.add(db_brand)
    db.refresh(db_brand)
    return db_brand

def update_brand(db: Session, brand_id: str, brand: BrandUpdate, owner_id: str, changed_by: str = None):
    db_brand = require_brand(db, brand_id, owner_id)
    update_data = brand.model_dump(exclude_unset=True)
    if "name" in update_data:
        update_data["name"] = _check_name(db, update_data["name"], owner_id, exclude_id=brand_id)
    with atomic(db, "update brand"):
        for key, value in update_data.items():
            setattr(db_brand, key, value)
        db_brand.updated_by = changed_by
    db.refresh(db_brand)
    return db_brand

def delete_brand(db: Session, brand_id: str, owner_id: str):
    db_brand = require_brand(db, brand_id, owner_id)
    in_use = db.query(Consumable.id).filter(Consumable.brand_id == brand_id, Consumable.owner_id == owner_id).first()
    if in_use:
        raise Conflict("Brand has consumables and cannot be deleted")
    with atomic(db, "delete brand"):
        db.delete(db_brand)
    return db_brand
