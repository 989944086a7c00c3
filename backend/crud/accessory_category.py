from sqlalchemy import or_
from sqlalchemy.orm import Session
from models.accessory_category import AccessoryCategory
from models.accessory import Accessory
from schemas.accessory_category import AccessoryCategoryCreate
from exceptions import Conflict, NotFound, ValidationFailed
from crud.transaction import atomic
import logging

logger = logging.getLogger(__name__)

PRESET_CATEGORIES = [
    ("Build Plates", "Print beds, PEI sheets and build surfaces"),
    ("Lubricants", "Grease and oil for rails, screws and bearings"),
    ("Nozzles", "Hotend nozzles of every size and material"),
    ("Motion Parts", "Belts, pulleys, bearings and lead screws"),
    ("Electronics", "Thermistors, heater cartridges, fans and boards"),
    ("Other", "Anything that does not fit elsewhere"),
]


def ensure_preset_categories(db: Session):
    """Insert any missing preset categories; safe to call on every startup."""
    existing = {
        name for (name,) in db.query(AccessoryCategory.name).filter(
            AccessoryCategory.is_preset.is_(True), AccessoryCategory.owner_id.is_(None)
        )
    }
    missing = [(name, description) for name, description in PRESET_CATEGORIES if name not in existing]
    if not missing:
        return 0
    with atomic(db, "seed preset accessory categories"):
        for name, description in missing:
            db.add(AccessoryCategory(name=name, description=description, is_preset=True, owner_id=None))
    logger.info("Seeded %d preset accessory categories", len(missing))
    return len(missing)

def _visible_to(owner_id: str):
    return or_(
        AccessoryCategory.owner_id == owner_id,
        (AccessoryCategory.is_preset.is_(True)) & (AccessoryCategory.owner_id.is_(None))
    )

def get_category(db: Session, category_id: str, owner_id: str):
    return db.query(AccessoryCategory).filter(AccessoryCategory.id == category_id, _visible_to(owner_id)).first()

def get_categories(db: Session, owner_id: str):
    """Preset categories first, then the owner's own, each oldest first."""
    return db.query(AccessoryCategory).filter(_visible_to(owner_id)).order_by(
        AccessoryCategory.is_preset.desc(), AccessoryCategory.created_at.asc()
    ).all()

def require_category(db: Session, category_id: str, owner_id: str) -> AccessoryCategory:
    category = get_category(db, category_id, owner_id)
    if category is None:
        raise NotFound("Category not found")
    return category

def create_category(db: Session, category: AccessoryCategoryCreate, owner_id: str, changed_by: str = None):
    name = (category.name or "").strip()
    if not name:
        raise ValidationFailed("Category name is required")
    preset = db.query(AccessoryCategory).filter(
        AccessoryCategory.name == name, AccessoryCategory.is_preset.is_(True), AccessoryCategory.owner_id.is_(None)
    ).first()
    if preset:
        raise Conflict("Category name conflicts with preset category")
    if db.query(AccessoryCategory).filter(AccessoryCategory.name == name, AccessoryCategory.owner_id == owner_id).first():
        raise Conflict("Category already exists")

    db_category = AccessoryCategory(
        name=name,
        description=category.description,
        owner_id=owner_id,
        is_preset=False,
        created_by=changed_by,
        updated_by=changed_by
    )
    with atomic(db, "create accessory category"):
        db.add(db_category)
    db.refresh(db_category)
    return db_category

def delete_category(db: Session, category_id: str, owner_id: str):
    db_category = require_category(db, category_id, owner_id)
    if db_category.is_preset:
        raise Conflict("Preset categories cannot be deleted")
    if db.query(Accessory.id).filter(Accessory.category_id == category_id).first():
        raise Conflict("Category has accessories and cannot be deleted")
    with atomic(db, "delete accessory category"):
        db.delete(db_category)
    return db_category
