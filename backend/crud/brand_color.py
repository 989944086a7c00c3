import logging
import re
from typing import List
from sqlalchemy.orm import Session
from models.brand_color import BrandColor, DEFAULT_COLOR_HEX
from schemas.brand_color import BrandColorCreate, BrandColorUpdate
from exceptions import Conflict, NotFound, ValidationFailed
from crud.brand import require_brand
from crud.transaction import atomic

logger = logging.getLogger(__name__)

# A palette entry is a single swatch, unlike a spool's color_hex
_SWATCH_HEX = re.compile(r"^#[0-9A-Fa-f]{6}$")


def is_valid_swatch(color_hex: str) -> bool:
    return bool(color_hex) and bool(_SWATCH_HEX.match(color_hex))

def get_brand_colors(db: Session, brand_id: str, owner_id: str) -> List[BrandColor]:
    require_brand(db, brand_id, owner_id)
    return db.query(BrandColor).filter(
        BrandColor.brand_id == brand_id,
        BrandColor.owner_id == owner_id
    ).order_by(BrandColor.color_name.asc()).all()

def require_brand_color(db: Session, brand_id: str, color_id: str, owner_id: str) -> BrandColor:
    color = db.query(BrandColor).filter(
        BrandColor.id == color_id,
        BrandColor.brand_id == brand_id,
        BrandColor.owner_id == owner_id
    ).first()
    if color is None:
        raise NotFound("Color not found")
    return color

def _check_name(db: Session, brand_id: str, color_name: str, exclude_id: str = None) -> str:
    color_name = (color_name or "").strip()
    if not color_name:
        raise ValidationFailed("Color name is required")
    query = db.query(BrandColor).filter(BrandColor.brand_id == brand_id, BrandColor.color_name == color_name)
    if exclude_id:
        query = query.filter(BrandColor.id != exclude_id)
    if query.first():
        raise Conflict("Color name already exists")
    return color_name

def create_brand_color(db: Session, brand_id: str, color: BrandColorCreate, owner_id: str, changed_by: str = None) -> BrandColor:
    color_hex = color.color_hex if color.color_hex is not None else DEFAULT_COLOR_HEX
    if not is_valid_swatch(color_hex):
        raise ValidationFailed("Invalid color hex format")
    require_brand(db, brand_id, owner_id)
    color_name = _check_name(db, brand_id, color.color_name)

    db_color = BrandColor(
        owner_id=owner_id,
        brand_id=brand_id,
        color_name=color_name,
        color_hex=color_hex,
        created_by=changed_by,
        updated_by=changed_by
    )
    with atomic(db, "create brand color"):
        db.add(db_color)
    db.refresh(db_color)
    return db_color

def update_brand_color(db: Session, brand_id: str, color_id: str, color: BrandColorUpdate, owner_id: str, changed_by: str = None) -> BrandColor:
    db_color = require_brand_color(db, brand_id, color_id, owner_id)
    update_data = color.model_dump(exclude_unset=True)
    if "color_name" in update_data:
        update_data["color_name"] = _check_name(db, brand_id, update_data["color_name"], exclude_id=color_id)
    if "color_hex" in update_data and not is_valid_swatch(update_data["color_hex"]):
        raise ValidationFailed("Invalid color hex format")

    with atomic(db, "update brand color"):
        for key, value in update_data.items():
            setattr(db_color, key, value)
        db_color.updated_by = changed_by
    db.refresh(db_color)
    return db_color

def delete_brand_color(db: Session, brand_id: str, color_id: str, owner_id: str):
    db_color = require_brand_color(db, brand_id, color_id, owner_id)
    with atomic(db, "delete brand color"):
        db.delete(db_color)
    return db_color

def import_brand_colors(db: Session, brand_id: str, colors: List[BrandColorCreate], owner_id: str, changed_by: str = None) -> int:
    """
    Add many colors to a brand's palette at once, e.g. when seeding it from
    the spools already on the shelf.

    Blank names and names the palette already has (or that repeat within
    the import) are skipped; a missing or malformed hex falls back to grey.
    Returns how many colors were added.
    """
    require_brand(db, brand_id, owner_id)
    existing = {
        name for (name,) in db.query(BrandColor.color_name).filter(BrandColor.brand_id == brand_id)
    }

    created = 0
    with atomic(db, "import brand colors"):
        for color in colors:
            color_name = (color.color_name or "").strip()
            if not color_name or color_name in existing:
                continue
            existing.add(color_name)
            db.add(BrandColor(
                owner_id=owner_id,
                brand_id=brand_id,
                color_name=color_name,
                color_hex=color.color_hex if is_valid_swatch(color.color_hex) else DEFAULT_COLOR_HEX,
                created_by=changed_by,
                updated_by=changed_by
            ))
            created += 1

    logger.info("Imported %d colors into brand %s for owner %s", created, brand_id, owner_id)
    return created
