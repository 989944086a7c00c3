from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from exceptions import ValidationFailed
from models.consumable import Consumable

DEFAULT_LOW_STOCK_RATIO = 0.2


def _consumables(db: Session, owner_id: str):
    return db.query(Consumable).options(
        joinedload(Consumable.brand),
        joinedload(Consumable.type)
    ).filter(Consumable.owner_id == owner_id).order_by(Consumable.created_at.asc()).all()


def _accumulate(groups: dict, key, consumable: Consumable, **identity):
    group = groups.get(key)
    if group is None:
        group = dict(identity, total_weight=0.0, total_remaining_weight=0.0, count=0)
        groups[key] = group
    group["total_weight"] += consumable.weight
    group["total_remaining_weight"] += consumable.remaining_weight
    group["count"] += 1
    return group


def get_inventory_overview(db: Session, owner_id: str):
    """Totals of the owner's spools grouped by brand, by type and by color."""
    by_brand, by_type, by_color = {}, {}, {}
    for c in _consumables(db, owner_id):
        _accumulate(by_brand, c.brand_id, c, brand_id=c.brand_id, brand_name=c.brand.name)
        _accumulate(by_type, c.type_id, c, type_id=c.type_id, type_name=c.type.name)
        group = _accumulate(by_color, c.color.lower(), c, color=c.color, color_hex=c.color_hex)
        # First hex seen for a color wins
        if not group["color_hex"] and c.color_hex:
            group["color_hex"] = c.color_hex

    return {
        "by_brand": list(by_brand.values()),
        "by_type": list(by_type.values()),
        "by_color": list(by_color.values()),
    }


def get_inventory_stats(db: Session, owner_id: str, low_stock_ratio: float = DEFAULT_LOW_STOCK_RATIO):
    if low_stock_ratio < 0 or low_stock_ratio > 1:
        raise ValidationFailed("Low stock ratio must be between 0 and 1")

    stats = {
        "total_consumables": 0,
        "total_weight": 0.0,
        "total_remaining_weight": 0.0,
        "total_spending": 0.0,
        "opened_count": 0,
        "unopened_count": 0,
        "low_stock_items": [],
    }
    for c in _consumables(db, owner_id):
        stats["total_consumables"] += 1
        stats["total_weight"] += c.weight
        stats["total_remaining_weight"] += c.remaining_weight
        stats["total_spending"] += c.price or 0
        if c.is_opened:
            stats["opened_count"] += 1
        else:
            stats["unopened_count"] += 1

        ratio = c.remaining_weight / c.weight if c.weight > 0 else 0
        # Depleted spools are not "low", they are gone
        if c.remaining_weight > 0 and ratio <= low_stock_ratio:
            stats["low_stock_items"].append({
                "id": c.id,
                "color": c.color,
                "brand_name": c.brand.name,
                "type_name": c.type.name,
                "remaining_weight": c.remaining_weight,
                "weight": c.weight,
                "percent_remaining": round(ratio * 100),
            })
    return stats


def _total_remaining(db: Session, owner_id: str, *criteria) -> float:
    total = db.query(func.coalesce(func.sum(Consumable.remaining_weight), 0)).filter(
        Consumable.owner_id == owner_id, *criteria
    ).scalar()
    return float(total or 0)


def get_total_remaining_by_brand(db: Session, owner_id: str, brand_id: str) -> float:
    return _total_remaining(db, owner_id, Consumable.brand_id == brand_id)


def get_total_remaining_by_type(db: Session, owner_id: str, type_id: str) -> float:
    return _total_remaining(db, owner_id, Consumable.type_id == type_id)


def get_total_remaining_by_color(db: Session, owner_id: str, color: str) -> float:
    # Same case-insensitive grouping as the overview
    return _total_remaining(db, owner_id, func.lower(Consumable.color) == color.lower())


def get_price_stats(db: Session, owner_id: str):
    """Purchase prices over time, oldest purchase first, with average/min/max."""
    consumables = db.query(Consumable).options(
        joinedload(Consumable.brand),
        joinedload(Consumable.type)
    ).filter(Consumable.owner_id == owner_id).order_by(
        Consumable.purchase_date.asc(), Consumable.created_at.asc()
    ).all()

    if not consumables:
        return {"trend": [], "average_price": 0.0, "min_price": 0.0, "max_price": 0.0, "total_count": 0}

    prices = [c.price or 0 for c in consumables]
    return {
        "trend": [
            {
                "purchase_date": c.purchase_date,
                "price": c.price or 0,
                "brand_name": c.brand.name,
                "type_name": c.type.name,
                "color": c.color,
            }
            for c in consumables
        ],
        "average_price": sum(prices) / len(prices),
        "min_price": min(prices),
        "max_price": max(prices),
        "total_count": len(consumables),
    }
