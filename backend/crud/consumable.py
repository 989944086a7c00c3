import logging
import re
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from crud import stock_audit as crud_stock_audit
from crud import usage_ledger
from crud.brand import require_brand
from crud.consumable_type import require_consumable_type
from crud.transaction import atomic
from exceptions import NotFound, ValidationFailed
from models.consumable import Consumable, ConsumableStatus
from models.usage_record import UsageRecord
from schemas.consumable import ConsumableBatchCreate, ConsumableCreate, ConsumableUpdate
from utils.time_utils import today, utcnow

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "consumable"

_HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def derive_consumable_status(is_opened: bool, remaining_weight: float) -> ConsumableStatus:
    if remaining_weight <= 0:
        return ConsumableStatus.DEPLETED
    if is_opened:
        return ConsumableStatus.OPENED
    return ConsumableStatus.UNOPENED


def refresh_status(consumable: Consumable) -> ConsumableStatus:
    """
    Re-derive the cached status from the authoritative fields.

    depleted_at is stamped the first time the spool runs dry, kept while it
    stays depleted and cleared once usage is removed and weight comes back.
    """
    status = derive_consumable_status(consumable.is_opened, consumable.remaining_weight)
    if status is ConsumableStatus.DEPLETED:
        if consumable.depleted_at is None:
            consumable.depleted_at = utcnow()
    else:
        consumable.depleted_at = None
    consumable.status = status
    return status


def is_valid_color_hex(value: str) -> bool:
    """Accept one hex color or several joined by commas (multi-color spools)."""
    parts = [part.strip() for part in value.split(",")]
    return bool(parts) and all(_HEX_COLOR.match(part) for part in parts)


def _validate_fields(color=None, color_hex=None, weight=None, price=None, check_color=True):
    if check_color and (color is None or not color.strip()):
        raise ValidationFailed("Color is required")
    if color_hex and not is_valid_color_hex(color_hex):
        raise ValidationFailed("Invalid color format")
    if weight is not None and weight <= 0:
        raise ValidationFailed("Weight must be positive")
    if price is not None and price < 0:
        raise ValidationFailed("Price cannot be negative")


def _opened_state(is_opened: bool, opened_at: Optional[date]):
    # opened_at only means something for an opened spool
    if not is_opened:
        return False, None
    return True, opened_at or today()


def _new_consumable(data: ConsumableCreate, owner_id: str, changed_by: Optional[str]) -> Consumable:
    is_opened, opened_at = _opened_state(data.is_opened, data.opened_at)
    consumable = Consumable(
        owner_id=owner_id,
        brand_id=data.brand_id,
        type_id=data.type_id,
        color=data.color.strip(),
        color_hex=data.color_hex.strip() if data.color_hex else None,
        weight=data.weight,
        remaining_weight=data.weight,
        price=data.price,
        purchase_date=data.purchase_date,
        is_opened=is_opened,
        opened_at=opened_at,
        notes=data.notes,
        created_by=changed_by,
        updated_by=changed_by
    )
    refresh_status(consumable)
    return consumable


def _query(db: Session, owner_id: str):
    return db.query(Consumable).options(
        joinedload(Consumable.brand),
        joinedload(Consumable.type)
    ).filter(Consumable.owner_id == owner_id)


def get_consumable(db: Session, consumable_id: str, owner_id: str):
    return _query(db, owner_id).filter(Consumable.id == consumable_id).first()


def require_consumable(db: Session, consumable_id: str, owner_id: str, for_update: bool = False) -> Consumable:
    query = db.query(Consumable).filter(Consumable.id == consumable_id, Consumable.owner_id == owner_id)
    if for_update:
        query = query.with_for_update()
    consumable = query.first()
    if consumable is None:
        raise NotFound("Consumable not found")
    return consumable


def get_consumables(
    db: Session,
    owner_id: str,
    brand_id: Optional[str] = None,
    type_id: Optional[str] = None,
    color: Optional[str] = None,
    color_hex: Optional[str] = None,
    is_opened: Optional[bool] = None,
    status: Optional[ConsumableStatus] = None
) -> List[Consumable]:
    query = _query(db, owner_id)
    if brand_id:
        query = query.filter(Consumable.brand_id == brand_id)
    if type_id:
        query = query.filter(Consumable.type_id == type_id)
    if color:
        query = query.filter(Consumable.color.contains(color))
    if color_hex:
        query = query.filter(Consumable.color_hex.contains(color_hex))
    if is_opened is not None:
        query = query.filter(Consumable.is_opened == is_opened)
    if status is not None:
        query = query.filter(Consumable.status == status)
    return query.order_by(Consumable.created_at.desc()).all()


def create_consumable(db: Session, data: ConsumableCreate, owner_id: str, changed_by: str = None) -> Consumable:
    _validate_fields(data.color, data.color_hex, data.weight, data.price)
    require_brand(db, data.brand_id, owner_id)
    require_consumable_type(db, data.type_id, owner_id)

    consumable = _new_consumable(data, owner_id, changed_by)
    with atomic(db, "create consumable"):
        db.add(consumable)
    logger.info("Consumable %s created for owner %s", consumable.id, owner_id)
    return get_consumable(db, consumable.id, owner_id)


def batch_create_consumables(db: Session, data: ConsumableBatchCreate, owner_id: str, changed_by: str = None) -> List[Consumable]:
    """
    Create `quantity` identical spools in one transaction.

    Either every row is committed or none is: a failure on any row rolls
    back the ones already flushed.
    """
    if data.quantity is None or data.quantity < 1:
        raise ValidationFailed("Quantity must be at least 1")
    _validate_fields(data.color, data.color_hex, data.weight, data.price)
    require_brand(db, data.brand_id, owner_id)
    require_consumable_type(db, data.type_id, owner_id)

    created_ids = []
    with atomic(db, "create consumables"):
        for _ in range(data.quantity):
            consumable = _new_consumable(data, owner_id, changed_by)
            db.add(consumable)
            db.flush()
            created_ids.append(consumable.id)

    logger.info("Batch of %d consumables created for owner %s", len(created_ids), owner_id)
    consumables = _query(db, owner_id).filter(Consumable.id.in_(created_ids)).all()
    order = {consumable_id: index for index, consumable_id in enumerate(created_ids)}
    return sorted(consumables, key=lambda c: order[c.id])


def recalculate_remaining(
    db: Session,
    consumable: Consumable,
    change_type: str,
    changed_by: str = None,
    note: str = None
) -> Optional[str]:
    """
    Replay the whole usage ledger of a consumable and store the result.

    Must run inside the caller's transaction, after the ledger change has
    been staged. Returns the overdraw warning, if any.
    """
    old_remaining = consumable.remaining_weight
    # Keep the row inside its bounds for the flush when the weight just shrank
    consumable.remaining_weight = min(old_remaining, consumable.weight)
    db.flush()
    total_used = usage_ledger.replay_total(db, UsageRecord.amount_used, UsageRecord.consumable_id, consumable.id)
    remaining, warning = usage_ledger.weight_policy.settle(consumable.weight, total_used)

    consumable.remaining_weight = remaining
    refresh_status(consumable)
    crud_stock_audit.add_stock_audit(
        db,
        owner_id=consumable.owner_id,
        resource_type=RESOURCE_TYPE,
        resource_id=consumable.id,
        change_type=change_type,
        old_quantity=old_remaining,
        new_quantity=remaining,
        changed_by=changed_by,
        note=note
    )
    if warning:
        logger.warning("Consumable %s overdrawn: %s g used of %s g", consumable.id, total_used, consumable.weight)
    return warning


def update_consumable(db: Session, consumable_id: str, data: ConsumableUpdate, owner_id: str, changed_by: str = None) -> Consumable:
    update_data = data.model_dump(exclude_unset=True)
    for required in ("brand_id", "type_id", "color", "weight", "price", "purchase_date"):
        if required in update_data and update_data[required] is None:
            raise ValidationFailed(f"{required} cannot be empty")
    _validate_fields(
        update_data.get("color"),
        update_data.get("color_hex"),
        update_data.get("weight"),
        update_data.get("price"),
        check_color="color" in update_data
    )

    with atomic(db, "update consumable"):
        consumable = require_consumable(db, consumable_id, owner_id, for_update=True)
        if "brand_id" in update_data:
            require_brand(db, update_data["brand_id"], owner_id)
        if "type_id" in update_data:
            require_consumable_type(db, update_data["type_id"], owner_id)
        if "color" in update_data:
            update_data["color"] = update_data["color"].strip()

        old_weight = consumable.weight
        for key, value in update_data.items():
            setattr(consumable, key, value)
        consumable.updated_by = changed_by

        if consumable.weight != old_weight:
            recalculate_remaining(
                db, consumable, "capacity_change", changed_by,
                note=f"Spool weight changed from {old_weight} g to {consumable.weight} g."
            )

    return get_consumable(db, consumable_id, owner_id)


def delete_consumable(db: Session, consumable_id: str, owner_id: str) -> Consumable:
    consumable = require_consumable(db, consumable_id, owner_id)
    with atomic(db, "delete consumable"):
        # ORM cascade removes the usage records
        db.delete(consumable)
        crud_stock_audit.delete_stock_audits(db, RESOURCE_TYPE, consumable_id, owner_id)
    logger.info("Consumable %s deleted for owner %s", consumable_id, owner_id)
    return consumable


def mark_as_opened(db: Session, consumable_id: str, owner_id: str, opened_at: Optional[date] = None, changed_by: str = None) -> Consumable:
    """
    Flag a spool as opened.

    An explicit date always wins, including over an earlier one. Without a
    date an already-open spool keeps its opened_at and a sealed one gets
    today's date. A spool never goes back to unopened.
    """
    with atomic(db, "mark consumable as opened"):
        consumable = require_consumable(db, consumable_id, owner_id, for_update=True)
        if opened_at is not None:
            consumable.opened_at = opened_at
        elif consumable.opened_at is None:
            consumable.opened_at = today()
        consumable.is_opened = True
        consumable.updated_by = changed_by
        refresh_status(consumable)

    return get_consumable(db, consumable_id, owner_id)
