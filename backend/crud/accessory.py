import enum
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from crud import stock_audit as crud_stock_audit
from crud import usage_ledger
from crud.accessory_category import require_category
from crud.transaction import atomic
from exceptions import Conflict, NotFound, ValidationFailed
from models.accessory import Accessory, AccessoryStatus, AccessoryUsageType
from models.accessory_category import AccessoryCategory
from models.accessory_usage import AccessoryUsage
from schemas.accessory import AccessoryCreate, AccessoryUpdate, AccessoryUsageCreate
from utils.time_utils import days_since, minutes_between, today, utcnow

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "accessory"


class SessionAction(enum.Enum):
    START = "start"
    STOP = "stop"


# Guarded transitions for exclusive-use sessions: action -> {from_status: to_status}.
# A target of None means "re-derive from stock once the session is closed".
SESSION_TRANSITIONS = {
    SessionAction.START: {AccessoryStatus.AVAILABLE: AccessoryStatus.IN_USE},
    SessionAction.STOP: {AccessoryStatus.IN_USE: None},
}

SESSION_REJECTIONS = {
    (SessionAction.START, AccessoryStatus.IN_USE): "Accessory is already in use",
    (SessionAction.START, AccessoryStatus.LOW_STOCK): "Accessory must be available to start using it",
    (SessionAction.START, AccessoryStatus.DEPLETED): "Accessory must be available to start using it",
    (SessionAction.STOP, AccessoryStatus.AVAILABLE): "Accessory is not in use",
    (SessionAction.STOP, AccessoryStatus.LOW_STOCK): "Accessory is not in use",
    (SessionAction.STOP, AccessoryStatus.DEPLETED): "Accessory is not in use",
}


def derive_accessory_status(
    remaining_qty: int,
    low_stock_threshold: Optional[int],
    usage_type: AccessoryUsageType,
    in_use_started_at: Optional[datetime]
) -> AccessoryStatus:
    """
    Status as a pure function of the authoritative accessory fields.

    Durable accessories are never counted down, so outside a session they
    are simply available; only consumable accessories move through
    low_stock and depleted.
    """
    if in_use_started_at is not None:
        return AccessoryStatus.IN_USE
    if usage_type is AccessoryUsageType.DURABLE:
        return AccessoryStatus.AVAILABLE
    if remaining_qty <= 0:
        return AccessoryStatus.DEPLETED
    if low_stock_threshold is not None and remaining_qty <= low_stock_threshold:
        return AccessoryStatus.LOW_STOCK
    return AccessoryStatus.AVAILABLE


def _refresh_status(accessory: Accessory) -> AccessoryStatus:
    accessory.status = derive_accessory_status(
        accessory.remaining_qty,
        accessory.low_stock_threshold,
        accessory.usage_type,
        accessory.in_use_started_at
    )
    return accessory.status


def _guard_session(accessory: Accessory, action: SessionAction) -> Optional[AccessoryStatus]:
    if action is SessionAction.START and accessory.usage_type is not AccessoryUsageType.DURABLE:
        raise Conflict("Only durable accessories can be marked as in use")
    allowed = SESSION_TRANSITIONS[action]
    if accessory.status not in allowed:
        raise Conflict(SESSION_REJECTIONS[(action, accessory.status)])
    return allowed[accessory.status]


def _validate_fields(data: dict):
    if "name" in data:
        if data["name"] is None or not data["name"].strip():
            raise ValidationFailed("Name is required")
        data["name"] = data["name"].strip()
    if "category_id" in data and not data["category_id"]:
        raise ValidationFailed("Category is required")
    if "quantity" in data and (data["quantity"] is None or data["quantity"] < 1):
        raise ValidationFailed("Quantity must be at least 1")
    if data.get("price") is not None and data["price"] < 0:
        raise ValidationFailed("Price cannot be negative")
    if data.get("replacement_cycle") is not None and data["replacement_cycle"] < 1:
        raise ValidationFailed("Replacement cycle must be at least 1 day")
    if data.get("low_stock_threshold") is not None and data["low_stock_threshold"] < 0:
        raise ValidationFailed("Low stock threshold cannot be negative")
    return data


def _query(db: Session, owner_id: str):
    return db.query(Accessory).options(joinedload(Accessory.category)).filter(Accessory.owner_id == owner_id)


def get_accessory(db: Session, accessory_id: str, owner_id: str, with_usage: bool = False):
    query = _query(db, owner_id).filter(Accessory.id == accessory_id)
    if with_usage:
        query = query.options(joinedload(Accessory.usage_records))
    return query.first()


def require_accessory(db: Session, accessory_id: str, owner_id: str, for_update: bool = False) -> Accessory:
    query = db.query(Accessory).filter(Accessory.id == accessory_id, Accessory.owner_id == owner_id)
    if for_update:
        query = query.with_for_update()
    accessory = query.first()
    if accessory is None:
        raise NotFound("Accessory not found")
    return accessory


def get_accessories(
    db: Session,
    owner_id: str,
    category_id: Optional[str] = None,
    status: Optional[AccessoryStatus] = None
) -> List[Accessory]:
    query = _query(db, owner_id).join(Accessory.category)
    if category_id:
        query = query.filter(Accessory.category_id == category_id)
    if status is not None:
        query = query.filter(Accessory.status == status)
    return query.order_by(AccessoryCategory.name.asc(), Accessory.created_at.desc()).all()


def create_accessory(db: Session, data: AccessoryCreate, owner_id: str, changed_by: str = None) -> Accessory:
    fields = _validate_fields(data.model_dump())
    require_category(db, fields["category_id"], owner_id)

    accessory = Accessory(
        **fields,
        owner_id=owner_id,
        remaining_qty=fields["quantity"],
        created_by=changed_by,
        updated_by=changed_by
    )
    _refresh_status(accessory)
    with atomic(db, "create accessory"):
        db.add(accessory)
    logger.info("Accessory %s (%s) created for owner %s", accessory.id, accessory.usage_type.value, owner_id)
    return get_accessory(db, accessory.id, owner_id)


def update_accessory(db: Session, accessory_id: str, data: AccessoryUpdate, owner_id: str, changed_by: str = None) -> Accessory:
    update_data = _validate_fields(data.model_dump(exclude_unset=True))

    with atomic(db, "update accessory"):
        accessory = require_accessory(db, accessory_id, owner_id, for_update=True)
        if "category_id" in update_data:
            require_category(db, update_data["category_id"], owner_id)

        old_quantity = accessory.quantity
        for key, value in update_data.items():
            setattr(accessory, key, value)
        accessory.updated_by = changed_by

        if accessory.quantity != old_quantity:
            # Restock or correction: replay the ledger against the new capacity
            total_used = usage_ledger.replay_total(db, AccessoryUsage.quantity, AccessoryUsage.accessory_id, accessory.id)
            old_remaining = accessory.remaining_qty
            accessory.remaining_qty = usage_ledger.count_policy.settle(accessory.quantity, total_used)
            crud_stock_audit.add_stock_audit(
                db,
                owner_id=owner_id,
                resource_type=RESOURCE_TYPE,
                resource_id=accessory.id,
                change_type="restock",
                old_quantity=old_remaining,
                new_quantity=accessory.remaining_qty,
                changed_by=changed_by,
                note=f"Quantity changed from {old_quantity} to {accessory.quantity}."
            )
        _refresh_status(accessory)

    return get_accessory(db, accessory_id, owner_id)


def delete_accessory(db: Session, accessory_id: str, owner_id: str) -> Accessory:
    with atomic(db, "delete accessory"):
        accessory = require_accessory(db, accessory_id, owner_id, for_update=True)
        if accessory.status is AccessoryStatus.IN_USE:
            raise Conflict("Cannot delete accessory that is in use")
        # ORM cascade removes the usage history
        db.delete(accessory)
        crud_stock_audit.delete_stock_audits(db, RESOURCE_TYPE, accessory_id, owner_id)
    logger.info("Accessory %s deleted for owner %s", accessory_id, owner_id)
    return accessory


def record_usage(db: Session, accessory_id: str, data: AccessoryUsageCreate, owner_id: str, changed_by: str = None) -> Accessory:
    """
    Take `quantity` units out of stock.

    Unlike filament weight this is a hard limit: asking for more than is
    left fails and nothing is written.
    """
    if data.quantity is None or data.quantity <= 0:
        raise ValidationFailed("Usage quantity must be positive")

    with atomic(db, "record accessory usage"):
        accessory = require_accessory(db, accessory_id, owner_id, for_update=True)
        if accessory.usage_type is AccessoryUsageType.DURABLE:
            raise Conflict("Durable accessories are tracked with start/stop using, not by quantity")

        old_remaining = accessory.remaining_qty
        usage_ledger.count_policy.reserve(db, Accessory, accessory_id, owner_id, data.quantity)
        db.refresh(accessory)

        db.add(AccessoryUsage(
            owner_id=owner_id,
            accessory_id=accessory_id,
            usage_date=data.usage_date,
            quantity=data.quantity,
            purpose=data.purpose,
            created_by=changed_by,
            updated_by=changed_by
        ))
        _refresh_status(accessory)
        accessory.updated_by = changed_by
        crud_stock_audit.add_stock_audit(
            db,
            owner_id=owner_id,
            resource_type=RESOURCE_TYPE,
            resource_id=accessory_id,
            change_type="usage",
            old_quantity=old_remaining,
            new_quantity=accessory.remaining_qty,
            changed_by=changed_by,
            note=f"Used {data.quantity}" + (f" for '{data.purpose}'." if data.purpose else ".")
        )

    logger.info("Accessory %s used x%d by owner %s", accessory_id, data.quantity, owner_id)
    return get_accessory(db, accessory_id, owner_id, with_usage=True)


def start_using(db: Session, accessory_id: str, owner_id: str, changed_by: str = None) -> Accessory:
    with atomic(db, "start using accessory"):
        accessory = require_accessory(db, accessory_id, owner_id, for_update=True)
        accessory.status = _guard_session(accessory, SessionAction.START)
        accessory.in_use_started_at = utcnow()
        accessory.updated_by = changed_by

    logger.info("Accessory %s checked out by owner %s", accessory_id, owner_id)
    return get_accessory(db, accessory_id, owner_id)


def stop_using(db: Session, accessory_id: str, owner_id: str, notes: Optional[str] = None, changed_by: str = None) -> Accessory:
    """Close the session: log one usage row with its duration and free the accessory."""
    with atomic(db, "stop using accessory"):
        accessory = require_accessory(db, accessory_id, owner_id, for_update=True)
        _guard_session(accessory, SessionAction.STOP)

        duration = minutes_between(accessory.in_use_started_at, utcnow()) if accessory.in_use_started_at else 0
        db.add(AccessoryUsage(
            owner_id=owner_id,
            accessory_id=accessory_id,
            usage_date=today(),
            quantity=0,
            duration=duration,
            purpose=notes,
            created_by=changed_by,
            updated_by=changed_by
        ))
        accessory.in_use_started_at = None
        accessory.updated_by = changed_by
        _refresh_status(accessory)

    logger.info("Accessory %s returned by owner %s after %d min", accessory_id, owner_id, duration)
    return get_accessory(db, accessory_id, owner_id, with_usage=True)


def mark_replaced(db: Session, accessory_id: str, owner_id: str, replaced_at: Optional[datetime] = None, changed_by: str = None) -> Accessory:
    with atomic(db, "mark accessory as replaced"):
        accessory = require_accessory(db, accessory_id, owner_id, for_update=True)
        accessory.last_replaced_at = replaced_at or utcnow()
        accessory.updated_by = changed_by
    return get_accessory(db, accessory_id, owner_id)


def get_alerts(db: Session, owner_id: str, now: Optional[datetime] = None) -> List[dict]:
    """
    Replacement and stock alerts for every accessory of the owner.

    Read-only: nothing is written, the result depends only on stored state
    and `now`.
    """
    now = now or utcnow()
    alerts = []
    for accessory in _query(db, owner_id).all():
        category_name = accessory.category.name if accessory.category else ""

        if accessory.replacement_cycle:
            since = accessory.last_replaced_at or accessory.created_at
            elapsed = days_since(since, now)
            if elapsed is not None and elapsed >= accessory.replacement_cycle:
                alerts.append({
                    "id": f"replacement-{accessory.id}",
                    "accessory_id": accessory.id,
                    "accessory_name": accessory.name,
                    "category_name": category_name,
                    "alert_type": "replacement_due",
                    "message": f'Accessory "{accessory.name}" is past its replacement cycle ({elapsed} days), consider replacing it',
                })

        if accessory.status in (AccessoryStatus.LOW_STOCK, AccessoryStatus.DEPLETED):
            if accessory.status is AccessoryStatus.DEPLETED:
                message = f'Accessory "{accessory.name}" is used up, please restock'
            else:
                message = f'Accessory "{accessory.name}" is running low ({accessory.remaining_qty} left), please restock'
            alerts.append({
                "id": f"stock-{accessory.id}",
                "accessory_id": accessory.id,
                "accessory_name": accessory.name,
                "category_name": category_name,
                "alert_type": "low_stock",
                "message": message,
            })
    return alerts
