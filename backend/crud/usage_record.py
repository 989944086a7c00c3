import logging
from datetime import date
from typing import Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from crud import usage_ledger
from crud.consumable import get_consumable, recalculate_remaining, require_consumable
from crud.transaction import atomic
from exceptions import NotFound, ValidationFailed
from models.consumable import Consumable
from models.usage_record import UsageRecord
from schemas.usage_record import UsageRecordCreate, UsageRecordUpdate

logger = logging.getLogger(__name__)


def _validate_amount(amount_used):
    if amount_used is None or amount_used <= 0:
        raise ValidationFailed("Amount used must be positive")


def get_usage_record(db: Session, record_id: str, owner_id: str):
    return db.query(UsageRecord).filter(UsageRecord.id == record_id, UsageRecord.owner_id == owner_id).first()


def require_usage_record(db: Session, record_id: str, owner_id: str) -> UsageRecord:
    record = get_usage_record(db, record_id, owner_id)
    if record is None:
        raise NotFound("Usage record not found")
    return record


def get_usage_records(
    db: Session,
    owner_id: str,
    consumable_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
):
    query = db.query(UsageRecord).options(
        joinedload(UsageRecord.consumable).joinedload(Consumable.brand),
        joinedload(UsageRecord.consumable).joinedload(Consumable.type)
    ).filter(UsageRecord.owner_id == owner_id)
    if consumable_id:
        query = query.filter(UsageRecord.consumable_id == consumable_id)
    if start_date:
        query = query.filter(UsageRecord.usage_date >= start_date)
    if end_date:
        query = query.filter(UsageRecord.usage_date <= end_date)
    return query.order_by(UsageRecord.usage_date.desc(), UsageRecord.created_at.desc()).all()


def get_total_usage(db: Session, consumable_id: str, owner_id: str) -> float:
    require_consumable(db, consumable_id, owner_id)
    return usage_ledger.replay_total(db, UsageRecord.amount_used, UsageRecord.consumable_id, consumable_id)


def create_usage_record(db: Session, data: UsageRecordCreate, owner_id: str, changed_by: str = None) -> Tuple[UsageRecord, Consumable, Optional[str]]:
    """
    Append a usage record and re-derive the spool's remaining weight.

    Overdrawing is accepted: remaining clamps at zero and the warning is
    returned next to the result instead of failing the call.
    """
    _validate_amount(data.amount_used)

    with atomic(db, "record consumable usage"):
        consumable = require_consumable(db, data.consumable_id, owner_id, for_update=True)
        record = UsageRecord(
            owner_id=owner_id,
            consumable_id=consumable.id,
            amount_used=data.amount_used,
            usage_date=data.usage_date,
            project_name=data.project_name,
            notes=data.notes,
            created_by=changed_by,
            updated_by=changed_by
        )
        db.add(record)
        warning = recalculate_remaining(
            db, consumable, "usage", changed_by,
            note=f"Used {data.amount_used} g" + (f" for '{data.project_name}'." if data.project_name else ".")
        )
        record_id = record.id

    logger.info("Usage record %s added to consumable %s for owner %s", record_id, data.consumable_id, owner_id)
    return get_usage_record(db, record_id, owner_id), get_consumable(db, data.consumable_id, owner_id), warning


def update_usage_record(db: Session, record_id: str, data: UsageRecordUpdate, owner_id: str, changed_by: str = None) -> Tuple[UsageRecord, Consumable, Optional[str]]:
    update_data = data.model_dump(exclude_unset=True)
    if "amount_used" in update_data:
        _validate_amount(update_data["amount_used"])
    if "usage_date" in update_data and update_data["usage_date"] is None:
        raise ValidationFailed("Usage date cannot be empty")

    with atomic(db, "update consumable usage"):
        record = require_usage_record(db, record_id, owner_id)
        consumable = require_consumable(db, record.consumable_id, owner_id, for_update=True)
        old_amount = record.amount_used
        for key, value in update_data.items():
            setattr(record, key, value)
        record.updated_by = changed_by
        warning = recalculate_remaining(
            db, consumable, "usage_update", changed_by,
            note=f"Usage record changed from {old_amount} g to {record.amount_used} g."
        )
        consumable_id = consumable.id

    return get_usage_record(db, record_id, owner_id), get_consumable(db, consumable_id, owner_id), warning


def delete_usage_record(db: Session, record_id: str, owner_id: str, changed_by: str = None) -> Consumable:
    """Remove a usage record; the replay gives the weight back, never above capacity."""
    with atomic(db, "delete consumable usage"):
        record = require_usage_record(db, record_id, owner_id)
        consumable = require_consumable(db, record.consumable_id, owner_id, for_update=True)
        amount = record.amount_used
        db.delete(record)
        recalculate_remaining(
            db, consumable, "usage_revert", changed_by,
            note=f"Reverted usage of {amount} g."
        )
        consumable_id = consumable.id

    logger.info("Usage record %s removed from consumable %s for owner %s", record_id, consumable_id, owner_id)
    return get_consumable(db, consumable_id, owner_id)
