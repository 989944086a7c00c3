from sqlalchemy.orm import Session
from models.stock_audit import StockAudit
from typing import Optional
from datetime import date, datetime, time


def get_stock_audits(
    db: Session,
    resource_type: str,
    resource_id: str,
    owner_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
):
    query = db.query(StockAudit).filter(
        StockAudit.resource_type == resource_type,
        StockAudit.resource_id == resource_id,
        StockAudit.owner_id == owner_id
    )

    if start_date:
        query = query.filter(StockAudit.timestamp >= datetime.combine(start_date, time.min))
    if end_date:
        query = query.filter(StockAudit.timestamp <= datetime.combine(end_date, time.max))

    return query.order_by(StockAudit.timestamp.asc(), StockAudit.id.asc()).all()


def add_stock_audit(
    db: Session,
    owner_id: str,
    resource_type: str,
    resource_id: str,
    change_type: str,
    old_quantity: float,
    new_quantity: float,
    changed_by: Optional[str] = None,
    note: Optional[str] = None
):
    """Stage an audit row in the caller's transaction; the caller commits."""
    audit = StockAudit(
        owner_id=owner_id,
        resource_type=resource_type,
        resource_id=resource_id,
        change_type=change_type,
        change_amount=new_quantity - old_quantity,
        old_quantity=old_quantity,
        new_quantity=new_quantity,
        changed_by=changed_by,
        note=note
    )
    db.add(audit)
    return audit


def delete_stock_audits(db: Session, resource_type: str, resource_id: str, owner_id: str):
    return db.query(StockAudit).filter(
        StockAudit.resource_type == resource_type,
        StockAudit.resource_id == resource_id,
        StockAudit.owner_id == owner_id
    ).delete(synchronize_session=False)
