"""
Usage ledger shared by the consumable and accessory engines.

A resource's remaining amount is always derived from its ledger: the
capacity it was bought with minus the sum of every usage row recorded
against it. Mutations replay the whole ledger instead of nudging a running
counter, so an edit or a delete can never leave the stored remaining amount
out of step with the rows that justify it.

The two resource families disagree on what happens when usage outruns
stock, so each gets its own policy object:

- SoftClampPolicy (filament weight): never refuses, clamps at zero and
  hands back a warning for the caller to surface.
- HardLimitPolicy (accessory counts): refuses any request larger than what
  is left, checking and decrementing in a single conditional UPDATE.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from exceptions import Conflict

logger = logging.getLogger(__name__)

OVERDRAW_WARNING = "Warning: Usage amount exceeds remaining inventory"
STOCK_EXCEEDED = "Usage quantity exceeds remaining stock"


def replay_total(db: Session, amount_column, resource_column, resource_id: str):
    """Sum every ledger amount recorded against one resource.

    Runs inside the caller's transaction; flush pending ledger rows first.
    """
    total = db.query(func.coalesce(func.sum(amount_column), 0)).filter(resource_column == resource_id).scalar()
    return total or 0


def remaining_after_replay(capacity, total_used):
    return max(0, capacity - total_used)


class SoftClampPolicy:
    """Advisory tracking: every amount is accepted, overdraw only warns."""

    def settle(self, capacity: float, total_used: float) -> Tuple[float, Optional[str]]:
        remaining = remaining_after_replay(capacity, total_used)
        warning = OVERDRAW_WARNING if total_used > capacity else None
        return remaining, warning


class HardLimitPolicy:
    """Authoritative tracking: a request larger than the stock left is refused."""

    def reserve(self, db: Session, model, resource_id: str, owner_id: str, requested: int) -> None:
        # Check and decrement in one statement so racing callers cannot both pass.
        updated = db.query(model).filter(
            model.id == resource_id,
            model.owner_id == owner_id,
            model.remaining_qty >= requested
        ).update(
            {model.remaining_qty: model.remaining_qty - requested},
            synchronize_session=False
        )
        if updated == 0:
            logger.info("Refused usage of %s from %s %s: not enough stock", requested, model.__tablename__, resource_id)
            raise Conflict(STOCK_EXCEEDED)

    def settle(self, capacity: int, total_used: int) -> int:
        return remaining_after_replay(capacity, total_used)


weight_policy = SoftClampPolicy()
count_policy = HardLimitPolicy()
