"""
Owner removal cascade.

The identity service owns user accounts; when it removes a user it calls
delete_owner_data with that user's owner id so no inventory rows outlive
the account. No HTTP route exposes it; owners are never deleted through
this API.
"""
import logging

from sqlalchemy.orm import Session

from crud.transaction import atomic
from models.accessory import Accessory
from models.accessory_category import AccessoryCategory
from models.accessory_usage import AccessoryUsage
from models.brand import Brand
from models.brand_color import BrandColor
from models.consumable import Consumable
from models.consumable_type import ConsumableType
from models.maintenance_record import MaintenanceRecord
from models.stock_audit import StockAudit
from models.usage_record import UsageRecord

logger = logging.getLogger(__name__)

# Children before parents so foreign keys hold on every backend
_OWNED_MODELS = (
    UsageRecord,
    AccessoryUsage,
    StockAudit,
    Consumable,
    Accessory,
    BrandColor,
    Brand,
    ConsumableType,
    AccessoryCategory,
    MaintenanceRecord,
)


def delete_owner_data(db: Session, owner_id: str) -> dict:
    """
    Remove everything a user owns, ledgers included, in one transaction.

    Preset accessory categories have no owner and are left alone.
    """
    deleted = {}
    with atomic(db, "delete owner data"):
        for model in _OWNED_MODELS:
            deleted[model.__tablename__] = db.query(model).filter(
                model.owner_id == owner_id
            ).delete(synchronize_session=False)
    db.expire_all()
    logger.info("Deleted all data of owner %s: %s", owner_id, deleted)
    return deleted
