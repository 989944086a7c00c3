from models.brand import Brand
from models.brand_color import BrandColor
from models.consumable_type import ConsumableType
from models.accessory_category import AccessoryCategory
from models.consumable import Consumable, ConsumableStatus
from models.usage_record import UsageRecord
from models.accessory import Accessory, AccessoryStatus, AccessoryUsageType
from models.accessory_usage import AccessoryUsage
from models.stock_audit import StockAudit
from models.maintenance_record import MaintenanceRecord, MaintenanceType

__all__ = ['Accessory', 'AccessoryCategory', 'AccessoryStatus', 'AccessoryUsage', 'AccessoryUsageType', 'Brand', 'BrandColor', 'Consumable', 'ConsumableStatus', 'ConsumableType', 'MaintenanceRecord', 'MaintenanceType', 'StockAudit', 'UsageRecord',]
