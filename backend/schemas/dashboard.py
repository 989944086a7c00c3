from pydantic import BaseModel
from typing import List, Optional
from datetime import date


class InventoryGroupByBrand(BaseModel):
    brand_id: str
    brand_name: str
    total_weight: float
    total_remaining_weight: float
    count: int

class InventoryGroupByType(BaseModel):
    type_id: str
    type_name: str
    total_weight: float
    total_remaining_weight: float
    count: int

class InventoryGroupByColor(BaseModel):
    color: str
    color_hex: Optional[str] = None
    total_weight: float
    total_remaining_weight: float
    count: int

class InventoryOverview(BaseModel):
    by_brand: List[InventoryGroupByBrand]
    by_type: List[InventoryGroupByType]
    by_color: List[InventoryGroupByColor]

class LowStockConsumable(BaseModel):
    id: str
    color: str
    brand_name: str
    type_name: str
    remaining_weight: float
    weight: float
    percent_remaining: int

class InventoryStats(BaseModel):
    total_consumables: int
    total_weight: float
    total_remaining_weight: float
    total_spending: float
    opened_count: int
    unopened_count: int
    low_stock_items: List[LowStockConsumable]

class PriceTrendItem(BaseModel):
    purchase_date: date
    price: float
    brand_name: str
    type_name: str
    color: str

class PriceStats(BaseModel):
    trend: List[PriceTrendItem]
    average_price: float
    min_price: float
    max_price: float
    total_count: int

class RemainingTotal(BaseModel):
    group: str # brand, type or color
    key: str
    total_remaining_weight: float
