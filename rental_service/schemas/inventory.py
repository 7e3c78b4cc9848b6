"""
Rental Service — Inventory schemas
"""
import datetime as dt

from rental_service.schemas.common import CamelModel


class AvailableStockResponse(CamelModel):
    stock_by_product: dict[int, int]


class DailyInventoryResponse(CamelModel):
    daily_inventory: dict[str, dict[int, int]]


class DateStockResponse(CamelModel):
    date: dt.date
    stock_by_product: dict[int, int]
