"""
Rental Service — Inventory availability routes
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.api.deps import no_cache
from rental_service.core.config import get_settings
from rental_service.core.dates import DateRange, parse_calendar_day
from rental_service.db.database import get_db
from rental_service.schemas.inventory import AvailableStockResponse, DailyInventoryResponse, DateStockResponse
from rental_service.services.availability import AvailabilityResolver

settings = get_settings()
router = APIRouter(prefix="/api/inventory", tags=["inventory"], dependencies=[Depends(no_cache)])


@router.get("/available", response_model=AvailableStockResponse)
async def available_stock(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
):
    """Minimum free units per product across the whole range."""
    date_range = DateRange.parse(start_date, end_date, settings.MAX_RANGE_DAYS)
    stock = await AvailabilityResolver(db).availability_for_all(date_range.start, date_range.end)
    return AvailableStockResponse(stock_by_product=stock)


@router.get("/daily", response_model=DailyInventoryResponse)
async def daily_inventory(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
):
    """Per-day, per-product free units (admin planning grid)."""
    date_range = DateRange.parse(start_date, end_date, settings.MAX_RANGE_DAYS)
    grid = await AvailabilityResolver(db).daily_snapshot(date_range.start, date_range.end)
    return DailyInventoryResponse(daily_inventory={day.isoformat(): row for day, row in grid.items()})


@router.get("/{day}", response_model=DateStockResponse)
async def stock_on_date(day: str, db: AsyncSession = Depends(get_db)):
    on_date = parse_calendar_day(day)
    grid = await AvailabilityResolver(db).daily_snapshot(on_date, on_date)
    return DateStockResponse(date=on_date, stock_by_product=grid[on_date])
