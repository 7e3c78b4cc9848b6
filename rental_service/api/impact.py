"""
Rental Service — Impact analytics route
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.api.deps import no_cache
from rental_service.db.database import get_db
from rental_service.schemas.rental import ImpactResponse
from rental_service.services.impact import get_impact_stats

router = APIRouter(prefix="/api/impact", tags=["impact"], dependencies=[Depends(no_cache)])


@router.get("", response_model=ImpactResponse)
async def impact_stats(db: AsyncSession = Depends(get_db)):
    stats = await get_impact_stats(db)
    return ImpactResponse(**stats.as_dict())
