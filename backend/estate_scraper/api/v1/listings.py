"""Listing API endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estate_scraper.models.base import get_db
from estate_scraper.models.listing import Listing
from estate_scraper.schemas.listing import ListingRead

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("", response_model=list[ListingRead])
async def list_listings(
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    source_id: int | None = Query(None, description="Filter by source"),
    city: str | None = Query(None, description="Filter by city"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    min_rooms: int | None = Query(None, ge=0),
):
    """List listings, most recently scraped first."""
    query = select(Listing)

    if source_id:
        query = query.where(Listing.source_id == source_id)
    if city:
        query = query.where(Listing.city.ilike(f"%{city}%"))
    if min_price is not None:
        query = query.where(Listing.price >= min_price)
    if max_price is not None:
        query = query.where(Listing.price <= max_price)
    if min_rooms is not None:
        query = query.where(Listing.rooms >= min_rooms)

    query = query.order_by(Listing.last_scraped_at.desc(), Listing.id.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{listing_id}", response_model=ListingRead)
async def get_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
):
    listing = await db.get(Listing, listing_id)
    if not listing:
        raise HTTPException(status_code=404, detail="Listing not found")
    return listing
