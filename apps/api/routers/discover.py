"""Platform discovery router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.rate_limit import rate_limit
from services.discovery import discover_service

router = APIRouter()


class DiscoverRequest(BaseModel):
    platform: str = ""
    niche: str = ""


@router.post("")
async def discover(
    request: DiscoverRequest,
    _rate_limit: None = Depends(rate_limit("discover", limit=30, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    return await discover_service(platform=request.platform, niche=request.niche, db=db)
