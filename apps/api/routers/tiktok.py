"""TikTok watchlist router."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.rate_limit import rate_limit
from services.tiktok_watch import (
    create_watchlist_service,
    pull_watchlist_service,
    suggest_watch_items_service,
)

router = APIRouter()


class WatchItemRequest(BaseModel):
    type: str
    handle: Optional[str] = None
    hashtag: Optional[str] = None
    source: Optional[str] = None


class CreateWatchlistRequest(BaseModel):
    project_id: str = ""
    name: str = ""
    niche: str = ""
    items: List[WatchItemRequest] = Field(default_factory=list)


class PullWatchlistRequest(BaseModel):
    watchlist_id: str = ""


class SuggestRequest(BaseModel):
    niche: str = ""
    model: Optional[str] = None


@router.post("/watchlists")
async def create_watchlist(request: CreateWatchlistRequest, db: AsyncSession = Depends(get_db)):
    return await create_watchlist_service(
        project_id=request.project_id,
        name=request.name,
        niche=request.niche,
        items=[item.model_dump() for item in request.items],
        db=db,
    )


@router.post("/pull")
async def pull_watchlist(
    request: PullWatchlistRequest,
    _rate_limit: None = Depends(rate_limit("tiktok_pull", limit=30, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    return await pull_watchlist_service(watchlist_id=request.watchlist_id, db=db)


@router.post("/suggest")
async def suggest_watch_items(
    request: SuggestRequest,
    _rate_limit: None = Depends(rate_limit("tiktok_suggest")),
):
    return await suggest_watch_items_service(niche=request.niche, model=request.model)
