"""Content reference library router."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.references import (
    create_reference_service,
    get_reference_service,
    list_references_service,
)

router = APIRouter()


class CreateReferenceRequest(BaseModel):
    platform: str
    url: str = Field(min_length=1)
    title: str
    creator: str
    metrics: Dict[str, Any]
    transcript: Optional[str] = None
    viral_score: Optional[float] = None
    thumbnail_url: Optional[str] = None
    published_at: Optional[str] = None


@router.get("")
async def list_references(
    platform: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await list_references_service(platform=platform, limit=limit, offset=offset, db=db)


@router.post("")
async def create_reference(
    request: CreateReferenceRequest,
    db: AsyncSession = Depends(get_db),
):
    return await create_reference_service(payload=request.model_dump(), db=db)


@router.get("/{reference_id}")
async def get_reference(reference_id: str, db: AsyncSession = Depends(get_db)):
    return await get_reference_service(reference_id, db)
