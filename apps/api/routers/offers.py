"""Offer profile router."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.offers import (
    create_offer_service,
    delete_offer_service,
    list_offers_service,
    update_offer_service,
)

router = APIRouter()


class CreateOfferRequest(BaseModel):
    project_id: str
    name: str
    problem: str
    promise: str
    proof: str
    pitch: str
    brand_voice: Optional[str] = None
    constraints: Optional[Dict[str, Any]] = None


class UpdateOfferRequest(BaseModel):
    id: str
    name: Optional[str] = None
    problem: Optional[str] = None
    promise: Optional[str] = None
    proof: Optional[str] = None
    pitch: Optional[str] = None
    brand_voice: Optional[str] = None
    constraints: Optional[Dict[str, Any]] = None


@router.get("")
async def list_offers(
    project_id: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await list_offers_service(project_id, db)


@router.post("")
async def create_offer(request: CreateOfferRequest, db: AsyncSession = Depends(get_db)):
    return await create_offer_service(payload=request.model_dump(), db=db)


@router.put("")
async def update_offer(request: UpdateOfferRequest, db: AsyncSession = Depends(get_db)):
    payload = request.model_dump(exclude_unset=True)
    offer_id = payload.pop("id")
    return await update_offer_service(offer_id=offer_id, payload=payload, db=db)


@router.delete("")
async def delete_offer(
    id: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await delete_offer_service(id, db)
