"""Content pack router."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.rate_limit import rate_limit
from services.packs import (
    create_pack_service,
    delete_pack_service,
    duplicate_pack_service,
    get_pack_service,
    list_packs_service,
    regenerate_pack_service,
    update_pack_service,
)

router = APIRouter()


class CreatePackRequest(BaseModel):
    project_id: Optional[str] = None
    reference_id: Optional[str] = None
    offer_id: Optional[str] = None
    platform: Optional[str] = None
    contents: Optional[Dict[str, Any]] = None


class RegeneratePackRequest(BaseModel):
    model: Optional[str] = None


@router.get("")
async def list_packs(
    project_id: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await list_packs_service(project_id, db)


@router.post("")
async def create_pack(request: CreatePackRequest, db: AsyncSession = Depends(get_db)):
    return await create_pack_service(payload=request.model_dump(exclude_none=True), db=db)


@router.get("/{pack_id}")
async def get_pack(pack_id: str, db: AsyncSession = Depends(get_db)):
    return await get_pack_service(pack_id, db)


@router.patch("/{pack_id}")
async def update_pack(
    pack_id: str,
    payload: Dict[str, Any] = Body(default_factory=dict),
    db: AsyncSession = Depends(get_db),
):
    return await update_pack_service(pack_id=pack_id, payload=payload, db=db)


@router.delete("/{pack_id}")
async def delete_pack(pack_id: str, db: AsyncSession = Depends(get_db)):
    return await delete_pack_service(pack_id, db)


@router.post("/{pack_id}/duplicate")
async def duplicate_pack(pack_id: str, db: AsyncSession = Depends(get_db)):
    return await duplicate_pack_service(pack_id, db)


@router.post("/{pack_id}/regenerate")
async def regenerate_pack(
    pack_id: str,
    request: Optional[RegeneratePackRequest] = None,
    _rate_limit: None = Depends(rate_limit("regenerate")),
    db: AsyncSession = Depends(get_db),
):
    return await regenerate_pack_service(
        pack_id=pack_id,
        model=request.model if request else None,
        db=db,
    )
