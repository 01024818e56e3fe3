"""Content pack generation router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from analysis.models import Offer
from database import get_db
from routers.rate_limit import rate_limit
from services.generation import generate_pack_service, get_generation_job_service

router = APIRouter()


class GenerateRequest(BaseModel):
    reference_id: str
    platform: str
    project_id: str
    offer: Optional[Offer] = None
    offer_id: Optional[str] = None
    model: Optional[str] = None


@router.post("")
async def generate_pack(
    request: GenerateRequest,
    _rate_limit: None = Depends(rate_limit("generate")),
    db: AsyncSession = Depends(get_db),
):
    return await generate_pack_service(
        reference_id=request.reference_id,
        platform=request.platform,
        project_id=request.project_id,
        offer=request.offer.model_dump() if request.offer else None,
        offer_id=request.offer_id,
        model=request.model,
        db=db,
    )


@router.get("/jobs/{job_id}")
async def get_generation_job(job_id: str, db: AsyncSession = Depends(get_db)):
    return await get_generation_job_service(job_id, db)
