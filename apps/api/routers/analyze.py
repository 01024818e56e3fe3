"""Reference analysis router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.rate_limit import rate_limit
from services.analyze import analyze_reference_service

router = APIRouter()


class AnalyzeRequest(BaseModel):
    reference_id: str
    deep: bool = False
    model: Optional[str] = None


@router.post("")
async def analyze_reference(
    request: AnalyzeRequest,
    _rate_limit: None = Depends(rate_limit("analyze")),
    db: AsyncSession = Depends(get_db),
):
    return await analyze_reference_service(
        reference_id=request.reference_id,
        deep=request.deep,
        model=request.model,
        db=db,
    )
