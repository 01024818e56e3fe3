"""Offer profile CRUD services."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.offer_profile import OfferProfile
from models.pack import Pack

logger = logging.getLogger(__name__)

REQUIRED_OFFER_FIELDS = ("project_id", "name", "problem", "promise", "proof", "pitch")
UPDATABLE_OFFER_FIELDS = ("name", "problem", "promise", "proof", "pitch", "brand_voice", "constraints")


def serialize_offer(row: OfferProfile) -> Dict[str, Any]:
    return {
        "id": row.id,
        "project_id": row.project_id,
        "name": row.name,
        "problem": row.problem,
        "promise": row.promise,
        "proof": row.proof,
        "pitch": row.pitch,
        "brand_voice": row.brand_voice,
        "constraints": row.constraints,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


async def _load_offer(offer_id: str, db: AsyncSession) -> OfferProfile:
    result = await db.execute(select(OfferProfile).where(OfferProfile.id == offer_id))
    row = result.scalar_one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Offer profile not found")
    return row


async def list_offers_service(project_id: Optional[str], db: AsyncSession) -> Dict[str, Any]:
    if not project_id:
        raise HTTPException(status_code=400, detail="Project ID is required")
    result = await db.execute(
        select(OfferProfile)
        .where(OfferProfile.project_id == project_id)
        .order_by(OfferProfile.created_at.desc())
    )
    return {
        "success": True,
        "profiles": [serialize_offer(row) for row in result.scalars().all()],
    }


async def create_offer_service(*, payload: Dict[str, Any], db: AsyncSession) -> Dict[str, Any]:
    missing = [field for field in REQUIRED_OFFER_FIELDS if not str(payload.get(field) or "").strip()]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}",
        )

    profile = OfferProfile(
        project_id=payload["project_id"],
        name=payload["name"],
        problem=payload["problem"],
        promise=payload["promise"],
        proof=payload["proof"],
        pitch=payload["pitch"],
        brand_voice=payload.get("brand_voice"),
        constraints=payload.get("constraints") or None,
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    logger.info("offer_created id=%s project=%s", profile.id, profile.project_id)
    return {"success": True, "profile": serialize_offer(profile)}


async def update_offer_service(*, offer_id: str, payload: Dict[str, Any], db: AsyncSession) -> Dict[str, Any]:
    """Apply only the fields present in payload; required text fields cannot be blanked."""
    profile = await _load_offer(offer_id, db)
    for field in UPDATABLE_OFFER_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if field in REQUIRED_OFFER_FIELDS and not str(value or "").strip():
            raise HTTPException(status_code=400, detail=f"{field} cannot be empty")
        setattr(profile, field, value)
    await db.commit()
    await db.refresh(profile)
    return {"success": True, "profile": serialize_offer(profile)}


async def delete_offer_service(offer_id: Optional[str], db: AsyncSession) -> Dict[str, Any]:
    if not offer_id:
        raise HTTPException(status_code=400, detail="Profile ID is required")
    profile = await _load_offer(offer_id, db)
    # Packs keep their contents; they just lose the link to the profile.
    await db.execute(update(Pack).where(Pack.offer_id == offer_id).values(offer_id=None))
    await db.delete(profile)
    await db.commit()
    logger.info("offer_deleted id=%s", offer_id)
    return {"success": True, "message": "Profile deleted successfully"}
