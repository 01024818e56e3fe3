"""Content pack CRUD, duplication and regeneration."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.pack import Pack
from services.generation import regenerate_pack_outputs
from services.references import normalize_platform

logger = logging.getLogger(__name__)

PATCHABLE_PACK_FIELDS = ("contents", "platform", "offer_id")


def serialize_pack(row: Pack) -> Dict[str, Any]:
    return {
        "id": row.id,
        "project_id": row.project_id,
        "reference_id": row.reference_id,
        "offer_id": row.offer_id,
        "platform": row.platform,
        "contents": row.contents or {},
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


async def load_pack(pack_id: str, db: AsyncSession) -> Pack:
    result = await db.execute(select(Pack).where(Pack.id == pack_id))
    pack = result.scalar_one_or_none()
    if not pack:
        raise HTTPException(status_code=404, detail="Pack not found")
    return pack


async def list_packs_service(project_id: Optional[str], db: AsyncSession) -> Dict[str, Any]:
    if not project_id:
        raise HTTPException(status_code=400, detail="project_id query parameter is required")
    result = await db.execute(
        select(Pack).where(Pack.project_id == project_id).order_by(Pack.created_at.desc())
    )
    return {"packs": [serialize_pack(row) for row in result.scalars().all()]}


async def create_pack_service(*, payload: Dict[str, Any], db: AsyncSession) -> Dict[str, Any]:
    if not payload.get("project_id") or not payload.get("platform") or not payload.get("contents"):
        raise HTTPException(status_code=400, detail="project_id, platform, and contents are required")

    pack = Pack(
        project_id=payload["project_id"],
        reference_id=payload.get("reference_id"),
        offer_id=payload.get("offer_id"),
        platform=normalize_platform(payload["platform"]),
        contents=payload["contents"],
    )
    db.add(pack)
    await db.commit()
    await db.refresh(pack)
    return {"pack": serialize_pack(pack)}


async def get_pack_service(pack_id: str, db: AsyncSession) -> Dict[str, Any]:
    return {"pack": serialize_pack(await load_pack(pack_id, db))}


async def update_pack_service(*, pack_id: str, payload: Dict[str, Any], db: AsyncSession) -> Dict[str, Any]:
    updates = {key: value for key, value in (payload or {}).items() if key in PATCHABLE_PACK_FIELDS}
    if not updates:
        raise HTTPException(status_code=400, detail="No update data provided")

    pack = await load_pack(pack_id, db)
    if "platform" in updates:
        updates["platform"] = normalize_platform(updates["platform"])
    if "contents" in updates and not isinstance(updates["contents"], dict):
        raise HTTPException(status_code=422, detail="contents must be an object")
    for key, value in updates.items():
        setattr(pack, key, value)
    await db.commit()
    await db.refresh(pack)
    return {"pack": serialize_pack(pack)}


async def delete_pack_service(pack_id: str, db: AsyncSession) -> Dict[str, Any]:
    pack = await load_pack(pack_id, db)
    await db.delete(pack)
    await db.commit()
    return {"success": True}


async def duplicate_pack_service(pack_id: str, db: AsyncSession) -> Dict[str, Any]:
    original = await load_pack(pack_id, db)
    copy = Pack(
        project_id=original.project_id,
        reference_id=original.reference_id,
        offer_id=original.offer_id,
        platform=original.platform,
        contents=dict(original.contents or {}),
    )
    db.add(copy)
    await db.commit()
    await db.refresh(copy)
    return {"success": True, "pack": serialize_pack(copy)}


async def regenerate_pack_service(*, pack_id: str, model: Optional[str] = None, db: AsyncSession) -> Dict[str, Any]:
    pack = await load_pack(pack_id, db)
    outputs = await regenerate_pack_outputs(pack=pack, model=model, db=db)
    pack.contents = outputs
    await db.commit()
    await db.refresh(pack)
    logger.info("pack_regenerated id=%s", pack.id)
    return {"success": True, "pack": serialize_pack(pack)}
