"""Content reference listing/creation services."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from analysis.models import ALLOWED_PLATFORMS, ReferenceContext
from analysis.scoring import calculate_viral_score, engagement_rate
from models.analysis import Analysis
from models.content_reference import ContentReference

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = (
    "platform",
    "url",
    "title",
    "creator",
    "metrics",
    "transcript",
    "viral_score",
    "thumbnail_url",
    "published_at",
    "watchlist_id",
    "source_item_id",
)


def _normalize_text(value: Any) -> str:
    return str(value or "").strip()


def normalize_platform(value: Optional[str]) -> str:
    platform = _normalize_text(value).lower()
    if platform not in ALLOWED_PLATFORMS:
        raise HTTPException(
            status_code=422,
            detail="Invalid platform. Must be one of: youtube, instagram, tiktok",
        )
    return platform


def _isoformat(value: Any) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_analysis(row: Optional[Analysis]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {
        "id": row.id,
        "reference_id": row.reference_id,
        "hooks": row.hooks or [],
        "structure": row.structure or {},
        "reasons": row.reasons or {},
        "scores": row.scores or {},
        "why_worked": row.why_worked or [],
        "content_metrics": row.content_metrics,
        "analysis_score": row.analysis_score,
        "created_at": _isoformat(row.created_at),
        "updated_at": _isoformat(row.updated_at),
    }


def serialize_reference(row: ContentReference, analysis: Optional[Analysis] = None, enrich: bool = False) -> Dict[str, Any]:
    payload = {
        "id": row.id,
        "platform": row.platform,
        "url": row.url,
        "title": row.title,
        "creator": row.creator,
        "metrics": row.metrics if isinstance(row.metrics, dict) else {},
        "transcript": row.transcript,
        "viral_score": row.viral_score,
        "thumbnail_url": row.thumbnail_url,
        "published_at": row.published_at,
        "watchlist_id": row.watchlist_id,
        "source_item_id": row.source_item_id,
        "created_at": _isoformat(row.created_at),
        "updated_at": _isoformat(row.updated_at),
    }
    if enrich:
        payload["analysis"] = serialize_analysis(analysis)
    return payload


def reference_context(row: ContentReference) -> ReferenceContext:
    """Prompt-facing view of a stored reference."""
    return ReferenceContext(
        id=row.id,
        platform=row.platform,
        url=row.url,
        title=row.title or "",
        creator=row.creator or "",
        metrics=row.metrics if isinstance(row.metrics, dict) else {},
        transcript=row.transcript,
        viral_score=row.viral_score,
        thumbnail_url=row.thumbnail_url,
    )


def normalize_metrics(metrics: Dict[str, Any]) -> Dict[str, Any]:
    """Fill engagement_rate when only raw counts were supplied."""
    normalized = dict(metrics or {})
    if "engagementRate" in normalized and "engagement_rate" not in normalized:
        normalized["engagement_rate"] = normalized.pop("engagementRate")
    if "engagement_rate" not in normalized:
        normalized["engagement_rate"] = round(
            engagement_rate(normalized.get("views"), normalized.get("likes"), normalized.get("comments")),
            4,
        )
    return normalized


async def load_reference(reference_id: str, db: AsyncSession) -> ContentReference:
    result = await db.execute(select(ContentReference).where(ContentReference.id == reference_id))
    reference = result.scalar_one_or_none()
    if not reference:
        raise HTTPException(status_code=404, detail="Reference not found")
    return reference


async def load_analysis(reference_id: str, db: AsyncSession) -> Optional[Analysis]:
    result = await db.execute(select(Analysis).where(Analysis.reference_id == reference_id))
    return result.scalar_one_or_none()


async def upsert_reference_by_url(payload: Dict[str, Any], db: AsyncSession) -> ContentReference:
    """Insert a reference, or refresh the existing row with the same URL. Does not commit."""
    result = await db.execute(select(ContentReference).where(ContentReference.url == payload["url"]))
    row = result.scalar_one_or_none()
    if row is None:
        row = ContentReference(**{key: payload[key] for key in REFERENCE_FIELDS if key in payload})
        db.add(row)
    else:
        for key in REFERENCE_FIELDS:
            if key in payload and key != "url" and payload[key] is not None:
                setattr(row, key, payload[key])
    await db.flush()
    return row


async def list_references_service(
    *,
    platform: Optional[str],
    limit: int,
    offset: int,
    db: AsyncSession,
) -> Dict[str, Any]:
    query = select(ContentReference)
    count_query = select(func.count()).select_from(ContentReference)
    if platform:
        resolved = normalize_platform(platform)
        query = query.where(ContentReference.platform == resolved)
        count_query = count_query.where(ContentReference.platform == resolved)

    query = (
        query.order_by(ContentReference.viral_score.desc().nulls_last(), ContentReference.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = (await db.execute(query)).scalars().all()
    total = int((await db.execute(count_query)).scalar() or 0)

    analyses: Dict[str, Analysis] = {}
    if rows:
        analysis_result = await db.execute(
            select(Analysis).where(Analysis.reference_id.in_([row.id for row in rows]))
        )
        analyses = {row.reference_id: row for row in analysis_result.scalars().all()}

    return {
        "success": True,
        "references": [serialize_reference(row, analyses.get(row.id), enrich=True) for row in rows],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


async def create_reference_service(*, payload: Dict[str, Any], db: AsyncSession) -> Dict[str, Any]:
    platform = normalize_platform(payload.get("platform"))
    metrics = normalize_metrics(payload.get("metrics") or {})
    viral_score = payload.get("viral_score")
    if viral_score is None:
        viral_score = calculate_viral_score(metrics)

    reference = ContentReference(
        platform=platform,
        url=_normalize_text(payload.get("url")),
        title=_normalize_text(payload.get("title")),
        creator=_normalize_text(payload.get("creator")),
        metrics=metrics,
        transcript=payload.get("transcript"),
        viral_score=viral_score,
        thumbnail_url=payload.get("thumbnail_url"),
        published_at=payload.get("published_at"),
    )
    db.add(reference)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(status_code=409, detail="A reference with this url already exists") from exc
    await db.refresh(reference)
    logger.info("reference_created id=%s platform=%s viral_score=%s", reference.id, platform, viral_score)
    return {
        "success": True,
        "reference": serialize_reference(reference),
        "message": "Reference created successfully",
    }


async def get_reference_service(reference_id: str, db: AsyncSession) -> Dict[str, Any]:
    reference = await load_reference(reference_id, db)
    analysis = await load_analysis(reference_id, db)
    return {
        "success": True,
        "reference": serialize_reference(reference, analysis, enrich=True),
    }
