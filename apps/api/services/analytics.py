"""Dashboard summary counts."""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.analysis import Analysis
from models.content_reference import ContentReference
from models.generation_job import GENERATION_JOB_STATUSES, GenerationJob
from models.pack import Pack


async def _count(db: AsyncSession, model) -> int:
    return int((await db.execute(select(func.count()).select_from(model))).scalar() or 0)


async def analytics_summary_service(db: AsyncSession) -> Dict[str, Any]:
    platform_rows = await db.execute(
        select(ContentReference.platform, func.count()).group_by(ContentReference.platform)
    )
    status_rows = await db.execute(
        select(GenerationJob.status, func.count()).group_by(GenerationJob.status)
    )
    average = (await db.execute(select(func.avg(ContentReference.viral_score)))).scalar()

    jobs_by_status = {status: 0 for status in GENERATION_JOB_STATUSES}
    for status, count in status_rows.all():
        jobs_by_status[status] = int(count)

    return {
        "success": True,
        "summary": {
            "references": await _count(db, ContentReference),
            "analyses": await _count(db, Analysis),
            "generation_jobs": await _count(db, GenerationJob),
            "packs": await _count(db, Pack),
            "references_by_platform": {platform: int(count) for platform, count in platform_rows.all()},
            "jobs_by_status": jobs_by_status,
            "average_viral_score": round(float(average), 2) if average is not None else None,
        },
    }
