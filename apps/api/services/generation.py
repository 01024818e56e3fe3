"""Content-pack generation jobs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from analysis.models import Offer
from database import async_session_maker
from models.content_reference import ContentReference
from models.generation_job import GenerationJob
from models.offer_profile import OfferProfile
from models.pack import Pack
from services.content_llm import ContentGenerationError, generate_content
from services.references import load_analysis, load_reference, normalize_platform, reference_context

logger = logging.getLogger(__name__)

IN_PROGRESS_STATUSES = ("pending", "processing")


def serialize_job(job: GenerationJob) -> Dict[str, Any]:
    return {
        "id": job.id,
        "reference_id": job.reference_id,
        "offer": job.offer,
        "outputs": job.outputs,
        "status": job.status,
        "error_message": job.error_message,
        "pack_id": job.pack_id,
        "model": job.model,
        "created_at": job.created_at.isoformat() if job.created_at else None,
        "updated_at": job.updated_at.isoformat() if job.updated_at else None,
    }


async def resolve_offer(
    offer: Optional[Dict[str, Any]],
    offer_id: Optional[str],
    db: AsyncSession,
) -> Tuple[Offer, Optional[str]]:
    """Saved offer profile wins over an inline offer when offer_id resolves."""
    if offer_id:
        result = await db.execute(select(OfferProfile).where(OfferProfile.id == offer_id))
        profile = result.scalar_one_or_none()
        if profile:
            return (
                Offer(problem=profile.problem, promise=profile.promise, proof=profile.proof, pitch=profile.pitch),
                profile.id,
            )
        logger.warning("Offer profile %s not found, falling back to inline offer", offer_id)
    if offer:
        return Offer.model_validate(offer), None
    raise HTTPException(status_code=400, detail="An offer or a valid offer_id is required")


async def _mark_job_failed(job: GenerationJob, message: str, db: AsyncSession) -> None:
    job.status = "failed"
    job.error_message = message
    await db.commit()


async def _generate_outputs(
    *,
    job: GenerationJob,
    reference: ContentReference,
    platform: str,
    offer: Offer,
    model: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    """Run the LLM for a job that is already persisted; marks the job failed on error."""
    job.status = "processing"
    await db.commit()

    analysis = await load_analysis(reference.id, db)
    why_worked = list(analysis.why_worked or []) if analysis else None
    try:
        output = await generate_content(
            platform,
            reference_context(reference),
            offer,
            why_worked=why_worked,
            model=model,
        )
    except (ContentGenerationError, ValidationError) as exc:
        logger.error("Content generation error job=%s: %s", job.id, exc)
        await _mark_job_failed(job, str(exc), db)
        raise HTTPException(
            status_code=500,
            detail={"error": "Content generation failed", "details": str(exc), "job_id": job.id},
        ) from exc
    return output.model_dump(exclude_none=True)


async def generate_pack_service(
    *,
    reference_id: str,
    platform: str,
    project_id: str,
    offer: Optional[Dict[str, Any]],
    offer_id: Optional[str],
    model: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    resolved_platform = normalize_platform(platform)
    reference = await load_reference(reference_id, db)
    effective_offer, resolved_offer_id = await resolve_offer(offer, offer_id, db)

    job = GenerationJob(
        reference_id=reference_id,
        offer=effective_offer.model_dump(),
        status="pending",
        model=model,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    outputs = await _generate_outputs(
        job=job,
        reference=reference,
        platform=resolved_platform,
        offer=effective_offer,
        model=model,
        db=db,
    )

    job_id = job.id
    try:
        pack = Pack(
            project_id=project_id,
            reference_id=reference_id,
            offer_id=resolved_offer_id,
            platform=resolved_platform,
            contents=outputs,
        )
        db.add(pack)
        await db.flush()
        job.outputs = outputs
        job.status = "completed"
        job.pack_id = pack.id
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Failed to store pack for job=%s: %s", job_id, exc)
        # Rollback expires loaded state.
        await db.refresh(job)
        await _mark_job_failed(job, f"Failed to store pack: {exc}", db)
        raise HTTPException(
            status_code=500,
            detail={"error": "Content generation failed", "details": "Failed to store pack", "job_id": job_id},
        ) from exc

    logger.info("generation_completed job=%s pack=%s platform=%s", job.id, pack.id, resolved_platform)
    return {
        "success": True,
        "job_id": job.id,
        "pack_id": pack.id,
        "outputs": outputs,
        "message": "Content generation completed successfully",
    }


async def regenerate_pack_outputs(
    *,
    pack: Pack,
    model: Optional[str],
    db: AsyncSession,
) -> Dict[str, Any]:
    """Re-run generation for an existing pack's reference/offer; records a new job."""
    if not pack.reference_id:
        raise HTTPException(status_code=400, detail="Pack has no reference to regenerate from")
    reference = await load_reference(pack.reference_id, db)
    effective_offer, _ = await resolve_offer(None, pack.offer_id, db)

    job = GenerationJob(
        reference_id=reference.id,
        offer=effective_offer.model_dump(),
        status="pending",
        model=model,
        pack_id=pack.id,
    )
    db.add(job)
    await db.commit()

    outputs = await _generate_outputs(
        job=job,
        reference=reference,
        platform=pack.platform,
        offer=effective_offer,
        model=model,
        db=db,
    )
    job.outputs = outputs
    job.status = "completed"
    return outputs


async def get_generation_job_service(job_id: str, db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(select(GenerationJob).where(GenerationJob.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Generation job not found")
    return {"success": True, "job": serialize_job(job)}


async def recover_stalled_generation_jobs(max_age_minutes: int = 30) -> int:
    """Mark generation jobs left pending/processing by a restart as failed."""
    cutoff = datetime.now(timezone.utc) - timedelta(minutes=max(max_age_minutes, 1))
    async with async_session_maker() as db:
        result = await db.execute(
            select(GenerationJob).where(
                GenerationJob.status.in_(IN_PROGRESS_STATUSES),
                GenerationJob.created_at < cutoff,
            )
        )
        jobs = result.scalars().all()
        for job in jobs:
            job.status = "failed"
            job.error_message = "Generation was interrupted. Re-run generation for this reference."
        if jobs:
            await db.commit()
        return len(jobs)
