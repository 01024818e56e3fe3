"""Reference analysis service: heuristics, LLM refinement, persistence."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from analysis.transcript import analyze_transcript
from models.analysis import Analysis
from services.content_llm import ContentAnalysisError, analyze_content
from services.references import load_analysis, load_reference, reference_context, serialize_analysis

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_CHARS = 20


async def analyze_reference_service(
    *,
    reference_id: str,
    deep: bool = False,
    model: Optional[str] = None,
    db: AsyncSession,
) -> Dict[str, Any]:
    reference = await load_reference(reference_id, db)

    existing = await load_analysis(reference_id, db)
    if existing:
        return {
            "success": True,
            "message": "Analysis already exists",
            "analysis": serialize_analysis(existing),
        }

    transcript = reference.transcript or ""
    if len(transcript) < MIN_TRANSCRIPT_CHARS:
        raise HTTPException(status_code=400, detail="Transcript missing")

    result = await analyze_transcript(reference, transcript, model=model)

    content_metrics = None
    analysis_score = None
    if deep:
        try:
            deep_result = await analyze_content(reference_context(reference), model=model)
        except (ContentAnalysisError, ValidationError) as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        content_metrics = deep_result.content_metrics.model_dump()
        analysis_score = deep_result.analysis_score

    analysis = Analysis(
        reference_id=reference_id,
        hooks=[hook.model_dump(exclude_none=True) for hook in result.hooks],
        structure=result.structure.model_dump(exclude_none=True),
        reasons=result.reasons.model_dump(),
        scores=result.scores.model_dump(exclude_none=True),
        why_worked=list(result.reasons.bullets),
        content_metrics=content_metrics,
        analysis_score=analysis_score,
    )
    db.add(analysis)
    await db.commit()
    await db.refresh(analysis)
    logger.info(
        "analysis_saved reference=%s hook=%s deep=%s",
        reference_id,
        result.hooks[0].type if result.hooks else None,
        deep,
    )
    return {
        "success": True,
        "analysis": serialize_analysis(analysis),
        "message": "Analysis completed successfully",
    }
