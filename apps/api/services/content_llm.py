"""LLM-backed deep analysis and content-pack generation."""

from __future__ import annotations

import logging
from typing import List, Optional

from analysis.models import AnalysisResult, GenerationOutput, Offer, ReferenceContext
from analysis.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    GENERATION_SYSTEM_PROMPT,
    create_analysis_prompt,
    create_generation_prompt,
)
from services import llm_client

logger = logging.getLogger(__name__)

REQUIRED_GENERATION_FIELDS = (
    "script",
    "script_variants",
    "captions",
    "hashtags",
    "beats",
    "beat_sheet",
    "broll",
    "thumbnail_brief",
    "subtitles",
)
REQUIRED_ANALYSIS_FIELDS = (
    ("hooks",),
    ("structure",),
    ("content_metrics", "contentMetrics"),
    ("why_worked", "whyWorked"),
)


class ContentAnalysisError(RuntimeError):
    pass


class ContentGenerationError(RuntimeError):
    pass


async def analyze_content(reference: ReferenceContext, model: Optional[str] = None) -> AnalysisResult:
    """Ask the LLM why a reference performed well and validate the answer."""
    prompt = create_analysis_prompt(reference)
    try:
        response = await llm_client.chat_json(ANALYSIS_SYSTEM_PROMPT, prompt, model=model)
        parsed = llm_client.parse_json_object(response)
        for aliases in REQUIRED_ANALYSIS_FIELDS:
            if not any(parsed.get(key) for key in aliases):
                raise ValueError("Invalid analysis response structure")
        result = AnalysisResult.model_validate(parsed)
        if result.analysis_score is None:
            result.analysis_score = 0
        return result
    except Exception as exc:
        logger.error("Analysis failed for reference=%s: %s", reference.id, exc)
        raise ContentAnalysisError(f"Content analysis failed: {exc}") from exc


async def generate_content(
    platform: str,
    reference: ReferenceContext,
    offer: Offer,
    why_worked: Optional[List[str]] = None,
    model: Optional[str] = None,
) -> GenerationOutput:
    """Draft a platform-native content pack modeled on a reference and an offer."""
    try:
        prompt = create_generation_prompt(platform, reference, offer, why_worked=why_worked)
        response = await llm_client.chat_json(GENERATION_SYSTEM_PROMPT, prompt, model=model)
        parsed = llm_client.parse_json_object(response)
        for field in REQUIRED_GENERATION_FIELDS:
            if not parsed.get(field):
                raise ValueError(f"Missing required field: {field}")
        return GenerationOutput.model_validate(parsed)
    except Exception as exc:
        logger.error("Generation failed for reference=%s platform=%s: %s", reference.id, platform, exc)
        raise ContentGenerationError(f"Content generation failed: {exc}") from exc
