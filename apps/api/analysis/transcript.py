"""
Transcript heuristics and LLM refinement.

The heuristics are cheap and deterministic; the LLM pass may replace any
top-level section of the result, and any failure there leaves the heuristic
result untouched.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .models import Hook, Reasons, Scores, Stage, Structure, TranscriptAnalysis
from .prompts import LABELING_SYSTEM_PROMPT, create_labeling_prompt

logger = logging.getLogger(__name__)

HOOK_CUES = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"stop scrolling",
        r"wait",
        r"don'?t",
        r"here'?s why",
        r"the secret",
        r"nobody",
        r"you need to",
        r"3 (?:ways|tips|reasons)",
        r"what if",
    )
]
CTA_PATTERN = re.compile(r"(sign up|link in bio|follow|download|try|book|call|visit)", re.IGNORECASE)
REFINABLE_SECTIONS = ("hooks", "structure", "reasons", "scores")

DEFAULT_HOOK_CLARITY = 0.7
DEFAULT_PACING = 0.6


def _opening(transcript: str) -> str:
    pieces = re.split(r"\n|\.\s+", transcript)[:3]
    return " ".join(pieces)[:240]


def detect_hooks(transcript: str) -> List[Hook]:
    first = _opening(transcript)
    if any(cue.search(first) for cue in HOOK_CUES):
        hook_type = "Pattern interrupt"
    elif "?" in first:
        hook_type = "Curiosity gap"
    elif re.search(r"\d", first):
        hook_type = "Listicle"
    else:
        hook_type = "Direct promise"
    return [Hook(type=hook_type, line=first.strip())]


def segment_structure(transcript: str) -> Structure:
    """Fixed four-stage arc; the last stage is a CTA when the ending asks for action."""
    sentences = re.split(r"[.!?]\s+", transcript)[:20]
    tail = " ".join(sentences[-2:])
    cta_like = bool(CTA_PATTERN.search(tail))
    return Structure(
        stages=[
            Stage(name="Hook", t=0),
            Stage(name="Setup", t=3),
            Stage(name="Proof", t=7),
            Stage(name="CTA" if cta_like else "Payoff", t=15),
        ]
    )


def heuristic_reasons(transcript: str) -> Reasons:
    bullets: List[str] = []
    first = transcript[:200]
    if re.search(r"\byou\b", first, re.IGNORECASE):
        bullets.append("Direct address to viewer in first line")
    if re.search(r"\d", first):
        bullets.append("Specific numbers create concrete expectation")
    if "?" in first:
        bullets.append("Curiosity question early to open a loop")
    if not bullets:
        bullets.append("Clear, concise hook within first 3–5 seconds")
    return Reasons(bullets=bullets, evidence=[first.strip()])


def heuristic_analysis(transcript: str) -> TranscriptAnalysis:
    return TranscriptAnalysis(
        hooks=detect_hooks(transcript),
        structure=segment_structure(transcript),
        reasons=heuristic_reasons(transcript),
        scores=Scores(hook_clarity=DEFAULT_HOOK_CLARITY, pacing=DEFAULT_PACING),
    )


def merge_refinement(base: TranscriptAnalysis, refined: Any) -> TranscriptAnalysis:
    """Overlay refined top-level sections onto the heuristic base."""
    if not isinstance(refined, dict):
        return base
    overrides: Dict[str, Any] = {key: refined[key] for key in REFINABLE_SECTIONS if key in refined}
    if not overrides:
        return base
    merged = {**base.model_dump(), **overrides}
    try:
        return TranscriptAnalysis.model_validate(merged)
    except ValidationError as exc:
        logger.warning("Discarding malformed transcript refinement: %s", exc.errors()[:3])
        return base


async def analyze_transcript(
    reference: Any,
    transcript: str,
    model: Optional[str] = None,
) -> TranscriptAnalysis:
    """Heuristic analysis of a transcript, refined by the LLM when it cooperates."""
    from services.llm_client import chat_json, parse_json_object

    base = heuristic_analysis(transcript)
    reference_id = getattr(reference, "id", None) or (reference.get("id") if isinstance(reference, dict) else None)

    try:
        raw = await chat_json(LABELING_SYSTEM_PROMPT, create_labeling_prompt(transcript), model=model)
        refined = parse_json_object(raw)
    except Exception as exc:
        logger.warning("Transcript refinement skipped for reference=%s: %s", reference_id, exc)
        return base

    return merge_refinement(base, refined)
