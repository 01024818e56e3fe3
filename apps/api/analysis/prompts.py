"""
Prompt builders for reference analysis and pack generation.
"""

from typing import List, Optional

from .models import Offer, ReferenceContext


ANALYSIS_SYSTEM_PROMPT = "You are a senior content strategist and analyst. You MUST output strictly valid JSON."
GENERATION_SYSTEM_PROMPT = "You are a professional scriptwriter and content creator. You MUST output strictly valid JSON."
LABELING_SYSTEM_PROMPT = "You label short-form videos. Output STRICT JSON with keys hooks, structure, reasons, scores."

DEFAULT_WHY_IT_WORKED = "Strong hook and engaging content"

PLATFORM_HINTS = {
    "youtube": (
        "Format for YouTube Shorts (≤60s). 1:1 or 9:16 framing. Hook in ≤3s.\n"
        "Keep spoken lines short. Include on-screen text cues in [TEXT] brackets."
    ),
    "instagram": (
        "Format for Instagram Reels (≤60s). Emphasize visual transitions;\n"
        "front-load novelty. Keep copy friendly and hashtag list compact (≤8)."
    ),
    "tiktok": (
        "Format for TikTok (≤60s). Pattern interrupt in first 2s.\n"
        "Use rhythmic phrasing; avoid platform-ban phrases. Use 3-6 focused hashtags."
    ),
}


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def create_labeling_prompt(transcript: str) -> str:
    return (
        f"Transcript:\n{transcript}\n\n"
        "Return JSON: { hooks:[{type,line?}], structure:{stages:[{name,t?}]}, "
        "reasons:{bullets:[...] , evidence:[...]}, scores:{hook_clarity:0..1,pacing:0..1} }"
    )


def create_analysis_prompt(reference: ReferenceContext) -> str:
    metrics = reference.metrics
    return f"""
ANALYZE VIRAL CONTENT - {reference.platform.upper()}
Title: {reference.title}
Creator: {reference.creator}
Views: {metrics.views}
Engagement Rate: {_format_number(metrics.engagement_rate)}%
Duration: {_format_number(metrics.duration)}s
Transcript: {reference.transcript or 'No transcript available'}

TASK: Identify why this content performed well using cross-platform patterns.

Focus on:
1. Hook effectiveness (first 3 seconds)
2. Content structure and pacing
3. Emotional triggers
4. Platform-specific optimization
5. Content length effectiveness

Return JSON with:
- hooks: array of {{type, timestamp, text}}
- structure: {{pacing, segments}}
- content_metrics: {{duration, text_density, hook_timing}}
- why_worked: array of 3-5 bullet points
- analysis_score: decimal 0-100

Constraints:
- Hook types: question, shock, story, stat, problem
- Pacing: fast, medium, slow
- Segment types: hook, setup, proof, payoff, cta
- Timestamps in seconds
- Analysis score should reflect overall quality and virality potential
"""


def _why_it_worked(reference: ReferenceContext, why_worked: Optional[List[str]]) -> str:
    bullets = [str(item).strip() for item in (why_worked or []) if str(item).strip()]
    if bullets:
        return "; ".join(bullets)
    if reference.transcript:
        return reference.transcript[:200]
    return DEFAULT_WHY_IT_WORKED


def create_generation_prompt(
    platform: str,
    reference: ReferenceContext,
    offer: Offer,
    why_worked: Optional[List[str]] = None,
) -> str:
    hints = PLATFORM_HINTS.get(platform)
    if hints is None:
        raise ValueError(f"Unsupported platform: {platform}")

    return f"""
CREATE {platform.upper()} CONTENT PACK
Platform: {platform}
Reference: {reference.title}
Why it worked: {_why_it_worked(reference, why_worked)}
Offer: Problem: {offer.problem}, Promise: {offer.promise}, Proof: {offer.proof}, Pitch: {offer.pitch}

GUIDELINES:
{hints}

TASK: Generate comprehensive platform-native content pack based on successful patterns and offer integration.

Return JSON with:
- script: complete primary script with [TEXT: cues]
- script_variants: array of 3-5 alternative hook variants
- captions: 1-2 sentences ending with CTA
- hashtags: array of 4-8 niche-specific tags
- beats: array of {{t, beat}} for timeline
- beat_sheet: detailed beat sheet with types (hook, setup, proof, payoff, cta, transition)
- broll: array of {{t, cue, shot_type?, keywords?}} for visual elements
- thumbnail_brief: concrete visual guidance with composition details
- subtitles: valid SRT format
- vo_script: voice-over script for 11Labs (if applicable)

Constraints:
- Script: Hook → Setup → Proof → Payoff → CTA
- Keep it engaging and platform-optimized
- Include specific CTAs and value propositions
- Generate multiple hook variants for flexibility
- Include detailed beat sheet with timing and types
- Provide shot type and keyword information for b-roll
- Create thumbnail brief with concrete visual guidance
- Generate subtitles in proper SRT format
"""


def create_suggestion_prompts(niche: str) -> tuple:
    """System/user prompt pair for TikTok creator + hashtag suggestions."""
    system = (
        "You suggest TikTok creators and hashtags for a given niche. "
        "Return STRICT JSON with {creators: string[], hashtags: string[]}."
    )
    user = f"Niche: {niche}\n\nSuggest 5-10 relevant TikTok creators and 5-10 relevant hashtags."
    return system, user
