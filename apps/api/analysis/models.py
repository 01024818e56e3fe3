"""
Analysis and generation schemas.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import AliasChoices, BaseModel, Field, field_validator

from .scoring import _number


ALLOWED_PLATFORMS = ("youtube", "instagram", "tiktok")


# --- Transcript heuristics + refinement ---

class Hook(BaseModel):
    type: str
    line: Optional[str] = None


class Stage(BaseModel):
    name: str
    t: Optional[float] = None


class Structure(BaseModel):
    stages: List[Stage]


class Reasons(BaseModel):
    bullets: List[str]
    evidence: List[str] = []


class Scores(BaseModel):
    hook_clarity: Optional[float] = Field(default=None, ge=0, le=1)
    pacing: Optional[float] = Field(default=None, ge=0, le=1)


class TranscriptAnalysis(BaseModel):
    """Structured breakdown of a transcript: what hooked viewers and why."""
    hooks: List[Hook]
    structure: Structure
    reasons: Reasons
    scores: Scores


# --- Deep (prompted) analysis ---

class TimedHook(BaseModel):
    type: str           # question|shock|story|stat|problem
    timestamp: float = 0
    text: str = ""


class Segment(BaseModel):
    type: str           # hook|setup|proof|payoff|cta
    start: float
    end: float


class PacedStructure(BaseModel):
    pacing: str         # fast|medium|slow
    segments: List[Segment] = []


class ContentMetrics(BaseModel):
    duration: float = 0
    text_density: float = Field(default=0, validation_alias=AliasChoices("text_density", "textDensity"))
    hook_timing: float = Field(default=0, validation_alias=AliasChoices("hook_timing", "hookTiming"))


class AnalysisResult(BaseModel):
    hooks: List[TimedHook]
    structure: PacedStructure
    content_metrics: ContentMetrics = Field(validation_alias=AliasChoices("content_metrics", "contentMetrics"))
    why_worked: List[str] = Field(validation_alias=AliasChoices("why_worked", "whyWorked"))
    analysis_score: Optional[float] = Field(
        default=0,
        validation_alias=AliasChoices("analysis_score", "analysisScore"),
    )


# --- Generation ---

class Offer(BaseModel):
    problem: str
    promise: str
    proof: str
    pitch: str


class Beat(BaseModel):
    t: Union[float, str]
    beat: str


class SheetBeat(Beat):
    type: str           # hook|setup|proof|payoff|cta|transition


class BrollCue(BaseModel):
    t: Union[float, str]
    cue: str
    shot_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("shot_type", "shotType"))
    keywords: List[str] = []


class GenerationOutput(BaseModel):
    """Everything needed to produce one platform-native piece of content."""
    script: str
    script_variants: List[Union[str, Dict[str, Any]]]
    captions: Union[str, List[str]]
    hashtags: List[str]
    beats: List[Beat]
    beat_sheet: List[SheetBeat]
    broll: List[BrollCue]
    thumbnail_brief: str
    subtitles: str
    vo_script: Optional[str] = None


# --- Reference context handed to prompts ---

class ReferenceMetrics(BaseModel):
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    engagement_rate: float = Field(default=0, validation_alias=AliasChoices("engagement_rate", "engagementRate"))
    duration: float = 0

    @field_validator("views", "likes", "comments", "shares", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        """Stored metrics are free-form; null or unparseable counts read as 0."""
        return int(_number(value))

    @field_validator("engagement_rate", "duration", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float:
        return _number(value)


class ReferenceContext(BaseModel):
    id: str
    platform: str
    url: str
    title: str
    creator: str
    metrics: ReferenceMetrics = ReferenceMetrics()
    transcript: Optional[str] = None
    viral_score: Optional[float] = None
    thumbnail_url: Optional[str] = None
