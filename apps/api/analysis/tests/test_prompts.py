import pytest

from analysis.models import Offer, ReferenceContext
from analysis.prompts import (
    DEFAULT_WHY_IT_WORKED,
    create_analysis_prompt,
    create_generation_prompt,
    create_labeling_prompt,
    create_suggestion_prompts,
)


OFFER = Offer(
    problem="Inconsistent posting",
    promise="A month of content in a day",
    proof="300 creators",
    pitch="Start the free trial",
)


def _reference(**overrides):
    data = {
        "id": "ref-1",
        "platform": "youtube",
        "url": "https://www.youtube.com/shorts/abc",
        "title": "Batch a month of content",
        "creator": "Creator Ops",
        "metrics": {"views": 50000, "likes": 3000, "comments": 200, "engagementRate": 6.4, "duration": 42},
        "transcript": "You are posting wrong. Here is the fix.",
    }
    data.update(overrides)
    return ReferenceContext(**data)


def test_labeling_prompt_embeds_transcript():
    prompt = create_labeling_prompt("hello world")
    assert prompt.startswith("Transcript:\nhello world")
    assert "hook_clarity:0..1" in prompt


def test_analysis_prompt_lists_metrics():
    prompt = create_analysis_prompt(_reference())
    assert "ANALYZE VIRAL CONTENT - YOUTUBE" in prompt
    assert "Views: 50000" in prompt
    assert "Engagement Rate: 6.4%" in prompt
    assert "Duration: 42s" in prompt
    assert "You are posting wrong." in prompt


def test_analysis_prompt_without_transcript():
    prompt = create_analysis_prompt(_reference(transcript=None))
    assert "Transcript: No transcript available" in prompt


@pytest.mark.parametrize(
    "platform, hint",
    [
        ("youtube", "YouTube Shorts"),
        ("instagram", "Instagram Reels"),
        ("tiktok", "Pattern interrupt in first 2s"),
    ],
)
def test_generation_prompt_platform_hints(platform, hint):
    prompt = create_generation_prompt(platform, _reference(), OFFER)
    assert f"CREATE {platform.upper()} CONTENT PACK" in prompt
    assert hint in prompt
    assert "Promise: A month of content in a day" in prompt
    assert "subtitles: valid SRT format" in prompt


def test_generation_prompt_why_it_worked_sources():
    with_analysis = create_generation_prompt("youtube", _reference(), OFFER, why_worked=["Bold claim", "Fast cut"])
    assert "Why it worked: Bold claim; Fast cut" in with_analysis

    from_transcript = create_generation_prompt("youtube", _reference(transcript="x" * 300), OFFER)
    assert f"Why it worked: {'x' * 200}\n" in from_transcript

    fallback = create_generation_prompt("youtube", _reference(transcript=None), OFFER, why_worked=[" "])
    assert f"Why it worked: {DEFAULT_WHY_IT_WORKED}" in fallback


def test_generation_prompt_rejects_unknown_platform():
    with pytest.raises(ValueError):
        create_generation_prompt("vine", _reference(), OFFER)


def test_suggestion_prompts():
    system, user = create_suggestion_prompts("home workouts")
    assert "creators: string[]" in system
    assert user.startswith("Niche: home workouts")


def test_reference_metrics_coerce_missing_counts():
    reference = _reference(metrics={"views": None, "likes": "1200", "comments": "n/a", "duration": None})
    assert reference.metrics.views == 0
    assert reference.metrics.likes == 1200
    assert reference.metrics.comments == 0
    assert reference.metrics.duration == 0
    assert "Views: 0" in create_analysis_prompt(reference)
