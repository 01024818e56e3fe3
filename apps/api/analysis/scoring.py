"""
Viral score and engagement math for references.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _round2(value: float) -> float:
    # Half-up rounding to two decimals.
    return math.floor(value * 100 + 0.5) / 100


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def engagement_rate(views: Any, likes: Any, comments: Any) -> float:
    """Likes + comments as a percentage of views."""
    views_value = _number(views)
    if views_value <= 0:
        return 0.0
    return (_number(likes) + _number(comments)) / views_value * 100


def calculate_viral_score(metrics: Dict[str, Any]) -> float:
    """
    Score a reference on a 0-100 scale.

    Views contribute logarithmically, engagement rate linearly, and
    durations inside the 30-60s window get the full duration bonus.
    """
    views = max(_number(metrics.get("views")), 0.0)
    rate = _number(metrics.get("engagement_rate", metrics.get("engagementRate")))
    duration = _number(metrics.get("duration"))

    view_score = math.log10(views + 1) * 10
    engagement_multiplier = rate / 100 * 20
    if 30 <= duration <= 60:
        duration_score = 10.0
    else:
        duration_score = max(0.0, 10 - abs(45 - duration) * 0.2)

    total = min(100.0, view_score + engagement_multiplier + duration_score)
    return _round2(total)


def calculate_tiktok_viral_score(
    likes: Any,
    comments: Any,
    shares: Any,
    published_at: Any,
    now: Optional[datetime] = None,
) -> float:
    """Interactions per hour since posting, capped at 100."""
    interactions = _number(likes) + _number(comments) + _number(shares)
    current = now or datetime.now(timezone.utc)
    posted_epoch = _number(published_at)
    hours_since_post = (current.timestamp() - posted_epoch) / 3600
    score = interactions / max(hours_since_post, 1)
    return min(100.0, _round2(score))


def parse_iso_duration(duration: Optional[str]) -> int:
    """Parse ISO 8601 duration (PT#H#M#S) to seconds."""
    match = re.match(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?", duration or "")
    if not match:
        return 0

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)

    return hours * 3600 + minutes * 60 + seconds
