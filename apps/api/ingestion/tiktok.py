"""
Thin TikTok web API client used by watchlist polling.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from analysis.scoring import calculate_tiktok_viral_score, engagement_rate
from config import settings

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 100


class TikTokAPIError(RuntimeError):
    """Raised when a TikTok search request fails."""


def _first_url(node: Any) -> str:
    if isinstance(node, dict):
        urls = node.get("url_list") or []
        if urls:
            return str(urls[0])
    return ""


def parse_tiktok_video(video_data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize an aweme payload into a flat video dict."""
    stats = video_data.get("statistics") or video_data.get("stats") or {}
    author = video_data.get("author") or {}
    music = video_data.get("music") or {}
    video_id = str(video_data.get("aweme_id", ""))
    username = author.get("unique_id", "")

    return {
        "id": video_id,
        "url": f"https://www.tiktok.com/@{username}/video/{video_id}",
        "title": video_data.get("desc") or "",
        "creator": {
            "id": author.get("uid"),
            "username": username,
            "nickname": author.get("nickname"),
            "avatar": _first_url(author.get("avatar_thumb")),
        },
        "metrics": {
            "views": int(stats.get("play_count", 0) or 0),
            "likes": int(stats.get("digg_count", 0) or 0),
            "comments": int(stats.get("comment_count", 0) or 0),
            "shares": int(stats.get("share_count", 0) or 0),
            "duration": video_data.get("duration", 0) or 0,
        },
        "thumbnail": _first_url(video_data.get("cover")),
        "published_at": video_data.get("create_time"),
        "music": {
            "id": music.get("id"),
            "title": music.get("title", ""),
            "author": music.get("author", ""),
        } if music.get("id") else None,
    }


def format_tiktok_video(video: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Shape a parsed TikTok video as a content reference payload."""
    metrics = video.get("metrics", {})
    title = video.get("title") or ""
    if len(title) > TITLE_MAX_CHARS:
        title = title[:TITLE_MAX_CHARS] + "..."
    duration = metrics.get("duration", 0) or 0
    # Some endpoints report duration in milliseconds.
    if duration > 1000:
        duration = round(duration / 1000)

    return {
        "platform": "tiktok",
        "url": video.get("url"),
        "title": title,
        "creator": video.get("creator", {}).get("username") or "",
        "metrics": {
            "views": metrics.get("views", 0),
            "likes": metrics.get("likes", 0),
            "comments": metrics.get("comments", 0),
            "shares": metrics.get("shares", 0),
            "engagement_rate": round(engagement_rate(metrics.get("views"), metrics.get("likes"), metrics.get("comments")), 4),
            "duration": duration,
        },
        "viral_score": calculate_tiktok_viral_score(
            metrics.get("likes"),
            metrics.get("comments"),
            metrics.get("shares"),
            video.get("published_at"),
            now=now,
        ),
        "thumbnail_url": video.get("thumbnail") or None,
        "published_at": str(video["published_at"]) if video.get("published_at") is not None else None,
    }


class TikTokClient:
    """Async client over TikTok's public (unofficial) endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: float = 15.0):
        self.base_url = (base_url or settings.TIKTOK_API_BASE).rstrip("/")
        self.timeout = timeout

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()

    async def get_video_by_id(self, video_id: str) -> Optional[Dict[str, Any]]:
        try:
            payload = await self._get("/video/detail/", {"aweme_id": video_id, "language": "en"})
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("TikTok video fetch failed id=%s: %s", video_id, exc)
            return None
        video_data = payload.get("aweme_detail")
        if not video_data:
            logger.warning("TikTok video not found id=%s", video_id)
            return None
        return parse_tiktok_video(video_data)


    async def search_videos(self, keyword: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Keyword search; items lacking stats are re-fetched by id."""
        try:
            payload = await self._get(
                "/search/general/",
                {"keyword": keyword, "count": limit, "language": "en"},
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise TikTokAPIError(f"Failed to search TikTok for '{keyword}': {exc}") from exc

        videos: List[Dict[str, Any]] = []
        for item in payload.get("data") or []:
            aweme = item.get("aweme_info") if isinstance(item.get("aweme_info"), dict) else item
            if not aweme.get("aweme_id"):
                continue
            if aweme.get("statistics") or aweme.get("stats"):
                videos.append(parse_tiktok_video(aweme))
            else:
                video = await self.get_video_by_id(str(aweme["aweme_id"]))
                if video:
                    videos.append(video)
            if len(videos) >= limit:
                break
        return videos[:limit]

    async def search_by_hashtag(self, hashtag: str, limit: int = 20) -> List[Dict[str, Any]]:
        return await self.search_videos(hashtag.lstrip("#"), limit=limit)

    async def search_by_creator(self, handle: str, limit: int = 20) -> List[Dict[str, Any]]:
        username = handle.lstrip("@").lower()
        videos = await self.search_videos(f"@{username}", limit=limit)
        return [video for video in videos if (video["creator"].get("username") or "").lower() == username]
