"""Platform discovery services."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from analysis.scoring import calculate_viral_score, engagement_rate
from config import require_youtube_api_key
from ingestion.youtube import YouTubeAPIError, YouTubeClient, create_youtube_client_with_api_key
from services.references import upsert_reference_by_url

logger = logging.getLogger(__name__)

SEARCH_RESULTS = 25
TOP_RESULTS = 20


def _get_youtube_client() -> YouTubeClient:
    try:
        api_key = require_youtube_api_key()
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return create_youtube_client_with_api_key(api_key)


def youtube_video_to_reference(video: Dict[str, Any]) -> Dict[str, Any]:
    views = int(video.get("view_count", 0) or 0)
    likes = int(video.get("like_count", 0) or 0)
    comments = int(video.get("comment_count", 0) or 0)
    metrics = {
        "views": views,
        "likes": likes,
        "comments": comments,
        "engagement_rate": engagement_rate(views, likes, comments),
        "duration": int(video.get("duration_seconds", 0) or 0),
    }
    return {
        "id": video["id"],
        "platform": "youtube",
        "url": f"https://www.youtube.com/shorts/{video['id']}",
        "title": video.get("title", ""),
        "creator": video.get("channel_title", ""),
        "metrics": metrics,
        "viral_score": calculate_viral_score(metrics),
        "thumbnail_url": video.get("thumbnail_url"),
        "published_at": video.get("published_at"),
    }


def _fetch_youtube_shorts(niche: str) -> List[Dict[str, Any]]:
    client = _get_youtube_client()
    video_ids = client.search_short_videos(niche, max_results=SEARCH_RESULTS, region_code="US")
    if not video_ids:
        return []
    return client.get_video_details(video_ids)


async def discover_youtube_shorts(niche: str, db: AsyncSession) -> Dict[str, Any]:
    try:
        videos = await asyncio.to_thread(_fetch_youtube_shorts, niche)
    except YouTubeAPIError as exc:
        logger.error("YouTube discovery error niche=%s: %s", niche, exc)
        raise HTTPException(status_code=500, detail="Failed to discover YouTube Shorts") from exc

    items: List[Dict[str, Any]] = []
    for video in videos:
        try:
            items.append(youtube_video_to_reference(video))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping unparseable YouTube video %s: %s", video.get("id"), exc)

    items.sort(key=lambda item: item["viral_score"], reverse=True)
    top_items = items[:TOP_RESULTS]

    try:
        for item in top_items:
            await upsert_reference_by_url(item, db)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Database error saving discovered references: %s", exc)

    logger.info("discover_run platform=youtube niche=%s found=%s kept=%s", niche, len(items), len(top_items))
    return {
        "success": True,
        "items": top_items,
        "total": len(top_items),
    }


async def discover_service(*, platform: str, niche: str, db: AsyncSession) -> Dict[str, Any]:
    resolved = str(platform or "").strip().lower()
    query = str(niche or "").strip()
    if not resolved or not query:
        raise HTTPException(status_code=400, detail="Platform and niche are required")

    if resolved == "youtube":
        return await discover_youtube_shorts(query, db)
    if resolved == "instagram":
        raise HTTPException(status_code=501, detail="Instagram discovery not implemented yet")
    if resolved == "tiktok":
        raise HTTPException(status_code=501, detail="TikTok discovery not implemented yet")
    raise HTTPException(status_code=400, detail="Unsupported platform")
