"""TikTok watchlists: creation, polling and LLM suggestions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from analysis.prompts import create_suggestion_prompts
from ingestion.tiktok import TikTokAPIError, TikTokClient, format_tiktok_video
from models.tiktok_watchlist import TikTokWatchItem, TikTokWatchlist
from services import llm_client
from services.references import upsert_reference_by_url

logger = logging.getLogger(__name__)

WATCH_ITEM_TYPES = ("creator", "hashtag")
VIDEOS_PER_ITEM = 5


def _clean_handle(value: Optional[str]) -> Optional[str]:
    text = str(value or "").strip().lstrip("@")
    return text or None


def _clean_hashtag(value: Any) -> str:
    return str(value or "").strip().lstrip("#").lower()


def _validate_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    cleaned: List[Dict[str, Any]] = []
    for index, item in enumerate(items):
        item_type = str(item.get("type") or item.get("item_type") or "").strip().lower()
        if item_type not in WATCH_ITEM_TYPES:
            raise HTTPException(status_code=400, detail=f"items[{index}].type must be creator or hashtag")
        handle = _clean_handle(item.get("handle"))
        hashtag = _clean_hashtag(item.get("hashtag")) or None
        if item_type == "creator" and not handle:
            raise HTTPException(status_code=400, detail=f"items[{index}].handle is required for creators")
        if item_type == "hashtag" and not hashtag:
            raise HTTPException(status_code=400, detail=f"items[{index}].hashtag is required for hashtags")
        cleaned.append(
            {
                "item_type": item_type,
                "handle": handle,
                "hashtag": hashtag,
                "source": item.get("source") or "manual",
            }
        )
    return cleaned


async def create_watchlist_service(
    *,
    project_id: str,
    name: str,
    niche: str,
    items: List[Dict[str, Any]],
    db: AsyncSession,
) -> Dict[str, Any]:
    if not str(project_id or "").strip() or not str(name or "").strip() or not str(niche or "").strip():
        raise HTTPException(status_code=400, detail="project_id, name, and niche are required")
    cleaned_items = _validate_items(items or [])

    watchlist = TikTokWatchlist(project_id=project_id, name=name.strip(), niche=niche.strip())
    try:
        db.add(watchlist)
        await db.flush()
        for item in cleaned_items:
            db.add(TikTokWatchItem(watchlist_id=watchlist.id, enabled=True, **item))
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Watchlist creation error: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to create watchlist") from exc

    logger.info("watchlist_created id=%s items=%s", watchlist.id, len(cleaned_items))
    return {
        "success": True,
        "watchlist_id": watchlist.id,
        "items": len(cleaned_items),
        "message": "Watchlist created successfully",
    }


async def _fetch_item_videos(client: TikTokClient, item: TikTokWatchItem) -> List[Dict[str, Any]]:
    if item.item_type == "creator" and item.handle:
        return await client.search_by_creator(item.handle, limit=VIDEOS_PER_ITEM)
    if item.item_type == "hashtag" and item.hashtag:
        return await client.search_by_hashtag(item.hashtag, limit=VIDEOS_PER_ITEM)
    return []


async def pull_watchlist_service(
    *,
    watchlist_id: str,
    db: AsyncSession,
    client: Optional[TikTokClient] = None,
) -> Dict[str, Any]:
    if not watchlist_id:
        raise HTTPException(status_code=400, detail="watchlist_id is required")

    result = await db.execute(
        select(TikTokWatchItem).where(
            TikTokWatchItem.watchlist_id == watchlist_id,
            TikTokWatchItem.enabled.is_(True),
        )
    )
    watch_items = result.scalars().all()
    if not watch_items:
        raise HTTPException(status_code=400, detail="No enabled watch items found")

    client = client or TikTokClient()
    videos: Dict[str, Dict[str, Any]] = {}
    for item in watch_items:
        try:
            found = await _fetch_item_videos(client, item)
        except TikTokAPIError as exc:
            logger.warning("TikTok pull failed for item=%s: %s", item.id, exc)
            continue
        for video in found:
            payload = format_tiktok_video(video)
            if not payload.get("url"):
                continue
            payload["watchlist_id"] = watchlist_id
            payload["source_item_id"] = item.id
            videos.setdefault(payload["url"], payload)

    if not videos:
        return {"success": True, "message": "No new videos found", "videos": []}

    try:
        for payload in videos.values():
            await upsert_reference_by_url(payload, db)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Database error saving TikTok videos: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to save discovered videos") from exc

    logger.info("watchlist_pulled id=%s items=%s videos=%s", watchlist_id, len(watch_items), len(videos))
    return {
        "success": True,
        "videos": list(videos.values()),
        "message": "Videos fetched successfully",
    }


async def suggest_watch_items_service(*, niche: str, model: Optional[str] = None) -> Dict[str, Any]:
    niche = str(niche or "").strip()
    if not niche:
        raise HTTPException(status_code=400, detail="niche is required")

    system_prompt, user_prompt = create_suggestion_prompts(niche)
    try:
        raw = await llm_client.chat_json(system_prompt, user_prompt, model=model)
        suggestions = llm_client.parse_json_object(raw)
        creators = suggestions.get("creators")
        hashtags = suggestions.get("hashtags")
        if not isinstance(creators, list) or not isinstance(hashtags, list):
            raise llm_client.LLMResponseError("Invalid suggestion response structure")
    except Exception as exc:
        logger.error("Suggestion error niche=%s: %s", niche, exc)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to generate suggestions", "details": str(exc)},
        ) from exc

    return {
        "success": True,
        "niche": niche,
        "creators": [str(creator).strip() for creator in creators if str(creator).strip()],
        "hashtags": [tag for tag in (_clean_hashtag(tag) for tag in hashtags) if tag],
        "message": "Suggestions generated successfully",
    }
