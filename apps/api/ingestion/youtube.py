"""
YouTube Data API client for discovering Shorts.
"""

from typing import Any, Dict, List, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from analysis.scoring import parse_iso_duration


class YouTubeAPIError(RuntimeError):
    """Raised when the YouTube Data API rejects a request."""


class YouTubeClient:
    """Client for interacting with YouTube Data API v3."""

    def __init__(self, api_key: Optional[str] = None):
        if not api_key:
            raise ValueError("api_key must be provided")
        self.youtube = build("youtube", "v3", developerKey=api_key, cache_discovery=False)

    def search_short_videos(
        self,
        query: str,
        max_results: int = 25,
        region_code: str = "US",
    ) -> List[str]:
        """
        Search short-duration videos for a niche.

        Returns:
            Video IDs in search order.
        """
        query = (query or "").strip()
        if not query:
            return []

        try:
            response = self.youtube.search().list(
                part="snippet",
                q=query,
                type="video",
                videoDuration="short",
                maxResults=max(1, min(max_results, 50)),
                regionCode=region_code,
            ).execute()
        except HttpError as e:
            raise YouTubeAPIError(f"YouTube API error: {e}") from e

        video_ids: List[str] = []
        for item in response.get("items", []):
            video_id = item.get("id", {}).get("videoId")
            if video_id and video_id not in video_ids:
                video_ids.append(video_id)
        return video_ids

    def get_video_details(self, video_ids: List[str]) -> List[Dict[str, Any]]:
        """
        Get snippet, statistics and duration for videos.

        Args:
            video_ids: List of video IDs (batched 50 per call)

        Returns:
            List of dicts with: id, title, channel_title, published_at,
            thumbnail_url, view_count, like_count, comment_count,
            duration_seconds
        """
        videos: List[Dict[str, Any]] = []

        for i in range(0, len(video_ids), 50):
            batch = video_ids[i:i + 50]
            try:
                response = self.youtube.videos().list(
                    part="snippet,statistics,contentDetails",
                    id=",".join(batch),
                ).execute()
            except HttpError as e:
                raise YouTubeAPIError(f"YouTube API error: {e}") from e

            for item in response.get("items", []):
                snippet = item.get("snippet", {})
                stats = item.get("statistics", {})
                thumbnails = snippet.get("thumbnails", {})
                thumbnail = thumbnails.get("high") or thumbnails.get("medium") or {}
                videos.append({
                    "id": item["id"],
                    "title": snippet.get("title", ""),
                    "channel_title": snippet.get("channelTitle", ""),
                    "published_at": snippet.get("publishedAt"),
                    "thumbnail_url": thumbnail.get("url"),
                    "view_count": int(stats.get("viewCount", 0) or 0),
                    "like_count": int(stats.get("likeCount", 0) or 0),
                    "comment_count": int(stats.get("commentCount", 0) or 0),
                    "duration_seconds": parse_iso_duration(item.get("contentDetails", {}).get("duration", "PT0S")),
                })

        return videos


def create_youtube_client_with_api_key(api_key: str) -> YouTubeClient:
    """Create a YouTube client using an API key."""
    return YouTubeClient(api_key=api_key)
