from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import select

from ingestion.youtube import YouTubeAPIError
from models.content_reference import ContentReference


def _build_mock_youtube_client(video_count: int = 3):
    client = MagicMock()
    video_ids = [f"vid{idx}" for idx in range(video_count)]
    client.search_short_videos.return_value = video_ids
    client.get_video_details.return_value = [
        {
            "id": vid,
            "title": f"Short {idx}",
            "channel_title": "Creator",
            "published_at": "2026-01-01T00:00:00Z",
            "thumbnail_url": f"https://i.ytimg.com/vi/{vid}/hqdefault.jpg",
            "view_count": 1000 * (idx + 1) ** 3,
            "like_count": 50 * (idx + 1),
            "comment_count": 5,
            "duration_seconds": 45,
        }
        for idx, vid in enumerate(video_ids)
    ]
    return client


@pytest.mark.asyncio
async def test_discover_youtube_sorts_and_saves(integration_client):
    client, session_maker = integration_client
    mock_youtube = _build_mock_youtube_client()

    with patch("services.discovery._get_youtube_client", return_value=mock_youtube):
        response = await client.post("/discover", json={"platform": "youtube", "niche": "sleep"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    scores = [item["viral_score"] for item in body["items"]]
    assert scores == sorted(scores, reverse=True)
    assert body["items"][0]["url"] == "https://www.youtube.com/shorts/vid2"
    mock_youtube.search_short_videos.assert_called_once_with("sleep", max_results=25, region_code="US")

    async with session_maker() as session:
        rows = (await session.execute(select(ContentReference))).scalars().all()
    assert len(rows) == 3
    assert {row.platform for row in rows} == {"youtube"}


@pytest.mark.asyncio
async def test_discover_keeps_top_twenty(integration_client):
    client, _ = integration_client
    mock_youtube = _build_mock_youtube_client(video_count=25)

    with patch("services.discovery._get_youtube_client", return_value=mock_youtube):
        response = await client.post("/discover", json={"platform": "youtube", "niche": "sleep"})

    assert response.status_code == 200
    assert response.json()["total"] == 20


@pytest.mark.asyncio
async def test_discover_rediscovery_updates_existing_rows(integration_client):
    client, session_maker = integration_client
    mock_youtube = _build_mock_youtube_client(video_count=1)

    with patch("services.discovery._get_youtube_client", return_value=mock_youtube):
        await client.post("/discover", json={"platform": "youtube", "niche": "sleep"})
        mock_youtube.get_video_details.return_value[0]["title"] = "Renamed"
        await client.post("/discover", json={"platform": "youtube", "niche": "sleep"})

    async with session_maker() as session:
        rows = (await session.execute(select(ContentReference))).scalars().all()
    assert len(rows) == 1
    assert rows[0].title == "Renamed"


@pytest.mark.asyncio
async def test_discover_platform_handling(integration_client):
    client, _ = integration_client

    assert (await client.post("/discover", json={"platform": "youtube"})).status_code == 400
    assert (await client.post("/discover", json={"platform": "instagram", "niche": "x"})).status_code == 501
    assert (await client.post("/discover", json={"platform": "tiktok", "niche": "x"})).status_code == 501
    assert (await client.post("/discover", json={"platform": "vine", "niche": "x"})).status_code == 400


@pytest.mark.asyncio
async def test_discover_surfaces_youtube_errors(integration_client):
    client, _ = integration_client
    mock_youtube = MagicMock()
    mock_youtube.search_short_videos.side_effect = YouTubeAPIError("quota exceeded")

    with patch("services.discovery._get_youtube_client", return_value=mock_youtube):
        response = await client.post("/discover", json={"platform": "youtube", "niche": "sleep"})

    assert response.status_code == 500


@pytest.mark.asyncio
async def test_discover_without_api_key_returns_500(integration_client):
    client, _ = integration_client

    with patch("services.discovery.require_youtube_api_key", side_effect=ValueError("YOUTUBE_API_KEY is not configured")):
        response = await client.post("/discover", json={"platform": "youtube", "niche": "sleep"})

    assert response.status_code == 500
    assert response.json()["detail"] == "YOUTUBE_API_KEY is not configured"
