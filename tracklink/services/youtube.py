"""
YouTube lookup: find a video for a track via the YouTube Data API v3 search
endpoint. Results, including misses, are cached per (artist, title).
"""
import asyncio
import logging
from typing import Optional

import aiohttp

from tracklink.config.settings import settings
from tracklink.services.cache import MISSING, LookupCache
from tracklink.services.models import VideoMatch
from tracklink.utils.http_client import HttpError, fetch_json

logger = logging.getLogger(__name__)

_YT_API_BASE = "https://www.googleapis.com/youtube/v3"


class LookupUnavailable(Exception):
    pass


class YouTubeService:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: Optional[str] = None,
        cache: Optional[LookupCache[VideoMatch]] = None,
    ):
        self._session = session
        self._api_key = api_key if api_key is not None else settings.YOUTUBE_API_KEY
        self._cache = cache if cache is not None else LookupCache(
            ttl_seconds=settings.LOOKUP_CACHE_TTL_SECONDS,
            max_entries=settings.LOOKUP_CACHE_MAX_ENTRIES,
        )

    async def find_video(self, artist: str, title: str) -> Optional[VideoMatch]:
        cached = self._cache.get(artist, title)
        if cached is not MISSING:
            logger.debug("YouTube cache hit", extra={"artist": artist, "title": title})
            return cached

        if not self._api_key:
            raise LookupUnavailable("YOUTUBE_API_KEY not configured")

        try:
            data = await fetch_json(
                self._session,
                f"{_YT_API_BASE}/search",
                params={
                    "q": f"{artist} {title}",
                    "part": "snippet",
                    "type": "video",
                    "maxResults": "1",
                    "key": self._api_key,
                },
            )
        except (HttpError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise LookupUnavailable(f"YouTube search failed: {exc}") from exc

        match = _parse_search(data)
        self._cache.put(artist, title, match)
        logger.info(
            "YouTube lookup",
            extra={"artist": artist, "title": title, "video_id": match.video_id if match else None},
        )
        return match


def _parse_search(data: dict) -> Optional[VideoMatch]:
    for item in data.get("items", []):
        video_id = item.get("id", {}).get("videoId")
        if not video_id:
            continue
        snippet = item.get("snippet", {})
        return VideoMatch(
            video_id=video_id,
            title=snippet.get("title", ""),
            channel=snippet.get("channelTitle", ""),
        )
    return None
