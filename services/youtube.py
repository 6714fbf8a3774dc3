"""Showroom video lookup through the YouTube Data API."""
import logging

import requests
from flask import current_app

from errors import BackendFailure, ConfigurationError, NotFound, ValidationError
from services.cache import ExpiringCache

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"
PAGE_SIZE = 50
MAX_VIDEOS = 500
TIMEOUT = 10

_EXTENSION_KEY = "youtube_cache"


def channel_cache():
    cache = current_app.extensions.get(_EXTENSION_KEY)
    if cache is None:
        cache = ExpiringCache(current_app.config.get("YOUTUBE_CACHE_SECONDS", 600))
        current_app.extensions[_EXTENSION_KEY] = cache
    return cache


def _get(path, params):
    try:
        response = requests.get(f"{API_BASE}/{path}", params=params, timeout=TIMEOUT)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("YouTube request %s failed: %s", path, exc)
        raise BackendFailure("Failed to fetch YouTube data")


def room_videos(room_name):
    """Channel details and newest-first videos for the channel named like the room."""
    api_key = current_app.config.get("YOUTUBE_API_KEY")
    if not api_key:
        raise ConfigurationError("YouTube API key is not configured")
    if not room_name:
        raise ValidationError("Room name is required")

    found = _get("search", {"part": "snippet", "type": "channel", "q": room_name, "key": api_key})
    if not found.get("items"):
        raise NotFound(f'No YouTube channel found for "{room_name}"')
    channel_id = found["items"][0]["id"]["channelId"]

    cache = channel_cache()
    cached = cache.get(channel_id)
    if cached is not None:
        logger.debug("YouTube cache hit for %s", channel_id)
        return dict(cached, roomName=room_name)

    channel = _get("channels", {"part": "snippet,statistics", "id": channel_id, "key": api_key})
    if not channel.get("items"):
        raise NotFound("Channel not found")

    videos = []
    page_token = None
    while True:
        params = {
            "part": "snippet",
            "channelId": channel_id,
            "maxResults": PAGE_SIZE,
            "order": "date",
            "type": "video",
            "key": api_key,
        }
        if page_token:
            params["pageToken"] = page_token
        page = _get("search", params)
        items = page.get("items") or []
        if not items:
            break
        videos.extend(items)
        page_token = page.get("nextPageToken")
        if not page_token or len(videos) >= MAX_VIDEOS:
            break

    if not videos:
        raise NotFound("No videos found for this channel")

    videos.sort(key=lambda v: v["snippet"]["publishedAt"], reverse=True)
    result = {"roomName": room_name, "channel": channel["items"][0], "videos": videos}
    cache.set(channel_id, result)
    return result
