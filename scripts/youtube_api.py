"""
YouTube API transport module.
Handles all interactions with the YouTube Data API v3.

Every method issues exactly one list call and returns the parsed JSON page.
Failures are not retried here: HTTP errors, connection errors and unreadable
bodies all surface as TransportError and the caller decides what to do.
"""

import os
import ssl
from typing import Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from errors import CredentialMissing, TransportError
from logger import get_logger

log = get_logger("youtube_api")


class YouTubeClient:
    """Thin wrapper over the googleapiclient resource for the list endpoints we use."""

    def __init__(self, api_key: str = None, youtube=None):
        self.api_key = api_key or os.environ.get("YOUTUBE_API_KEY")
        if not self.api_key:
            raise CredentialMissing("YOUTUBE_API_KEY not provided")

        # developerKey is appended to every request as the `key` query parameter
        self.youtube = youtube or build("youtube", "v3", developerKey=self.api_key, cache_discovery=False)
        log.debug("YouTubeClient initialized")

    def _execute(self, request, operation: str) -> dict:
        """Run a prepared request, mapping every failure to TransportError."""
        try:
            response = request.execute()
        except HttpError as e:
            status = e.resp.status if hasattr(e, 'resp') else None
            log.warning(f"{operation} failed with HTTP {status}: {e}")
            raise TransportError(f"{operation} failed with HTTP {status}", status=status) from e
        except (ConnectionError, TimeoutError, ssl.SSLError, OSError) as e:
            log.warning(f"{operation} connection error: {type(e).__name__}: {e}")
            raise TransportError(f"{operation} connection error: {e}") from e

        if not isinstance(response, dict):
            raise TransportError(f"{operation} returned a malformed body")
        items = response.get("items", [])
        if not isinstance(items, list):
            raise TransportError(f"{operation} returned a malformed items field")

        log.debug(f"{operation}: {len(items)} items, next={response.get('nextPageToken')}")
        return response

    def channels_by_handle(self, handle: str) -> dict:
        request = self.youtube.channels().list(
            part="snippet,statistics,contentDetails",
            forHandle=handle,
        )
        return self._execute(request, "channels.list")

    def channels_by_id(self, channel_id: str) -> dict:
        request = self.youtube.channels().list(
            part="snippet,statistics,contentDetails",
            id=channel_id,
        )
        return self._execute(request, "channels.list")

    def search_videos_page(self, channel_id: str, max_results: int = 50, page_token: Optional[str] = None) -> dict:
        """Search for videos from a channel, newest first (100 quota units per call)."""
        kwargs = {
            "part": "id",
            "channelId": channel_id,
            "type": "video",
            "order": "date",
            "maxResults": max_results,
        }
        if page_token:
            kwargs["pageToken"] = page_token
        return self._execute(self.youtube.search().list(**kwargs), "search.list")

    def playlist_items_page(self, playlist_id: str, max_results: int = 50, page_token: Optional[str] = None) -> dict:
        """Fetch a single page of playlist items (1 quota unit per call)."""
        request = self.youtube.playlistItems().list(
            part="contentDetails",
            playlistId=playlist_id,
            maxResults=max_results,
            pageToken=page_token,
        )
        return self._execute(request, "playlistItems.list")

    def videos(self, video_ids: list[str]) -> dict:
        """Fetch snippet and statistics for a batch of video IDs in one call."""
        request = self.youtube.videos().list(
            part="snippet,statistics",
            id=",".join(video_ids),
        )
        return self._execute(request, "videos.list")

    def comment_threads_page(
        self,
        video_id: str,
        max_results: int = 100,
        page_token: Optional[str] = None,
        order: str = "time",
    ) -> dict:
        """Fetch a single page of top-level comment threads."""
        request = self.youtube.commentThreads().list(
            part="snippet",
            videoId=video_id,
            maxResults=max_results,
            pageToken=page_token,
            order=order,
            textFormat="html",
        )
        return self._execute(request, "commentThreads.list")
