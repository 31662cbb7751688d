"""
Channel resolution and video catalog assembly.

A catalog is built in two calls per page: a discovery call (search.list or
playlistItems.list) yields a page of video IDs, then one videos.list call
fetches snippet and statistics for exactly those IDs. Pages accumulate until
max_items is reached or the cursor runs out, then the whole set is ranked by
the query's metric and cut to max_items, so the cut keeps the top items
rather than the first ones to arrive.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from config import get_config
from errors import CatalogFetchError, ChannelNotFound, TransportError, VideoNotFound
from logger import LogContext, get_logger
from models import CatalogQuery, ChannelInfo, VideoSummary
from pager import Page, fetch_all
from ranking import VIDEO_METRICS, rank

log = get_logger("catalog")

DISCOVERY_MODES = ("search", "playlist")


@dataclass
class Catalog:
    channel: ChannelInfo
    videos: list[VideoSummary] = field(default_factory=list)
    limit_reached: bool = False


def resolve_channel(client, identifier: str) -> ChannelInfo:
    """
    Resolve a handle or channel ID to channel metadata.

    The identifier is tried as a handle first, then as a raw channel ID.

    Raises:
        ChannelNotFound: If neither lookup matches
        TransportError: If a lookup call fails
    """
    identifier = identifier.strip()
    handle = identifier.lstrip("@")
    log.debug(f"Resolving channel identifier: {identifier}")

    response = client.channels_by_handle(handle)
    if not response.get("items"):
        log.debug(f"No channel for handle '{handle}', trying as channel ID")
        response = client.channels_by_id(handle)

    if not response.get("items"):
        raise ChannelNotFound(f"Channel not found: {identifier}")

    channel = ChannelInfo.from_api(response["items"][0])
    log.debug(f"Resolved '{identifier}' to {channel.id} ({channel.title})")
    return channel


def fetch_video(client, video_id: str) -> VideoSummary:
    """
    Fetch snippet and statistics for a single video.

    Raises:
        VideoNotFound: If the API returns no item
    """
    response = client.videos([video_id])
    if not response.get("items"):
        raise VideoNotFound(f"Video not found: {video_id}")
    return _parse_videos(response)[0]


def _parse_videos(response: dict) -> list[VideoSummary]:
    try:
        return [VideoSummary.from_api(item) for item in response.get("items", [])]
    except (KeyError, TypeError) as e:
        raise TransportError(f"Malformed video item: {type(e).__name__}: {e}") from e


def _discover_search(client, channel: ChannelInfo, page_size: int):
    def discover(cursor: Optional[str]) -> tuple[list[str], Optional[str]]:
        response = client.search_videos_page(channel.id, max_results=page_size, page_token=cursor)
        ids = [item.get("id", {}).get("videoId") for item in response.get("items", [])]
        return [vid for vid in ids if vid], response.get("nextPageToken")
    return discover


def _discover_playlist(client, channel: ChannelInfo, page_size: int):
    if not channel.uploads_playlist_id:
        raise TransportError(f"Channel {channel.id} has no uploads playlist")

    def discover(cursor: Optional[str]) -> tuple[list[str], Optional[str]]:
        response = client.playlist_items_page(
            channel.uploads_playlist_id, max_results=page_size, page_token=cursor
        )
        ids = [item.get("contentDetails", {}).get("videoId") for item in response.get("items", [])]
        return [vid for vid in ids if vid], response.get("nextPageToken")
    return discover


def build_catalog(
    client,
    query: CatalogQuery,
    page_delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Catalog:
    """
    Build a ranked video catalog for a channel.

    Args:
        client: YouTubeClient
        query: Channel, fetch-time ranking metric, size cap and discovery mode
        page_delay: Seconds between discovery pages (default: from config)
        sleep: Injected for tests

    Returns:
        Catalog with at most query.max_items videos, top-ranked by query.ranking_metric

    Raises:
        ChannelNotFound: If the channel cannot be resolved
        CatalogFetchError: If a page fails after resolution; carries the partial catalog
        ValueError: If the discovery mode or metric is unknown
    """
    cfg = get_config()
    if page_delay is None:
        page_delay = cfg.page_delay_seconds
    if query.discovery_mode not in DISCOVERY_MODES:
        raise ValueError(f"Unknown discovery mode: {query.discovery_mode!r}")
    if query.ranking_metric not in VIDEO_METRICS:
        raise ValueError(f"Unknown ranking metric: {query.ranking_metric!r}")

    with LogContext(log, f"Resolving channel {query.channel_identifier}"):
        channel = resolve_channel(client, query.channel_identifier)

    page_size = cfg.api_max_results_per_page
    if query.discovery_mode == "search":
        discover = _discover_search(client, channel, page_size)
    else:
        discover = _discover_playlist(client, channel, page_size)

    def fetch_page(cursor: Optional[str]) -> Page:
        video_ids, next_cursor = discover(cursor)
        if not video_ids:
            return Page([], next_cursor)
        # Detail batch is exactly the IDs just discovered
        return Page(_parse_videos(client.videos(video_ids)), next_cursor)

    def finish(videos: list[VideoSummary]) -> Catalog:
        ranked = rank(videos, query.ranking_metric)
        limit_reached = query.max_items is not None and len(ranked) >= query.max_items
        if query.max_items is not None:
            ranked = ranked[:query.max_items]
        return Catalog(channel=channel, videos=ranked, limit_reached=limit_reached)

    log.info(f"Building catalog for {channel.title} ({channel.id}) via {query.discovery_mode}, "
             f"max={query.max_items}, metric={query.ranking_metric}")
    try:
        videos = fetch_all(fetch_page, max_items=query.max_items, page_delay=page_delay, sleep=sleep)
    except TransportError as e:
        log.error(f"Catalog fetch aborted after {len(e.partial_items)} videos: {e}")
        raise CatalogFetchError(str(e), catalog=finish(e.partial_items), status=e.status) from e

    catalog = finish(videos)
    log.info(f"Catalog ready: {len(catalog.videos)} videos"
             + (f" (truncated from {len(videos)})" if len(videos) > len(catalog.videos) else ""))
    return catalog
