"""
Comment collection for a single video.

Walks commentThreads.list page by page, keeping only the top-level comment of
each thread. The cap is applied at page granularity: once a page pushes the
count to max_comments or beyond, collection stops with that page included.
A failing page does not throw away what was already collected; the batch is
returned with partial=True instead.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from config import get_config
from errors import TransportError
from logger import get_logger
from models import CommentRecord
from pager import Page, fetch_all

log = get_logger("comments")


@dataclass
class CommentBatch:
    video_id: str
    comments: list[CommentRecord] = field(default_factory=list)
    limit_reached: bool = False
    partial: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.partial


def _parse_threads(response: dict) -> list[CommentRecord]:
    try:
        return [CommentRecord.from_thread(item) for item in response.get("items", [])]
    except (KeyError, TypeError) as e:
        raise TransportError(f"Malformed comment thread: {type(e).__name__}: {e}") from e


def collect_comments(
    client,
    video_id: str,
    max_comments: Optional[int] = None,
    page_delay: Optional[float] = None,
    order: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> CommentBatch:
    """
    Fetch top-level comments for a video.

    Args:
        client: YouTubeClient (or anything with comment_threads_page)
        video_id: YouTube video ID
        max_comments: Stop after the page that reaches this many comments (default: from config);
            0 or less returns an empty batch without calling the API
        page_delay: Seconds to wait between pages (default: from config)
        order: "time" or "relevance" (default: from config)
        sleep: Injected for tests

    Returns:
        CommentBatch; limit_reached is set when the cap cut pagination short,
        partial is set when a page failed.
    """
    cfg = get_config()
    if max_comments is None:
        max_comments = cfg.max_comments_per_video
    if page_delay is None:
        page_delay = cfg.page_delay_seconds
    if order is None:
        order = cfg.comment_order
    page_size = cfg.comment_page_size

    if max_comments <= 0:
        log.debug(f"Comment cap is {max_comments}, skipping fetch for video {video_id}")
        return CommentBatch(video_id=video_id, limit_reached=True)

    def fetch_page(cursor: Optional[str]) -> Page:
        response = client.comment_threads_page(
            video_id, max_results=page_size, page_token=cursor, order=order
        )
        return Page(_parse_threads(response), response.get("nextPageToken"))

    log.debug(f"Fetching comments for video {video_id}, max={max_comments}")
    batch = CommentBatch(video_id=video_id)

    try:
        batch.comments = fetch_all(fetch_page, max_items=max_comments, page_delay=page_delay, sleep=sleep)
    except TransportError as e:
        batch.comments = e.partial_items
        batch.partial = True
        batch.error = str(e)
        log.warning(f"Comment fetch for {video_id} stopped after {len(batch.comments)} comments: {e}")

    batch.limit_reached = len(batch.comments) >= max_comments
    if batch.limit_reached:
        log.info(f"Comment limit reached for {video_id}: {len(batch.comments)} >= {max_comments}")

    log.debug(f"Fetched {len(batch.comments)} comments for video {video_id}")
    return batch
