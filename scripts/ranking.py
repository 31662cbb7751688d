"""
Ordering and filtering of fetched videos and comments.

rank() never touches its input: it returns a new list. Python's sort is
stable even with reverse=True, so items with equal keys keep their input
order under every metric.
"""

import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, Optional

from logger import get_logger

log = get_logger("ranking")

TAG_PATTERN = re.compile(r"<[^>]*>")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(value: Optional[str]) -> datetime:
    """Parse an API timestamp; missing or unreadable values sort as oldest."""
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _count(value) -> int:
    return value or 0


# metric -> (key function, descending)
VIDEO_METRICS = {
    "views": (lambda v: _count(v.view_count), True),
    "likes": (lambda v: _count(v.like_count), True),
    "comments": (lambda v: _count(v.comment_count), True),
    "date": (lambda v: _timestamp(v.published_at), True),
}

COMMENT_METRICS = {
    "recent": (lambda c: _timestamp(c.published_at), True),
    "oldest": (lambda c: _timestamp(c.published_at), False),
    "likes": (lambda c: _count(c.like_count), True),
}

METRICS = {**VIDEO_METRICS, **COMMENT_METRICS}


@lru_cache(maxsize=32)
def _rank_cached(items: tuple, metric: str) -> tuple:
    key, descending = METRICS[metric]
    log.debug(f"Ranking {len(items)} items by {metric}")
    return tuple(sorted(items, key=key, reverse=descending))


def rank(items: Iterable, metric: str) -> list:
    """
    Return items ordered by metric.

    Video metrics: views, likes, comments, date (all descending).
    Comment metrics: recent, oldest, likes.

    Results are memoized on (items, metric), so calling again with the same
    collection and metric does not re-sort.

    Raises:
        ValueError: If metric is unknown
    """
    if metric not in METRICS:
        raise ValueError(f"Unknown ranking metric: {metric!r} (expected one of {', '.join(METRICS)})")
    return list(_rank_cached(tuple(items), metric))


def strip_markup(text: str) -> str:
    """Remove inline HTML tags such as <b> or <a href=...> from comment text."""
    return TAG_PATTERN.sub("", text or "")


def filter_comments(comments: Iterable, search: Optional[str] = None, min_likes: int = 0) -> list:
    """
    Keep comments matching a search phrase and a minimum like count.

    The search is a case-insensitive substring match against the comment text
    (markup stripped) and the author name. Order is preserved.
    """
    needle = search.strip().lower() if search else ""
    result = []
    for comment in comments:
        if _count(comment.like_count) < min_likes:
            continue
        if needle and needle not in strip_markup(comment.text_display).lower() \
                and needle not in (comment.author_name or "").lower():
            continue
        result.append(comment)
    return result
