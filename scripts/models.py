"""
Records built from YouTube Data API responses.

Parsing mirrors the API payloads: statistics arrive as strings and may be
missing entirely (e.g. hidden like counts), so every count is coerced to int
with 0 as the fallback.
"""

from dataclasses import dataclass
from typing import Optional


def _to_int(value) -> int:
    try:
        return int(value)
    except (ValueError, TypeError):
        return 0


def _best_thumbnail(thumbnails: dict) -> Optional[str]:
    for size in ("high", "medium", "default"):
        if thumbnails.get(size, {}).get("url"):
            return thumbnails[size]["url"]
    return None


@dataclass(frozen=True)
class VideoSummary:
    id: str
    title: str
    thumbnail_url: Optional[str]
    published_at: Optional[str]
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0

    @classmethod
    def from_api(cls, item: dict) -> "VideoSummary":
        """Build from a videos.list item requested with part=snippet,statistics."""
        snippet = item.get("snippet", {})
        statistics = item.get("statistics", {})
        return cls(
            id=item["id"],
            title=snippet.get("title") or "",
            thumbnail_url=_best_thumbnail(snippet.get("thumbnails", {})),
            published_at=snippet.get("publishedAt"),
            view_count=_to_int(statistics.get("viewCount")),
            like_count=_to_int(statistics.get("likeCount")),
            comment_count=_to_int(statistics.get("commentCount")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "thumbnailUrl": self.thumbnail_url,
            "publishedAt": self.published_at,
            "viewCount": self.view_count,
            "likeCount": self.like_count,
            "commentCount": self.comment_count,
        }


@dataclass(frozen=True)
class CommentRecord:
    id: str
    author_name: str
    author_profile_image_url: Optional[str]
    text_display: str
    like_count: int
    published_at: Optional[str]

    @classmethod
    def from_thread(cls, item: dict) -> "CommentRecord":
        """Build from a commentThreads.list item, keeping only the top-level comment."""
        top_comment = item["snippet"]["topLevelComment"]["snippet"]
        return cls(
            id=item["id"],
            author_name=top_comment.get("authorDisplayName") or "",
            author_profile_image_url=top_comment.get("authorProfileImageUrl"),
            text_display=top_comment.get("textDisplay") or "",
            like_count=_to_int(top_comment.get("likeCount")),
            published_at=top_comment.get("publishedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "authorName": self.author_name,
            "authorProfileImageUrl": self.author_profile_image_url,
            "textDisplay": self.text_display,
            "likeCount": self.like_count,
            "publishedAt": self.published_at,
        }


@dataclass(frozen=True)
class ChannelInfo:
    id: str
    title: str
    description: str = ""
    thumbnail_url: Optional[str] = None
    subscriber_count: int = 0
    video_count: int = 0
    view_count: int = 0
    uploads_playlist_id: Optional[str] = None

    @classmethod
    def from_api(cls, item: dict) -> "ChannelInfo":
        """Build from a channels.list item requested with part=snippet,statistics,contentDetails."""
        snippet = item.get("snippet", {})
        statistics = item.get("statistics", {})
        content_details = item.get("contentDetails", {})
        return cls(
            id=item["id"],
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            thumbnail_url=_best_thumbnail(snippet.get("thumbnails", {})),
            subscriber_count=_to_int(statistics.get("subscriberCount")),
            video_count=_to_int(statistics.get("videoCount")),
            view_count=_to_int(statistics.get("viewCount")),
            uploads_playlist_id=content_details.get("relatedPlaylists", {}).get("uploads"),
        )


@dataclass(frozen=True)
class CatalogQuery:
    """What to fetch for a channel. `max_items=None` means no cap."""
    channel_identifier: str
    ranking_metric: str = "views"
    max_items: Optional[int] = None
    discovery_mode: str = "search"
