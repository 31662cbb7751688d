"""
CSV and JSON serializers for exported comments.

Both are pure given their inputs and `now`; nothing here touches the
filesystem. The caller decides where an ExportArtifact ends up.
"""

import json
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from models import CommentRecord, VideoSummary
from ranking import strip_markup

CSV_HEADERS = ["Author", "Comment", "Likes", "Published Date"]

SLUG_LENGTH = 30
UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')

MEDIA_TYPES = {
    "csv": "text/csv;charset=utf-8",
    "json": "application/json",
}


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    content: str
    media_type: str


def _quote(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def format_local_date(published_at: Optional[str]) -> str:
    """Render an API timestamp as the local short date (e.g. 01/01/24)."""
    if not published_at:
        return ""
    try:
        parsed = datetime.fromisoformat(published_at.replace("Z", "+00:00"))
    except ValueError:
        return published_at
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone().strftime("%x")


def comment_to_csv_row(comment: CommentRecord) -> str:
    return ",".join([
        _quote(comment.author_name),
        _quote(strip_markup(comment.text_display)),
        str(comment.like_count or 0),
        format_local_date(comment.published_at),
    ])


def comments_to_csv(comments: Iterable[CommentRecord]) -> str:
    """Header plus one row per comment, newline separated."""
    lines = [",".join(CSV_HEADERS)]
    lines.extend(comment_to_csv_row(comment) for comment in comments)
    return "\n".join(lines)


def export_to_json(
    video: Optional[VideoSummary],
    comments: Iterable[CommentRecord],
    now: Optional[datetime] = None,
) -> str:
    """Serialize {video, comments, exportedAt}; exportedAt is UTC ISO-8601."""
    now = now or datetime.now(timezone.utc)
    data = {
        "video": video.to_dict() if video is not None else None,
        "comments": [comment.to_dict() for comment in comments],
        "exportedAt": now.isoformat(),
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def slugify(title: str) -> str:
    """First 30 characters of the title, made safe for a filename."""
    slug = UNSAFE_FILENAME_CHARS.sub("-", (title or "")[:SLUG_LENGTH]).strip()
    return slug or "untitled"


def make_filename(title: str, kind: str, extension: str, now: Optional[datetime] = None) -> str:
    """Build `<slug>-<kind>-<epoch millis>.<ext>`."""
    millis = int(now.timestamp() * 1000) if now else int(time.time() * 1000)
    return f"{slugify(title)}-{kind}-{millis}.{extension}"


def build_artifact(
    video: VideoSummary,
    comments: Iterable[CommentRecord],
    fmt: str = "csv",
    now: Optional[datetime] = None,
) -> ExportArtifact:
    """
    Serialize one video's comments as a CSV ("comments") or JSON ("data") artifact.

    Raises:
        ValueError: If fmt is not csv or json
    """
    if fmt == "csv":
        content = comments_to_csv(comments)
        kind = "comments"
    elif fmt == "json":
        content = export_to_json(video, comments, now=now)
        kind = "data"
    else:
        raise ValueError(f"Unknown export format: {fmt!r}")
    return ExportArtifact(
        filename=make_filename(video.title, kind, fmt, now=now),
        content=content,
        media_type=MEDIA_TYPES[fmt],
    )
