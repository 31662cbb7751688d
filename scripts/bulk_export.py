"""
Sequential bulk export of comments for many videos.

Videos are processed strictly one after another, in catalog order, with a
fixed pause between them to stay clear of upstream rate limits. A video that
fails is counted and skipped; it never stops the run. Cancellation is
cooperative: the token is checked before each video starts, so a video that
is already downloading always finishes.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from comments import collect_comments
from config import get_config
from export import ExportArtifact, build_artifact
from logger import LogContext, get_logger, video_context
from models import VideoSummary

log = get_logger("bulk_export")


class ExportState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CancellationToken:
    """Set from outside (signal handler, UI) to stop a run before its next video."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class BulkExportSummary:
    state: ExportState
    total: int = 0
    processed: int = 0
    exported: int = 0
    failed: int = 0
    total_comments: int = 0
    limit_reached: int = 0
    failures: list[str] = field(default_factory=list)


class BulkExporter:
    """
    Drives comment collection across a catalog, one video at a time.

    A BulkExporter runs once: IDLE -> RUNNING -> COMPLETED or CANCELLED.
    """

    def __init__(
        self,
        client,
        token: Optional[CancellationToken] = None,
        max_comments: Optional[int] = None,
        item_delay: Optional[float] = None,
        page_delay: Optional[float] = None,
        artifact_format: Optional[str] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        artifact_callback: Optional[Callable[[ExportArtifact], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        cfg = get_config()
        if max_comments is None:
            max_comments = cfg.max_comments_per_video
        if max_comments <= 0:
            raise ValueError(f"max_comments must be positive, got {max_comments}")
        self.client = client
        self.token = token or CancellationToken()
        self.max_comments = max_comments
        self.item_delay = item_delay if item_delay is not None else cfg.item_delay_seconds
        self.page_delay = page_delay
        self.artifact_format = artifact_format or cfg.export_format
        self.progress_callback = progress_callback
        self.artifact_callback = artifact_callback
        self.sleep = sleep
        self.state = ExportState.IDLE

    @staticmethod
    def eligible(videos: Iterable[VideoSummary]) -> list[VideoSummary]:
        """Videos with at least one known comment, in their original order."""
        return [video for video in videos if video.comment_count and video.comment_count > 0]

    def _export_one(self, video: VideoSummary, summary: BulkExportSummary) -> None:
        batch = collect_comments(
            self.client,
            video.id,
            max_comments=self.max_comments,
            page_delay=self.page_delay,
            sleep=self.sleep,
        )
        if not batch.ok:
            summary.failed += 1
            summary.failures.append(f"{video.id}: {batch.error} ({len(batch.comments)} comments before failure)")
            return

        artifact = build_artifact(video, batch.comments, fmt=self.artifact_format)
        if self.artifact_callback:
            self.artifact_callback(artifact)

        summary.exported += 1
        summary.total_comments += len(batch.comments)
        if batch.limit_reached:
            summary.limit_reached += 1
        log.info(f"Exported {len(batch.comments)} comments -> {artifact.filename}")

    def run(self, videos: Iterable[VideoSummary]) -> BulkExportSummary:
        """
        Export comments for every eligible video.

        Raises:
            RuntimeError: If this exporter already ran
        """
        if self.state is not ExportState.IDLE:
            raise RuntimeError(f"Bulk export cannot start from state {self.state.value}")

        targets = self.eligible(videos)
        summary = BulkExportSummary(state=ExportState.RUNNING, total=len(targets))
        self.state = ExportState.RUNNING
        log.info(f"Bulk export started: {len(targets)} videos with comments")

        for index, video in enumerate(targets, start=1):
            if self.token.cancelled:
                log.warning(f"Cancelled before video {index}/{len(targets)}")
                break

            with video_context(video.id):
                try:
                    with LogContext(log, f"Exporting comments for '{video.title}'"):
                        self._export_one(video, summary)
                except Exception as e:
                    log.exception(f"Export failed for {video.id}: {e}")
                    summary.failed += 1
                    summary.failures.append(f"{video.id}: {type(e).__name__}: {e}")

            summary.processed = index
            if self.progress_callback:
                self.progress_callback(index, len(targets))

            if index < len(targets) and self.item_delay > 0 and not self.token.cancelled:
                self.sleep(self.item_delay)

        self.state = ExportState.CANCELLED if self.token.cancelled else ExportState.COMPLETED
        summary.state = self.state
        log.info(f"Bulk export {self.state.value}: {summary.exported}/{summary.total} exported, "
                 f"{summary.failed} failed, {summary.total_comments} comments")
        return summary
