#!/usr/bin/env python3
"""
YouTube Comment Exporter

Builds a ranked video catalog for a channel and exports comment threads as
CSV or JSON files.
Features:
- Channel catalog via search or uploads-playlist traversal, ranked before the size cap
- Per-video comment export with a configurable comment cap
- Sequential bulk export that survives individual video failures
- Ctrl-C stops a bulk export after the current video and still prints a summary

Usage:
    python fetch.py --channel @GoogleDevelopers
    python fetch.py --channel @GoogleDevelopers --metric likes --max-videos 100 --export-all
    python fetch.py --channel UC_x5XG1OV2P6uZZ5FSM9Ttw --discovery-mode playlist --sort date
    python fetch.py --video dQw4w9WgXcQ --sort likes --search "great" --min-likes 10
"""

import argparse
import locale
import signal
import sys
import time
from pathlib import Path

from bulk_export import BulkExporter, CancellationToken
from catalog import build_catalog, fetch_video
from comments import collect_comments
from config import get_config
from errors import (
    CatalogFetchError,
    ChannelNotFound,
    CredentialMissing,
    TransportError,
    VideoNotFound,
)
from export import ExportArtifact, build_artifact
from logger import setup_logging, get_logger, LogContext
from models import CatalogQuery
from ranking import COMMENT_METRICS, VIDEO_METRICS, filter_comments, rank
from youtube_api import YouTubeClient

log = get_logger("fetch")


def setup_locale() -> None:
    """Use the user's locale for exported dates (CSV "Published Date" is %x)."""
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        log.warning(f"Could not apply the system locale, dates use the C format: {e}")


def write_artifact(artifact: ExportArtifact, export_dir: str) -> Path:
    """Save an artifact under export_dir and return its path."""
    path = Path(export_dir)
    path.mkdir(parents=True, exist_ok=True)
    output_path = path / artifact.filename
    output_path.write_text(artifact.content, encoding="utf-8")
    log.debug(f"Wrote {output_path} ({len(artifact.content)} chars)")
    return output_path


def log_catalog(catalog, sort_metric: str = None, top: int = 30) -> None:
    """Log the channel header and the first `top` videos of the catalog."""
    channel = catalog.channel
    log.info(f"Channel: {channel.title} ({channel.id})")
    log.info(f"  Subscribers: {channel.subscriber_count:,} | Videos: {channel.video_count:,} "
             f"| Views: {channel.view_count:,}")

    videos = rank(catalog.videos, sort_metric) if sort_metric else catalog.videos
    log.info(f"Videos ({len(videos)} in catalog{', limit reached' if catalog.limit_reached else ''}):")
    for position, video in enumerate(videos[:top], start=1):
        log.info(f"  {position:>3}. {video.title[:60]:<60} "
                 f"{video.view_count:>12,} views {video.like_count:>9,} likes "
                 f"{video.comment_count:>7,} comments")


def run_channel(client, args) -> int:
    """Catalog a channel and optionally bulk-export its comments. Returns exit code."""
    query = CatalogQuery(
        channel_identifier=args.channel,
        ranking_metric=args.metric,
        max_items=args.max_videos,
        discovery_mode=args.discovery_mode,
    )

    try:
        catalog = build_catalog(client, query)
    except ChannelNotFound as e:
        log.error(f"✗ {e}")
        return 1
    except CatalogFetchError as e:
        log.error(f"✗ Catalog incomplete: {e}")
        if not args.allow_partial:
            return 1
        log.warning(f"Continuing with partial catalog of {len(e.catalog.videos)} videos (--allow-partial)")
        catalog = e.catalog
    except TransportError as e:
        log.error(f"✗ Channel lookup failed: {e}")
        return 1

    log_catalog(catalog, sort_metric=args.sort if args.sort in VIDEO_METRICS else None, top=args.top)

    if not args.export_all:
        return 0

    token = CancellationToken()

    def handle_interrupt(signum, frame):
        log.warning("Interrupt received, stopping after the current video...")
        token.cancel()

    def progress_callback(current, total):
        log.info(f"Progress: {current}/{total}")

    exporter = BulkExporter(
        client,
        token=token,
        max_comments=args.max_comments,
        artifact_format=args.format,
        progress_callback=progress_callback,
        artifact_callback=lambda artifact: write_artifact(artifact, args.export_dir),
    )

    previous_handler = signal.signal(signal.SIGINT, handle_interrupt)
    try:
        summary = exporter.run(catalog.videos)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    log.info("=" * 60)
    log.info(f"BULK EXPORT SUMMARY ({summary.state.value.upper()})")
    log.info("=" * 60)
    log.info(f"Videos exported: {summary.exported}/{summary.total}")
    log.info(f"Videos failed: {summary.failed}")
    log.info(f"Comments exported: {summary.total_comments}")
    if summary.limit_reached:
        log.info(f"Videos truncated at comment limit: {summary.limit_reached}")
    for failure in summary.failures:
        log.debug(f"  {failure}")
    log.info(f"Output directory: {args.export_dir}")
    return 0


def run_video(client, args) -> int:
    """Fetch one video and its comments, write CSV and JSON. Returns exit code."""
    try:
        with LogContext(log, f"Fetching video {args.video}"):
            video = fetch_video(client, args.video)
    except (VideoNotFound, TransportError) as e:
        log.error(f"✗ {e}")
        return 1

    log.info(f"Video: {video.title}")
    log.info(f"  Views: {video.view_count:,} | Likes: {video.like_count:,} | Comments: {video.comment_count:,}")

    batch = collect_comments(client, video.id, max_comments=args.max_comments)
    if not batch.ok:
        log.warning(f"Only {len(batch.comments)} comments retrieved before an error: {batch.error}")
    if batch.limit_reached:
        log.info(f"Comment limit reached ({len(batch.comments)} comments)")

    comments = batch.comments
    if args.sort in COMMENT_METRICS:
        comments = rank(comments, args.sort)
    comments = filter_comments(comments, search=args.search, min_likes=args.min_likes)
    log.info(f"{len(comments)} of {len(batch.comments)} comments after filters")

    for fmt in ("csv", "json"):
        path = write_artifact(build_artifact(video, comments, fmt=fmt), args.export_dir)
        log.info(f"  {fmt.upper()}: {path}")

    return 0 if batch.ok else 1


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Export YouTube channel statistics and comments to CSV/JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        "--channel", "-c",
        help="Channel handle (@username) or channel ID"
    )
    input_group.add_argument(
        "--video", "-v",
        help="Single video ID"
    )

    parser.add_argument(
        "--config",
        help="Path to exporter config YAML file"
    )
    parser.add_argument(
        "--api-key",
        help="YouTube Data API key (default: YOUTUBE_API_KEY env var)"
    )
    parser.add_argument(
        "--metric",
        choices=sorted(VIDEO_METRICS),
        default=None,
        help="Ranking applied before the --max-videos cap (default: from config)"
    )
    parser.add_argument(
        "--sort",
        choices=sorted(set(VIDEO_METRICS) | set(COMMENT_METRICS)),
        help="Display order: a video metric for --channel, a comment metric for --video"
    )
    parser.add_argument(
        "--max-videos",
        type=int,
        default=None,
        help="Maximum videos kept in the catalog (default: from config, 0 = no limit)"
    )
    parser.add_argument(
        "--discovery-mode",
        choices=["search", "playlist"],
        default=None,
        help="Video discovery: search (100 units/call) or playlist (1 unit/50 videos)"
    )
    parser.add_argument(
        "--top",
        type=int,
        default=30,
        help="Number of catalog rows to print (default: 30)"
    )
    parser.add_argument(
        "--export-all",
        action="store_true",
        help="Export comments for every catalog video that has comments"
    )
    parser.add_argument(
        "--allow-partial",
        action="store_true",
        help="Use whatever the catalog collected if a page fails mid-way"
    )
    parser.add_argument(
        "--max-comments",
        type=int,
        default=None,
        help="Maximum comments per video, applied at page boundaries (default: from config)"
    )
    parser.add_argument(
        "--format",
        choices=["csv", "json"],
        default=None,
        help="Bulk export file format (default: from config)"
    )
    parser.add_argument(
        "--search",
        help="Only keep comments containing this text (--video only)"
    )
    parser.add_argument(
        "--min-likes",
        type=int,
        default=0,
        help="Only keep comments with at least this many likes (--video only)"
    )
    parser.add_argument(
        "--export-dir",
        default=None,
        help="Directory for exported files (default: from config)"
    )

    args = parser.parse_args(argv)

    cfg = get_config(args.config)
    setup_logging(cfg.log_dir, cfg.log_level, cfg.console_log_level)
    setup_locale()

    if args.metric is None:
        args.metric = cfg.default_ranking_metric
    if args.max_videos is None:
        args.max_videos = cfg.max_catalog_items
    if args.max_videos == 0:
        args.max_videos = None
    if args.discovery_mode is None:
        args.discovery_mode = cfg.video_discovery_mode
    if args.max_comments is None:
        args.max_comments = cfg.max_comments_per_video
    if args.max_comments < 1:
        parser.error(f"--max-comments must be at least 1, got {args.max_comments}")
    if args.format is None:
        args.format = cfg.export_format
    if args.export_dir is None:
        args.export_dir = cfg.export_dir

    log.info("=" * 60)
    log.info("YouTube Comment Exporter Starting")
    log.info("=" * 60)
    logged_args = dict(vars(args), api_key="***" if args.api_key else None)
    log.debug(f"Arguments: {logged_args}")

    start_time = time.time()

    try:
        client = YouTubeClient(api_key=args.api_key or cfg.youtube_api_key)
    except CredentialMissing as e:
        log.error(f"✗ {e}. Set YOUTUBE_API_KEY or pass --api-key")
        sys.exit(1)

    if args.channel:
        exit_code = run_channel(client, args)
    else:
        exit_code = run_video(client, args)

    log.info(f"Runtime: {time.time() - start_time:.1f}s")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
