"""
Logging for the YouTube comment exporter.

Every run writes a DEBUG-level log file under the log directory (with a
latest.log symlink pointing at it) and a shorter console stream. While a bulk
export is working on a video, lines logged from that thread carry the video
ID as a prefix, so interleaved pagination and export messages can be traced
back to the video they belong to.
"""

import logging
import os
import sys
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

ROOT_LOGGER_NAME = "youtube_exporter"

_video_context = threading.local()


def get_video_context() -> Optional[str]:
    """Video ID currently being exported on this thread, if any."""
    return getattr(_video_context, "video", None)


@contextmanager
def video_context(video_id: str) -> Iterator[None]:
    """Prefix this thread's log lines with video_id until the block exits."""
    previous = get_video_context()
    _video_context.video = video_id
    try:
        yield
    finally:
        _video_context.video = previous


class VideoContextFormatter(logging.Formatter):
    def format(self, record):
        # Several handlers format the same record; prefix it once
        video = get_video_context()
        if video and not getattr(record, "_video_prefixed", False):
            record.msg = f"[{video}] {record.msg}"
            record._video_prefixed = True
        return super().format(record)


def setup_logging(
    log_dir: str = "logs",
    log_level: str = "DEBUG",
    console_level: str = "INFO",
) -> logging.Logger:
    """
    Attach a per-run file handler and a stdout handler to the exporter's root logger.

    Calling this again replaces the handlers, so it is safe to run once per CLI
    invocation. The file is named export_<timestamp>.log.

    Returns:
        The root exporter logger
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_file = Path(log_dir) / f"export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(VideoContextFormatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(file_handler)

    latest_log = Path(log_dir) / "latest.log"
    try:
        if latest_log.exists() or latest_log.is_symlink():
            latest_log.unlink()
        if os.name != "nt":
            latest_log.symlink_to(log_file.name)
    except (OSError, NotImplementedError) as e:
        logger.debug(f"Could not create latest.log symlink: {e}")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(VideoContextFormatter(
        "%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    ))
    logger.addHandler(console_handler)

    logger.info(f"Logging to {log_file} (file={log_level}, console={console_level})")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the exporter's root logger, e.g. get_logger("catalog")."""
    base_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if name:
        return base_logger.getChild(name)
    return base_logger


class LogContext:
    """Log START/DONE (or FAILED) around a block, with elapsed seconds."""

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.log(self.level, f"START: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = (datetime.now() - self.start_time).total_seconds()
        if exc_type:
            self.logger.error(f"FAILED: {self.operation} after {elapsed:.2f}s - {exc_type.__name__}: {exc_val}")
        else:
            self.logger.log(self.level, f"DONE: {self.operation} in {elapsed:.2f}s")
        return False
