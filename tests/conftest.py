"""Shared fixtures: a fake YouTube client and builders for API payloads."""

import pytest

from config import Config, set_config
from errors import TransportError
import ranking


@pytest.fixture(autouse=True)
def settings():
    """Small pages and no pacing so tests stay fast and deterministic."""
    cfg = Config(
        comment_page_size=10,
        api_max_results_per_page=5,
        page_delay_seconds=0.0,
        item_delay_seconds=0.0,
    )
    set_config(cfg)
    ranking._rank_cached.cache_clear()
    yield cfg
    set_config(None)


def video_item(video_id, views=0, likes=0, comments=0, published="2024-01-01T00:00:00Z", title=None):
    return {
        "id": video_id,
        "snippet": {
            "title": title or f"Video {video_id}",
            "publishedAt": published,
            "thumbnails": {"high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"}},
        },
        "statistics": {
            "viewCount": str(views),
            "likeCount": str(likes),
            "commentCount": str(comments),
        },
    }


def thread_item(comment_id, author="Someone", text="Nice video", likes=0, published="2024-01-01T00:00:00Z"):
    return {
        "id": comment_id,
        "snippet": {
            "topLevelComment": {
                "id": comment_id,
                "snippet": {
                    "authorDisplayName": author,
                    "authorProfileImageUrl": f"https://yt3.ggpht.com/{author}.jpg",
                    "textDisplay": text,
                    "likeCount": likes,
                    "publishedAt": published,
                },
            },
            "totalReplyCount": 0,
        },
    }


def channel_item(channel_id="UC" + "x" * 22, title="Test Channel", uploads="UU" + "x" * 22):
    return {
        "id": channel_id,
        "snippet": {"title": title, "description": "About", "thumbnails": {}},
        "statistics": {"subscriberCount": "1000", "videoCount": "42", "viewCount": "99999"},
        "contentDetails": {"relatedPlaylists": {"uploads": uploads}},
    }


def _paged(pages, page_token):
    """Serve pages[i] for token 'p<i>'; an exception in the list is raised instead."""
    index = int(page_token[1:]) if page_token else 0
    page = pages[index]
    if isinstance(page, Exception):
        raise page
    response = {"items": page}
    if index + 1 < len(pages):
        response["nextPageToken"] = f"p{index + 1}"
    return response


class FakeClient:
    """Stands in for YouTubeClient, serving canned pages and recording every call."""

    def __init__(
        self,
        handles=None,
        channels=None,
        search_pages=None,
        playlist_pages=None,
        videos=None,
        comment_pages=None,
        video_errors=None,
    ):
        self.handles = handles or {}
        self.channels = channels or {}
        self.search_pages = search_pages or [[]]
        self.playlist_pages = playlist_pages or [[]]
        self.video_items = videos or {}
        self.comment_pages = comment_pages or {}
        self.video_errors = video_errors or {}
        self.calls = []
        self.on_comment_page = None

    def channels_by_handle(self, handle):
        self.calls.append(("channels_by_handle", handle))
        item = self.handles.get(handle)
        return {"items": [item] if item else []}

    def channels_by_id(self, channel_id):
        self.calls.append(("channels_by_id", channel_id))
        item = self.channels.get(channel_id)
        return {"items": [item] if item else []}

    def search_videos_page(self, channel_id, max_results=50, page_token=None):
        self.calls.append(("search", channel_id, page_token))
        response = _paged(self.search_pages, page_token)
        response["items"] = [{"id": {"kind": "youtube#video", "videoId": vid}} for vid in response["items"]]
        return response

    def playlist_items_page(self, playlist_id, max_results=50, page_token=None):
        self.calls.append(("playlist", playlist_id, page_token))
        response = _paged(self.playlist_pages, page_token)
        response["items"] = [{"contentDetails": {"videoId": vid}} for vid in response["items"]]
        return response

    def videos(self, video_ids):
        self.calls.append(("videos", list(video_ids)))
        for video_id in video_ids:
            if video_id in self.video_errors:
                raise self.video_errors[video_id]
        return {"items": [self.video_items[vid] for vid in video_ids if vid in self.video_items]}

    def comment_threads_page(self, video_id, max_results=100, page_token=None, order="time"):
        self.calls.append(("comments", video_id, page_token, max_results, order))
        if self.on_comment_page:
            self.on_comment_page(video_id, page_token)
        pages = self.comment_pages.get(video_id, [[]])
        return _paged(pages, page_token)

    def fetched_comment_videos(self):
        seen = []
        for call in self.calls:
            if call[0] == "comments" and call[1] not in seen:
                seen.append(call[1])
        return seen


def comment_pages(video_id, page_count, page_size=10, fail_at=None):
    """Build page_count full pages of threads; fail_at replaces that page index with a TransportError."""
    pages = []
    for page in range(page_count):
        if fail_at is not None and page == fail_at:
            pages.append(TransportError("commentThreads.list failed with HTTP 500", status=500))
            continue
        pages.append([thread_item(f"{video_id}-c{page}-{i}") for i in range(page_size)])
    return pages


@pytest.fixture
def sleeps():
    """Pass `sleep=sleeps.append` to record requested pauses instead of sleeping."""
    return []
