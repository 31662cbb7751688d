"""Tests for parsing API payloads into records."""

import pytest

from conftest import channel_item, thread_item, video_item
from models import ChannelInfo, CommentRecord, VideoSummary


class TestVideoSummary:
    def test_from_api(self):
        video = VideoSummary.from_api(video_item("abc", views=10, likes=2, comments=3, title="Hello"))

        assert video.id == "abc"
        assert video.title == "Hello"
        assert video.thumbnail_url == "https://i.ytimg.com/vi/abc/hqdefault.jpg"
        assert (video.view_count, video.like_count, video.comment_count) == (10, 2, 3)

    def test_missing_statistics_are_zero(self):
        item = {"id": "abc", "snippet": {"title": "Hidden likes"}, "statistics": {"viewCount": "5"}}

        video = VideoSummary.from_api(item)

        assert video.view_count == 5
        assert video.like_count == 0
        assert video.comment_count == 0
        assert video.thumbnail_url is None

    def test_to_dict_uses_camel_case(self):
        video = VideoSummary.from_api(video_item("abc", views=1))

        assert set(video.to_dict()) == {
            "id", "title", "thumbnailUrl", "publishedAt", "viewCount", "likeCount", "commentCount",
        }

    def test_immutable(self):
        video = VideoSummary.from_api(video_item("abc"))

        with pytest.raises(AttributeError):
            video.view_count = 5


class TestCommentRecord:
    def test_from_thread(self):
        comment = CommentRecord.from_thread(thread_item("c1", author="Ann", text="hi", likes=4))

        assert comment.id == "c1"
        assert comment.author_name == "Ann"
        assert comment.author_profile_image_url == "https://yt3.ggpht.com/Ann.jpg"
        assert comment.like_count == 4

    def test_missing_top_level_comment(self):
        with pytest.raises(KeyError):
            CommentRecord.from_thread({"id": "c1", "snippet": {}})


class TestChannelInfo:
    def test_from_api(self):
        channel = ChannelInfo.from_api(channel_item("UC1", title="Chan", uploads="UU1"))

        assert channel.title == "Chan"
        assert channel.subscriber_count == 1000
        assert channel.video_count == 42
        assert channel.view_count == 99999
        assert channel.uploads_playlist_id == "UU1"
