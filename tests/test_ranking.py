"""Tests for ranking and comment filtering."""

import pytest

import ranking
from models import CommentRecord, VideoSummary
from ranking import COMMENT_METRICS, VIDEO_METRICS, filter_comments, rank, strip_markup


def video(video_id, views=0, likes=0, comments=0, published="2024-01-01T00:00:00Z"):
    return VideoSummary(video_id, f"Video {video_id}", None, published, views, likes, comments)


def comment(comment_id, likes=0, published="2024-01-01T00:00:00Z", text="text", author="author"):
    return CommentRecord(comment_id, author, None, text, likes, published)


class TestRankVideos:
    def test_views_descending(self):
        videos = [video("a", views=5), video("b", views=50), video("c", views=20)]

        assert [v.id for v in rank(videos, "views")] == ["b", "c", "a"]

    def test_likes_and_comments(self):
        videos = [video("a", likes=1, comments=9), video("b", likes=9, comments=1)]

        assert [v.id for v in rank(videos, "likes")] == ["b", "a"]
        assert [v.id for v in rank(videos, "comments")] == ["a", "b"]

    def test_missing_counts_rank_as_zero(self):
        videos = [video("none", views=None), video("one", views=1), video("zero", views=0)]

        assert [v.id for v in rank(videos, "views")] == ["one", "none", "zero"]

    def test_date_most_recent_first(self):
        videos = [
            video("old", published="2020-05-01T00:00:00Z"),
            video("new", published="2024-05-01T00:00:00Z"),
            video("undated", published=None),
            video("mid", published="2022-05-01T00:00:00Z"),
        ]

        assert [v.id for v in rank(videos, "date")] == ["new", "mid", "old", "undated"]

    @pytest.mark.parametrize("metric", sorted(VIDEO_METRICS))
    def test_stable_for_equal_keys(self, metric):
        videos = [video(str(i), views=7, likes=7, comments=7) for i in range(6)]

        assert [v.id for v in rank(videos, metric)] == [str(i) for i in range(6)]

    def test_stable_among_mixed_keys(self):
        videos = [video("a", views=1), video("b", views=2), video("c", views=1), video("d", views=2)]

        assert [v.id for v in rank(videos, "views")] == ["b", "d", "a", "c"]

    def test_input_not_mutated(self):
        videos = [video("a", views=1), video("b", views=2)]
        original = list(videos)

        rank(videos, "views")

        assert videos == original

    def test_unknown_metric(self):
        with pytest.raises(ValueError):
            rank([video("a")], "popularity")

    def test_memoized_per_collection_and_metric(self):
        videos = [video("a", views=1), video("b", views=2)]

        first = rank(videos, "views")
        second = rank(videos, "views")
        rank(videos, "likes")

        info = ranking._rank_cached.cache_info()
        assert first == second
        assert info.hits == 1
        assert info.misses == 2

    def test_resort_after_truncation_only_sees_retained_items(self):
        # Catalog capped at 2 by views; re-sorting by likes cannot bring back "c"
        videos = [video("a", views=100, likes=1), video("b", views=90, likes=2), video("c", views=1, likes=1000)]
        retained = rank(videos, "views")[:2]

        assert [v.id for v in rank(retained, "likes")] == ["b", "a"]


class TestRankComments:
    def test_recent_and_oldest(self):
        comments = [
            comment("mid", published="2024-02-01T00:00:00Z"),
            comment("new", published="2024-03-01T00:00:00Z"),
            comment("old", published="2024-01-01T00:00:00Z"),
        ]

        assert [c.id for c in rank(comments, "recent")] == ["new", "mid", "old"]
        assert [c.id for c in rank(comments, "oldest")] == ["old", "mid", "new"]

    def test_likes(self):
        comments = [comment("a", likes=1), comment("b", likes=10), comment("c", likes=5)]

        assert [c.id for c in rank(comments, "likes")] == ["b", "c", "a"]

    @pytest.mark.parametrize("metric", sorted(COMMENT_METRICS))
    def test_stable_for_equal_keys(self, metric):
        comments = [comment(str(i), likes=3) for i in range(5)]

        assert [c.id for c in rank(comments, metric)] == [str(i) for i in range(5)]


class TestFilterComments:
    def test_min_likes(self):
        comments = [comment("a", likes=0), comment("b", likes=5), comment("c", likes=10)]

        assert [c.id for c in filter_comments(comments, min_likes=5)] == ["b", "c"]

    def test_search_ignores_case_and_markup(self):
        comments = [
            comment("a", text="<b>Great</b> video"),
            comment("b", text="meh"),
            comment("c", text="<a href=\"https://great.example\">link</a>"),
        ]

        assert [c.id for c in filter_comments(comments, search="GREAT")] == ["a"]

    def test_search_matches_author(self):
        comments = [comment("a", author="Grace"), comment("b", author="Bob")]

        assert [c.id for c in filter_comments(comments, search="grace")] == ["a"]

    def test_no_filters_keeps_everything(self):
        comments = [comment("a"), comment("b")]

        assert filter_comments(comments) == comments


def test_strip_markup():
    assert strip_markup('<b>hi</b> <a href="x">there</a><br>') == "hi there"
    assert strip_markup(None) == ""
