"""Tests for adapter entity validation."""

import pytest

from comicsource.scrapers.models import ChapterImage, SearchResult


def _result(**overrides) -> SearchResult:
    fields = {"id": "solo-leveling", "title": "Solo Leveling", "url": "https://alpha.test/series/solo-leveling"}
    fields.update(overrides)
    return SearchResult(**fields)


class TestSearchResult:
    """Coercion of loosely typed source fields."""

    def test_defaults(self):
        result = _result()

        assert result.latest_chapter == 0
        assert result.last_updated == ""
        assert result.rating is None
        assert result.cover_image is None

    def test_numeric_fields_coerced(self):
        result = _result(id=42, latest_chapter="12.5", rating="4.8", last_updated_timestamp=1718452800000.0)

        assert result.id == "42"
        assert result.latest_chapter == 12.5
        assert result.rating == 4.8
        assert result.last_updated_timestamp == 1718452800000
        assert isinstance(result.last_updated_timestamp, int)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"title": ""},
            {"url": None},
            {"id": None},
            {"id": {"slug": "x"}},
            {"rating": "N/A"},
            {"rating": float("nan")},
            {"rating": True},
            {"latest_chapter": None},
            {"latest_chapter": "latest"},
            {"cover_image": {"src": "/c.jpg"}},
            {"last_updated": None},
            {"last_updated_timestamp": "yesterday"},
        ],
    )
    def test_invalid_fields_rejected(self, overrides):
        with pytest.raises(ValueError):
            _result(**overrides)


class TestChapterImage:
    def test_page_is_one_based(self):
        with pytest.raises(ValueError):
            ChapterImage(url="https://cdn.test/0.jpg", page=0)
