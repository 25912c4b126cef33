"""Tests for the adapter registry and built-in adapter registration."""

import pytest

from comicsource.core.exceptions import AdapterRegistrationError, NotFoundError
from comicsource.scrapers.register_adapters import BUILTIN_ADAPTERS, register_all_adapters
from comicsource.scrapers.registry import AdapterRegistry

from conftest import FakeAdapter


class TestRegistration:
    """Adding adapters to a registry."""

    def test_rejects_non_adapter(self):
        with pytest.raises(AdapterRegistrationError):
            AdapterRegistry().register(object())

    def test_rejects_duplicate_id(self):
        reg = AdapterRegistry()
        reg.register(FakeAdapter("alpha", "Alpha", ("alpha.test",)))

        with pytest.raises(AdapterRegistrationError, match="Duplicate source_id"):
            reg.register(FakeAdapter("alpha", "Other", ("other.test",)))

    def test_rejects_overlapping_domains(self):
        reg = AdapterRegistry()
        reg.register(FakeAdapter("comics", "Comics", ("comics.test",)))

        with pytest.raises(AdapterRegistrationError, match="overlaps"):
            reg.register(FakeAdapter("mirror", "Mirror", ("mirror.comics.test",)))

        assert len(reg) == 1

    def test_preserves_registration_order(self, registry):
        assert [a.source_id for a in registry.all()] == ["alpha", "beta", "gamma"]
        assert registry.names() == ["alpha", "beta", "gamma"]


class TestLookup:
    """Resolving adapters by URL, name and id."""

    def test_resolve_by_url(self, registry):
        adapter = registry.resolve_by_url("https://beta.test/series/42")
        assert adapter is not None
        assert adapter.source_id == "beta"

    def test_resolve_by_url_unknown(self, registry):
        assert registry.resolve_by_url("https://unknown.test/series/1") is None
        assert registry.resolve_by_url("") is None

    def test_resolve_by_name_is_case_insensitive(self, registry):
        assert registry.resolve_by_name("GAMMA").source_id == "gamma"
        assert registry.resolve_by_name("  alpha ").source_id == "alpha"

    def test_resolve_by_name_falls_back_to_id(self):
        reg = AdapterRegistry()
        reg.register(FakeAdapter("kenscans", "Ken Scans", ("kencomics.test",)))

        assert reg.resolve_by_name("ken scans").source_id == "kenscans"
        assert reg.resolve_by_name("KENSCANS").source_id == "kenscans"
        assert reg.resolve_by_name("ken") is None

    def test_get_unknown_id(self, registry):
        with pytest.raises(NotFoundError):
            registry.get("delta")

    def test_membership_by_source_id(self, registry):
        assert "alpha" in registry
        assert "Alpha" not in registry
        assert "delta" not in registry

    def test_descriptors(self, registry):
        descriptor = registry.descriptors()[0]
        assert descriptor.source_id == "alpha"
        assert descriptor.name == "Alpha"
        assert descriptor.base_url == "https://alpha.test"


class TestBuiltinAdapters:
    """The shipped adapter set."""

    def test_registers_all_sources_in_order(self):
        reg = register_all_adapters(AdapterRegistry())

        assert [a.source_id for a in reg.all()] == [
            "asurascan",
            "mangakatana",
            "madarascans",
            "novelcool",
            "mgeko",
            "kenscans",
            "webtoon",
            "atsumoe",
            "hadesscans",
            "lagoonscans",
        ]
        assert len(reg) == len(BUILTIN_ADAPTERS)

    def test_registration_is_idempotent(self):
        reg = register_all_adapters(AdapterRegistry())
        register_all_adapters(reg)

        assert len(reg) == len(BUILTIN_ADAPTERS)

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://asuracomic.net/series/solo-leveling-1a2b3c", "asurascan"),
            ("https://mangakatana.com/manga/one-piece.1234", "mangakatana"),
            ("https://madarascans.com/series/some-title/", "madarascans"),
            ("https://www.novelcool.com/novel/Some_Title.html", "novelcool"),
            ("https://www.mgeko.cc/manga/some-title/", "mgeko"),
            ("https://www.webtoons.com/en/action/title/list?title_no=95", "webtoon"),
            ("https://atsu.moe/manga/abc123", "atsumoe"),
            ("https://hadesscans.com/manga/the-greatest-estate-developer/", "hadesscans"),
            ("https://lagoonscans.com/manga/i-was-reincarnated/", "lagoonscans"),
        ],
    )
    def test_url_routing(self, url, expected):
        reg = register_all_adapters(AdapterRegistry())
        assert reg.resolve_by_url(url).source_id == expected

    def test_only_some_sources_list_images(self):
        reg = register_all_adapters(AdapterRegistry())

        with_images = [a.source_id for a in reg.all() if a.supports_chapter_images()]

        assert with_images == ["madarascans", "novelcool", "hadesscans"]
