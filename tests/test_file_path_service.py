"""Unit tests for cached Telegram file path resolution."""

import pytest

from conftest import FakeResolver
from soutu.utils.errors import FileReferenceNotFound, UpstreamUnavailable
from soutu.utils.services import file_path_service


async def test_miss_asks_resolver_and_caches_under_both_keys():
    resolver = FakeResolver({"fid": "photos/file_1.jpg"})

    path = await file_path_service.resolve_file_path("fid", resolver, file_unique_id="uid-1")

    assert path == "photos/file_1.jpg"
    assert resolver.calls == ["fid"]
    assert file_path_service.get_cached_file_path("fid") == "photos/file_1.jpg"
    assert file_path_service.get_cached_file_path("other-fid", "uid-1") == "photos/file_1.jpg"


async def test_primary_hit_skips_resolver():
    file_path_service.cache_file_path("fid", "photos/cached.jpg")
    resolver = FakeResolver()

    assert await file_path_service.resolve_file_path("fid", resolver) == "photos/cached.jpg"
    assert resolver.calls == []


async def test_alternate_key_hit_backfills_primary():
    file_path_service.cache_file_path("old-fid", "photos/same.jpg", file_unique_id="uid-1")
    resolver = FakeResolver()

    path = await file_path_service.resolve_file_path("new-fid", resolver, file_unique_id="uid-1")

    assert path == "photos/same.jpg"
    assert resolver.calls == []
    assert file_path_service.get_cached_file_path("new-fid") == "photos/same.jpg"


async def test_not_found_is_not_cached():
    resolver = FakeResolver()

    with pytest.raises(FileReferenceNotFound):
        await file_path_service.resolve_file_path("fid", resolver)
    assert file_path_service.get_cached_file_path("fid") is None


async def test_upstream_errors_propagate():
    resolver = FakeResolver(error=UpstreamUnavailable("getFile failed"))

    with pytest.raises(UpstreamUnavailable):
        await file_path_service.resolve_file_path("fid", resolver)


async def test_empty_path_from_resolver_is_not_found():
    class EmptyResolver:
        async def resolve(self, file_id):
            return ""

    with pytest.raises(FileReferenceNotFound):
        await file_path_service.resolve_file_path("fid", EmptyResolver())


def test_forget_file_path_keeps_alternate_key():
    file_path_service.cache_file_path("file-a", "photos/a.jpg", file_unique_id="uniq-a")

    assert file_path_service.forget_file_path("file-a") is True
    assert file_path_service.forget_file_path("file-a") is False
    assert file_path_service.get_cached_file_path("file-a") is None
    assert file_path_service.get_cached_file_path("other-id", "uniq-a") == "photos/a.jpg"


def test_zero_ttl_caches_nothing():
    file_path_service.cache_file_path("file-a", "photos/a.jpg", ttl_seconds=0)
    assert file_path_service.get_cached_file_path("file-a") is None
