"""Unit tests for the edge response cache."""

from soutu.utils.services import edge_cache_service

NOW = 1_000_000


def test_store_and_get():
    edge_cache_service.store_response(
        "file-a", b"bytes", {"content-type": "image/jpeg"}, ttl_seconds=100, now=NOW
    )

    cached = edge_cache_service.get_cached_response("file-a", now=NOW + 99)

    assert cached.body == b"bytes"
    assert cached.headers == {"content-type": "image/jpeg"}
    assert cached.stored_at == NOW
    assert cached.expires_at == NOW + 100


def test_expired_entry_is_absent():
    edge_cache_service.store_response("file-a", b"bytes", {}, ttl_seconds=100, now=NOW)
    assert edge_cache_service.get_cached_response("file-a", now=NOW + 100) is None
    # Lazily removed on read
    assert edge_cache_service.evict("file-a") is False


def test_zero_ttl_disables_storage():
    edge_cache_service.store_response("file-a", b"bytes", {}, ttl_seconds=0, now=NOW)
    assert edge_cache_service.get_cached_response("file-a", now=NOW) is None


def test_store_replaces_entry():
    edge_cache_service.store_response("file-a", b"old", {}, ttl_seconds=100, now=NOW)
    edge_cache_service.store_response("file-a", b"new", {"etag": "2"}, ttl_seconds=100, now=NOW + 10)

    cached = edge_cache_service.get_cached_response("file-a", now=NOW + 50)
    assert cached.body == b"new"
    assert cached.headers == {"etag": "2"}
    assert cached.stored_at == NOW + 10


def test_evict():
    edge_cache_service.store_response("file-a", b"bytes", {}, ttl_seconds=100, now=NOW)
    assert edge_cache_service.evict("file-a") is True
    assert edge_cache_service.get_cached_response("file-a", now=NOW) is None


def test_purge_expired():
    edge_cache_service.store_response("old", b"1", {}, ttl_seconds=10, now=NOW)
    edge_cache_service.store_response("live", b"2", {}, ttl_seconds=1000, now=NOW)

    assert edge_cache_service.purge_expired(now=NOW + 10) == 1
    assert edge_cache_service.get_cached_response("live", now=NOW + 10) is not None
