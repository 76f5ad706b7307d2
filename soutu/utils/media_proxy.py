"""
Signed, rate-limited media delivery proxy.

``UrlIssuer`` turns a Telegram ``file_id`` into a public, time-bounded URL:
a fresh opaque token is bound server-side to the file and the requesting user,
and the canonical ``file_id``/``exp``/``token`` payload is signed with HMAC.

``MediaDeliveryHandler`` serves such URLs. Each request walks a fixed
sequence of checks and stops at the first rejection:

1. ``file_id`` missing                      -> InvalidRequest (404)
2. ``exp`` or ``sig`` missing               -> Forbidden (403)
3. signature mismatch                       -> Forbidden (403)
4. edge cache hit                           -> served as-is (200)
5. link expired                             -> LinkExpired (403)
6. token unknown or bound to another file   -> Forbidden (403)
7. user or client address over its budget   -> RateLimited (429)
8. upstream resolve/fetch fails             -> NotFound (404) / UpstreamUnavailable (502)
9. response is sanitized, cached and served

The edge cache is consulted before expiry, token and rate checks. A cached
resource keeps being served to any correctly signed URL for it, even past
that URL's expiry, and cached hits never consume rate-limit budget. Setting
the cache TTL to 0 or less disables both lookups and writes, so every request
passes all checks. When the upstream download fails the cached file path is
dropped and resolved again on the next request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol

from soutu.settings import constants
from soutu.utils.errors import (
    Forbidden,
    InvalidRequest,
    LinkExpired,
    RateLimited,
    UpstreamUnavailable,
)
from soutu.utils.services import (
    edge_cache_service,
    file_path_service,
    rate_limit_service,
    token_service,
)
from soutu.utils.signing import SigningKey, build_canonical_payload
from soutu.utils.telegram_files import UpstreamFile

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

# Response headers never forwarded to clients or stored in the edge cache
STRIPPED_HEADERS = frozenset(
    {
        "set-cookie",
        "set-cookie2",
        "cache-control",
        "connection",
        "keep-alive",
        "transfer-encoding",
        "content-encoding",
        "content-length",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "upgrade",
    }
)


@dataclass(frozen=True)
class ProxySettings:
    """Tunables shared by the issuer and the delivery handler."""

    base_url: str = ""
    prefix: str = constants.IMAGE_PROXY_PREFIX
    link_ttl: int = constants.IMAGE_PROXY_TTL_SEC
    cache_ttl: int = constants.IMAGE_PROXY_CACHE_TTL_SEC
    rate_limit: int = constants.IMAGE_PROXY_RATE_LIMIT
    rate_window: int = constants.IMAGE_PROXY_RATE_WINDOW
    file_path_ttl: int = constants.FILE_PATH_CACHE_TTL

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.cache_ttl}"


class FileFetcher(Protocol):
    async def fetch(self, file_path: str) -> UpstreamFile: ...


@dataclass
class DeliveredMedia:
    """Final response of a successful delivery."""

    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    from_cache: bool = False


def normalize_base_url(url: str) -> str:
    return (url or "").strip().rstrip("/")


def sanitize_headers(headers: Dict[str, str], cache_control: str) -> Dict[str, str]:
    """Drop session and hop-by-hop headers and pin Cache-Control to the edge TTL."""
    cleaned = {
        name.lower(): value
        for name, value in headers.items()
        if name.lower() not in STRIPPED_HEADERS
    }
    cleaned["cache-control"] = cache_control
    return cleaned


def parse_expiry(raw: Optional[str]) -> int:
    """Parse the ``exp`` parameter; anything unusable counts as missing (0)."""
    try:
        return int(raw) if raw else 0
    except (TypeError, ValueError):
        return 0


class UrlIssuer:
    """Mints signed proxy URLs for ``(file_id, user_id)`` pairs."""

    def __init__(self, key: SigningKey, settings: ProxySettings, clock: Clock = time.time):
        self._key = key
        self._settings = settings
        self._clock = clock

    def issue(self, file_id: str, user_id) -> str:
        """Create and persist a token for the pair, then return the signed URL.

        Storage failures propagate to the caller.
        """
        now = int(self._clock())
        expires = now + self._settings.link_ttl
        token = token_service.generate_token()
        # The link is still valid at now == expires, so the token must outlive that second
        token_service.put_token(
            token, file_id, str(user_id or ""), self._settings.link_ttl + 1, now=now
        )

        payload = build_canonical_payload(file_id, expires, token)
        signature = self._key.sign(payload)
        base = normalize_base_url(self._settings.base_url)
        return f"{base}{self._settings.prefix}?{payload}&{constants.PARAM_SIGNATURE}={signature}"

    async def issue_async(self, file_id: str, user_id) -> str:
        return await asyncio.to_thread(self.issue, file_id, user_id)


class MediaDeliveryHandler:
    """Verifies signed proxy requests and serves the media behind them."""

    def __init__(
        self,
        key: SigningKey,
        settings: ProxySettings,
        resolver: file_path_service.FilePathResolver,
        fetcher: FileFetcher,
        clock: Clock = time.time,
    ):
        self._key = key
        self._settings = settings
        self._resolver = resolver
        self._fetcher = fetcher
        self._clock = clock

    @property
    def settings(self) -> ProxySettings:
        return self._settings

    def _verify_signature(self, file_id: str, expires: int, token: str, signature: str) -> None:
        payload = build_canonical_payload(file_id, expires, token)
        if not self._key.verify(payload, signature):
            raise Forbidden("Signature mismatch")

    async def _check_rate_limits(self, user_id: str, client_ip: str, now: int) -> None:
        limit = self._settings.rate_limit
        window = self._settings.rate_window
        user_allowed = await asyncio.to_thread(
            rate_limit_service.allow, "uid", user_id, limit, window, now
        )
        ip_allowed = await asyncio.to_thread(
            rate_limit_service.allow, "ip", client_ip, limit, window, now
        )
        if not user_allowed or not ip_allowed:
            raise RateLimited(
                "Rate limited "
                f"(uid={'ok' if user_allowed else 'over'}, ip={'ok' if ip_allowed else 'over'})"
            )

    async def deliver(
        self,
        file_id: Optional[str],
        expires: Optional[str],
        token: Optional[str],
        signature: Optional[str],
        client_ip: str,
    ) -> DeliveredMedia:
        """Run the delivery pipeline for one request.

        Args:
            file_id: ``file_id`` query parameter.
            expires: ``exp`` query parameter (Unix seconds, as received).
            token: ``token`` query parameter.
            signature: ``sig`` query parameter.
            client_ip: Network address of the client, used for rate limiting.

        Returns:
            The media to serve.

        Raises:
            MediaProxyError: A subclass describing why the request was rejected.
        """
        if not file_id:
            raise InvalidRequest("Missing file_id")

        expiry = parse_expiry(expires)
        token = token or ""
        if not expiry or not signature:
            raise Forbidden("Missing exp or sig")

        self._verify_signature(file_id, expiry, token, signature)

        now = int(self._clock())
        cached = None
        # A non-positive cache TTL turns the edge cache off for reads as well as writes
        if self._settings.cache_ttl > 0:
            cached = await asyncio.to_thread(edge_cache_service.get_cached_response, file_id, now)
        if cached is not None:
            logger.debug("Edge cache hit for %s", file_id)
            return DeliveredMedia(body=cached.body, headers=cached.headers, from_cache=True)

        if now > expiry:
            raise LinkExpired(f"Link expired at {expiry}")

        binding = await asyncio.to_thread(token_service.get_token, token, now)
        if binding is None or binding.file_id != file_id:
            raise Forbidden("Unknown or mismatched token")

        await self._check_rate_limits(binding.user_id, client_ip, now)

        file_path = await file_path_service.resolve_file_path(
            file_id, self._resolver, ttl_seconds=self._settings.file_path_ttl
        )
        try:
            upstream = await self._fetcher.fetch(file_path)
        except UpstreamUnavailable:
            # The path may have gone stale; the next request resolves it again
            await asyncio.to_thread(file_path_service.forget_file_path, file_id)
            raise

        headers = sanitize_headers(upstream.headers, self._settings.cache_control)
        await asyncio.to_thread(
            edge_cache_service.store_response,
            file_id,
            upstream.body,
            headers,
            self._settings.cache_ttl,
            now,
        )
        logger.info(
            "Delivered %s (%d bytes) to uid=%s",
            file_id,
            len(upstream.body),
            binding.user_id or "anon",
        )
        return DeliveredMedia(body=upstream.body, headers=headers)
