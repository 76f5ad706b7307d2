"""
Telegram collaborators for the media proxy.

``TelegramFileResolver`` turns a ``file_id`` into the relative download path
reported by ``getFile``; ``TelegramFileFetcher`` downloads that path from the
Bot API file endpoint with the bot token in the URL as credential.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

import httpx
from telegram import Bot
from telegram.error import BadRequest, TelegramError

from soutu.utils.errors import FileReferenceNotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass
class UpstreamFile:
    """Body and headers of a successful upstream download."""

    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    status_code: int = 200


class TelegramFileResolver:
    """Resolves file identifiers through the Bot API ``getFile`` method."""

    def __init__(self, bot: Bot):
        self._bot = bot

    async def resolve(self, file_id: str) -> str:
        try:
            telegram_file = await self._bot.get_file(file_id)
        except BadRequest as exc:
            logger.info("getFile rejected %s: %s", file_id, exc.message)
            raise FileReferenceNotFound(f"No file path for {file_id}") from exc
        except TelegramError as exc:
            logger.warning("getFile failed for %s: %s", file_id, exc)
            raise UpstreamUnavailable(f"getFile failed: {exc}") from exc

        file_path = telegram_file.file_path
        if not file_path:
            raise FileReferenceNotFound(f"No file path for {file_id}")

        # python-telegram-bot expands the path into a full URL containing the token
        prefix = f"{self._bot.base_file_url}/"
        if file_path.startswith(prefix):
            file_path = file_path[len(prefix) :]
        return file_path


class TelegramFileFetcher:
    """Downloads Telegram files with a single, time-bounded GET."""

    def __init__(self, client: httpx.AsyncClient, file_url_prefix: str, timeout_seconds: float = 20.0):
        """
        Args:
            client: Shared HTTP client.
            file_url_prefix: Bot API file URL including the bot token, e.g.
                ``https://api.telegram.org/file/bot<token>`` (``Bot.base_file_url``).
            timeout_seconds: Upper bound for the whole download.
        """
        self._client = client
        self._file_url_prefix = file_url_prefix.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds)

    def build_url(self, file_path: str) -> str:
        return f"{self._file_url_prefix}/{file_path.lstrip('/')}"

    async def fetch(self, file_path: str) -> UpstreamFile:
        """Download *file_path*.

        Raises:
            UpstreamUnavailable: On transport errors, timeouts or non-2xx responses.
        """
        try:
            response = await self._client.get(self.build_url(file_path), timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.warning("Upstream fetch failed for %s: %s", file_path, exc.__class__.__name__)
            raise UpstreamUnavailable(f"Upstream fetch failed: {exc.__class__.__name__}") from exc

        if not response.is_success:
            logger.warning("Upstream returned %d for %s", response.status_code, file_path)
            raise UpstreamUnavailable(f"Upstream returned {response.status_code}")

        return UpstreamFile(
            body=response.content,
            headers=dict(response.headers),
            status_code=response.status_code,
        )
