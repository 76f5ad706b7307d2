"""Tests for the Telegram resolver and fetcher collaborators."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from telegram.error import BadRequest, NetworkError

from soutu.utils.errors import FileReferenceNotFound, UpstreamUnavailable
from soutu.utils.telegram_files import TelegramFileFetcher, TelegramFileResolver

FILE_BASE = "https://api.telegram.org/file/bot123:secret"


def _bot(get_file):
    bot = MagicMock()
    bot.base_file_url = FILE_BASE
    bot.get_file = get_file
    return bot


class TestTelegramFileResolver:
    async def test_strips_token_url_prefix(self):
        bot = _bot(AsyncMock(return_value=SimpleNamespace(file_path=f"{FILE_BASE}/photos/file_7.jpg")))
        assert await TelegramFileResolver(bot).resolve("fid") == "photos/file_7.jpg"
        bot.get_file.assert_awaited_once_with("fid")

    async def test_relative_path_is_kept(self):
        bot = _bot(AsyncMock(return_value=SimpleNamespace(file_path="photos/file_7.jpg")))
        assert await TelegramFileResolver(bot).resolve("fid") == "photos/file_7.jpg"

    async def test_bad_request_is_not_found(self):
        bot = _bot(AsyncMock(side_effect=BadRequest("Wrong file_id specified")))
        with pytest.raises(FileReferenceNotFound):
            await TelegramFileResolver(bot).resolve("fid")

    async def test_missing_path_is_not_found(self):
        bot = _bot(AsyncMock(return_value=SimpleNamespace(file_path=None)))
        with pytest.raises(FileReferenceNotFound):
            await TelegramFileResolver(bot).resolve("fid")

    async def test_network_error_is_upstream_error(self):
        bot = _bot(AsyncMock(side_effect=NetworkError("connection reset")))
        with pytest.raises(UpstreamUnavailable):
            await TelegramFileResolver(bot).resolve("fid")


class TestTelegramFileFetcher:
    async def test_fetches_file(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, content=b"img", headers={"Content-Type": "image/jpeg"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            upstream = await TelegramFileFetcher(client, FILE_BASE).fetch("photos/file_7.jpg")

        assert seen == [f"{FILE_BASE}/photos/file_7.jpg"]
        assert upstream.body == b"img"
        assert upstream.headers["content-type"] == "image/jpeg"
        assert upstream.status_code == 200

    @pytest.mark.parametrize("status", [404, 500, 302])
    async def test_non_success_status(self, status):
        transport = httpx.MockTransport(lambda request: httpx.Response(status))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(UpstreamUnavailable):
                await TelegramFileFetcher(client, FILE_BASE).fetch("photos/file_7.jpg")

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(UpstreamUnavailable):
                await TelegramFileFetcher(client, FILE_BASE, timeout_seconds=0.1).fetch("p.jpg")

    def test_build_url_joins_cleanly(self):
        fetcher = TelegramFileFetcher(MagicMock(), f"{FILE_BASE}/")
        assert fetcher.build_url("/photos/a.jpg") == f"{FILE_BASE}/photos/a.jpg"
