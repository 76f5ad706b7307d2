"""
Image search handlers.

Replies to an image with reverse image search links. The links point at a
signed proxy URL so search engines can fetch the Telegram file without ever
seeing the bot token.
"""

import asyncio
import logging

from telegram import Update
from telegram.ext import ContextTypes

from soutu.settings.constants import SEARCH_BUTTONS, SEARCH_REPLY_TEXT, SEARCH_USAGE_TEXT
from soutu.utils.errors import MediaProxyError
from soutu.utils.media_proxy import UrlIssuer
from soutu.utils.search_links import (
    build_image_search_links,
    build_search_keyboard,
    resolve_image_from_message,
)
from soutu.utils.services import file_path_service, search_log_service
from soutu.utils.telegram_files import TelegramFileResolver

logger = logging.getLogger(__name__)

URL_ISSUER_KEY = "url_issuer"


async def search(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Reply with search links for the image on (or replied to by) the message."""
    message = update.effective_message
    user = update.effective_user
    chat = update.effective_chat

    if not message or not user or not chat:
        return

    image = resolve_image_from_message(message)
    if image is None:
        await message.reply_text(SEARCH_USAGE_TEXT)
        return

    issuer: UrlIssuer = context.bot_data[URL_ISSUER_KEY]

    # Warm the path cache while the unique id is known; the proxy only sees file_id
    try:
        await file_path_service.resolve_file_path(
            image.file_id,
            TelegramFileResolver(context.bot),
            file_unique_id=image.file_unique_id,
        )
    except MediaProxyError as exc:
        logger.warning("Could not resolve image %s for user %s: %s", image.file_id, user.id, exc)
        await asyncio.to_thread(search_log_service.record_search, user.id, chat.type, False)
        await message.reply_text("I couldn't fetch that image from Telegram. Please try again.")
        return

    image_url = await issuer.issue_async(image.file_id, user.id)
    links = build_image_search_links(image_url)
    keyboard = build_search_keyboard(links, SEARCH_BUTTONS)

    await message.reply_text(SEARCH_REPLY_TEXT, reply_markup=keyboard)
    await asyncio.to_thread(search_log_service.record_search, user.id, chat.type, True)
    logger.info("Sent search links for %s to user %s in %s chat", image.file_id, user.id, chat.type)
