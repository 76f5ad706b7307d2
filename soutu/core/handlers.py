"""
Bot handler registration.

This module contains functions for registering all command and message
handlers with the Telegram bot application.
"""

from telegram.ext import Application, CommandHandler, MessageHandler, filters

from soutu.handlers import search, start

IMAGE_FILTER = filters.PHOTO | filters.Document.IMAGE

# "/s" or "/s@botname" as the caption of an image
SEARCH_CAPTION_FILTER = filters.CaptionRegex(r"^/s(@\w+)?(\s|$)")


def register_handlers(application: Application) -> None:
    """
    Register all command and message handlers with the application.

    In groups the bot only answers the /s command (on an image or as a reply
    to one); in private chats every image is searched.

    Args:
        application: The Telegram bot application instance.
    """
    _register_user_handlers(application)
    _register_search_handlers(application)


def _register_user_handlers(application: Application) -> None:
    """Register user command handlers."""
    application.add_handler(CommandHandler("start", start))


def _register_search_handlers(application: Application) -> None:
    """Register image search handlers."""
    application.add_handler(CommandHandler("s", search))
    application.add_handler(MessageHandler(IMAGE_FILTER & SEARCH_CAPTION_FILTER, search))
    application.add_handler(MessageHandler(filters.ChatType.PRIVATE & IMAGE_FILTER, search))
