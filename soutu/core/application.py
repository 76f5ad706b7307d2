"""
Bot application factory.

This module contains the factory function for creating and configuring
the Telegram bot application with the appropriate API endpoints.
"""

import logging

from telegram.ext import Application

from soutu.config import DEBUG_MODE, TELEGRAM_API_BASE_URL, TELEGRAM_TOKEN
from soutu.handlers import URL_ISSUER_KEY
from soutu.utils.media_proxy import UrlIssuer

logger = logging.getLogger(__name__)


def create_application(issuer: UrlIssuer) -> Application:
    """
    Create and configure the Telegram bot application.

    In debug mode, uses the Telegram test environment endpoints.

    Args:
        issuer: URL issuer shared by all handlers through ``bot_data``.

    Returns:
        Application: Configured Telegram bot application instance.
    """
    application = (
        Application.builder()
        .token(TELEGRAM_TOKEN)
        .base_url(f"{TELEGRAM_API_BASE_URL}/bot")
        .base_file_url(f"{TELEGRAM_API_BASE_URL}/file/bot")
        .concurrent_updates(True)
        .build()
    )
    if DEBUG_MODE:
        # Override the bot's base_url to include /test/ for test environment
        application.bot._base_url = f"{TELEGRAM_API_BASE_URL}/bot{TELEGRAM_TOKEN}/test"
        application.bot._base_file_url = f"{TELEGRAM_API_BASE_URL}/file/bot{TELEGRAM_TOKEN}/test"
        logger.info("🧪 Running in DEBUG mode with test environment endpoints")
    else:
        logger.info("🚀 Running in PRODUCTION mode")
    logger.info("🔗 API Base URL: %s", TELEGRAM_API_BASE_URL)

    application.bot_data[URL_ISSUER_KEY] = issuer
    return application
