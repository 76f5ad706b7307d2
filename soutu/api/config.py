"""
Shared configuration and initialization for the API server.

This module provides centralized access to environment variables and the
factories that turn them into the objects the media proxy runs on.
"""

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from telegram import Bot

from soutu.utils.logging_utils import configure_logging
from soutu.utils.media_proxy import ProxySettings
from soutu.utils.signing import SigningKey

# Load environment variables
load_dotenv()

# Debug mode detection
DEBUG_MODE = "--debug" in sys.argv or os.getenv("DEBUG_MODE") == "1"

# Configure logging
configure_logging(debug=DEBUG_MODE)

logger = logging.getLogger(__name__)

# Environment-based configuration
if DEBUG_MODE:
    TELEGRAM_TOKEN = os.getenv("DEBUG_TELEGRAM_AUTH_TOKEN")
    PUBLIC_BASE_URL = os.getenv("DEBUG_PUBLIC_BASE_URL", "http://localhost:8000")
else:
    TELEGRAM_TOKEN = os.getenv("TELEGRAM_AUTH_TOKEN")
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")

# Dedicated proxy secret; the bot token is used when it is not set
TG_PROXY_SECRET = os.getenv("TG_PROXY_SECRET")

# Bot API endpoints (a local Bot API server can be used instead of api.telegram.org)
TELEGRAM_API_BASE_URL = os.getenv("TELEGRAM_API_BASE_URL", "https://api.telegram.org").rstrip("/")

# Database configuration
DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL") or None
DB_POOL_SIZE = int(os.getenv("DB_CONNECTION_POOL_SIZE", "6"))
DB_TIMEOUT_SECONDS = int(os.getenv("DB_CONNECTION_TIMEOUT_SECONDS", "30"))
DB_BUSY_TIMEOUT_MS = int(os.getenv("DB_BUSY_TIMEOUT_MS", "5000"))

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))


def build_signing_key() -> SigningKey:
    """Build the process-wide proxy signing key.

    Raises:
        ConfigurationError: If neither TG_PROXY_SECRET nor the bot token is set.
    """
    return SigningKey.from_secrets(TG_PROXY_SECRET, TELEGRAM_TOKEN)


def build_proxy_settings() -> ProxySettings:
    """Proxy settings with the public base URL from the environment."""
    return ProxySettings(base_url=PUBLIC_BASE_URL)


def create_bot_instance() -> Bot:
    """
    Create a Telegram Bot instance used to resolve file paths.

    In debug mode: Uses Telegram's test environment endpoints.

    Returns:
        Bot: Configured Telegram Bot instance

    Raises:
        ConfigurationError: If TELEGRAM_TOKEN is not available
    """
    from soutu.utils.errors import ConfigurationError

    if not TELEGRAM_TOKEN:
        logger.error("Bot token not available for bot instance creation")
        raise ConfigurationError("TELEGRAM_AUTH_TOKEN is not configured")

    bot = Bot(
        token=TELEGRAM_TOKEN,
        base_url=f"{TELEGRAM_API_BASE_URL}/bot",
        base_file_url=f"{TELEGRAM_API_BASE_URL}/file/bot",
    )
    if DEBUG_MODE:
        bot._base_url = f"{TELEGRAM_API_BASE_URL}/bot{TELEGRAM_TOKEN}/test"
        bot._base_file_url = f"{TELEGRAM_API_BASE_URL}/file/bot{TELEGRAM_TOKEN}/test"
    return bot
