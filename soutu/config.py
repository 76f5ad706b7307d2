"""
Shared configuration and utilities for bot handlers.

This module centralizes configuration and environment variables used by the
bot process, and initializes the database and the URL issuer at startup.
"""

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from soutu.utils import database
from soutu.utils.logging_utils import configure_logging
from soutu.utils.media_proxy import ProxySettings, UrlIssuer
from soutu.utils.signing import SigningKey

# Load environment variables
load_dotenv()

# Determine debug mode
DEBUG_MODE = "--debug" in sys.argv or os.getenv("DEBUG_MODE") == "1"

# Configure logging
configure_logging(debug=DEBUG_MODE)
logger = logging.getLogger(__name__)

# Load environment-specific variables
if DEBUG_MODE:
    TELEGRAM_TOKEN = os.getenv("DEBUG_TELEGRAM_AUTH_TOKEN")
    PUBLIC_BASE_URL = os.getenv("DEBUG_PUBLIC_BASE_URL", "http://localhost:8000")
else:
    TELEGRAM_TOKEN = os.getenv("TELEGRAM_AUTH_TOKEN")
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")

TG_PROXY_SECRET = os.getenv("TG_PROXY_SECRET")
TELEGRAM_API_BASE_URL = os.getenv("TELEGRAM_API_BASE_URL", "https://api.telegram.org").rstrip("/")

# Database configuration
DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL") or None
DB_POOL_SIZE = int(os.getenv("DB_CONNECTION_POOL_SIZE", "6"))
DB_TIMEOUT_SECONDS = int(os.getenv("DB_CONNECTION_TIMEOUT_SECONDS", "30"))
DB_BUSY_TIMEOUT_MS = int(os.getenv("DB_BUSY_TIMEOUT_MS", "5000"))


def build_url_issuer() -> UrlIssuer:
    """Build the URL issuer from the configured secret and public base URL.

    Raises:
        ConfigurationError: If no signing secret is configured.
    """
    if not PUBLIC_BASE_URL:
        logger.warning("PUBLIC_BASE_URL is not set; issued links will be relative")
    key = SigningKey.from_secrets(TG_PROXY_SECRET, TELEGRAM_TOKEN)
    return UrlIssuer(key, ProxySettings(base_url=PUBLIC_BASE_URL))


def initialize_bot_utilities() -> UrlIssuer:
    """Initialize all bot utilities. Should be called once at startup."""
    database.initialize_database(DB_POOL_SIZE, DB_TIMEOUT_SECONDS, DB_BUSY_TIMEOUT_MS, DATABASE_URL)
    database.run_migrations()

    issuer = build_url_issuer()
    logger.info("Bot utilities initialized")
    return issuer
