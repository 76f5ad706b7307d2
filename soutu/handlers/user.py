"""
User-related command handlers.
"""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from soutu.settings.constants import START_TEXT

logger = logging.getLogger(__name__)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Greet the user and explain how to search."""
    message = update.message
    if not message:
        return
    await message.reply_text(START_TEXT)
