"""
Bot handlers package.

This module exports all command and message handlers for use in the main bot application.
Handlers are organized by domain:
- user: /start greeting
- search: Reverse image search replies
"""

from soutu.handlers.search import URL_ISSUER_KEY, search
from soutu.handlers.user import start

__all__ = [
    "URL_ISSUER_KEY",
    "search",
    "start",
]
