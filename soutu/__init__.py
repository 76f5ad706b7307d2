"""Reverse image search Telegram bot with a signed media proxy."""
