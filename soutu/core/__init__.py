"""
Bot wiring: the ``Application`` factory and handler registration.

Settings come from soutu/config.py.
"""

from soutu.core.application import create_application
from soutu.core.handlers import register_handlers

__all__ = ["create_application", "register_handlers"]
