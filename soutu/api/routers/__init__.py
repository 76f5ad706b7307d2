"""
API routers for the soutu API server.
"""

from soutu.api.routers.media import router as media_router

__all__ = [
    "media_router",
]
