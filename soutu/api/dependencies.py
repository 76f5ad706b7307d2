"""
FastAPI dependencies for the media proxy endpoints.

The delivery handler is built once at startup and stored on ``app.state``;
routes receive it through ``get_delivery_handler``.
"""

import logging

from fastapi import HTTPException, Request
from slowapi.util import get_remote_address

from soutu.utils.media_proxy import MediaDeliveryHandler

logger = logging.getLogger(__name__)


def get_delivery_handler(request: Request) -> MediaDeliveryHandler:
    """Return the delivery handler attached to the running application."""
    handler = getattr(request.app.state, "delivery_handler", None)
    if handler is None:
        logger.error("Media delivery handler requested before startup completed")
        raise HTTPException(status_code=503, detail="Media proxy unavailable")
    return handler


def get_client_ip(request: Request) -> str:
    """
    Resolve the client network address used for rate limiting.

    Prefers the address reported by the edge (CF-Connecting-IP), then the first
    X-Forwarded-For hop, then the socket peer.
    """
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return get_remote_address(request)
