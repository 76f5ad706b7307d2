"""
Media proxy endpoint.

Serves signed ``/tgimg`` URLs minted by the bot. All verification, caching and
rate limiting happens in ``MediaDeliveryHandler``; this router only translates
its outcome into an HTTP response.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from soutu.api.dependencies import get_client_ip, get_delivery_handler
from soutu.settings.constants import IMAGE_PROXY_PREFIX
from soutu.utils.errors import MediaProxyError, UpstreamUnavailable
from soutu.utils.media_proxy import MediaDeliveryHandler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])


@router.get(IMAGE_PROXY_PREFIX)
async def proxy_media(
    file_id: Optional[str] = None,
    exp: Optional[str] = None,
    token: Optional[str] = None,
    sig: Optional[str] = None,
    client_ip: str = Depends(get_client_ip),
    handler: MediaDeliveryHandler = Depends(get_delivery_handler),
):
    """Serve the media behind a signed proxy URL."""
    try:
        media = await handler.deliver(file_id, exp, token, sig, client_ip)
    except UpstreamUnavailable as exc:
        logger.warning("Upstream failure for %s: %s", file_id, exc.reason)
        return PlainTextResponse(exc.detail, status_code=exc.status_code)
    except MediaProxyError as exc:
        logger.info(
            "Rejected media request for %s from %s: %s (%d)",
            file_id,
            client_ip,
            exc.reason,
            exc.status_code,
        )
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    return Response(content=media.body, status_code=200, headers=media.headers)
