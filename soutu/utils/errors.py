"""Error taxonomy for the media delivery proxy.

Every request-level error knows the HTTP status and plain-text body it is
served with, so the router only has to translate, never decide.
"""


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class MediaProxyError(Exception):
    """Base class for errors that terminate a single proxy request."""

    status_code = 500
    detail = "Internal Server Error"

    def __init__(self, reason: str = ""):
        super().__init__(reason or self.detail)
        self.reason = reason or self.detail


class InvalidRequest(MediaProxyError):
    """The request is missing the resource identifier."""

    status_code = 404
    detail = "Not Found"


class Forbidden(MediaProxyError):
    """Bad or missing signature, or an unknown/mismatched access token."""

    status_code = 403
    detail = "Forbidden"


class LinkExpired(Forbidden):
    """The signed link is past its expiry and the resource is not cached."""

    detail = "Expired"


class RateLimited(MediaProxyError):
    """The requester identity or client address exhausted its window budget."""

    status_code = 429
    detail = "Too Many Requests"


class UpstreamUnavailable(MediaProxyError):
    """The upstream provider failed to resolve or serve the file."""

    status_code = 502
    detail = "Upstream error"


class NotFound(MediaProxyError):
    """The upstream provider reports no mapping for the resource."""

    status_code = 404
    detail = "Not Found"


FileReferenceNotFound = NotFound
