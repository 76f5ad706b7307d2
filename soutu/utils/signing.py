"""
HMAC signing for proxy URLs.

The signing key is built once at process start from the configured secret and
handed to the URL issuer and the delivery handler. Signatures cover the exact
canonical payload string, so any change to a signed field invalidates them.
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlencode

from soutu.settings.constants import PARAM_EXPIRY, PARAM_FILE_ID, PARAM_TOKEN
from soutu.utils.errors import ConfigurationError


def to_base64url(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64."""
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def build_canonical_payload(file_id: str, expires: int, token: str) -> str:
    """Serialize the signed fields in their fixed order.

    Args:
        file_id: The resource identifier.
        expires: Link expiry in Unix seconds.
        token: The opaque access token.

    Returns:
        The form-encoded query string that is signed and later re-verified.
    """
    return urlencode(
        [
            (PARAM_FILE_ID, file_id),
            (PARAM_EXPIRY, str(int(expires))),
            (PARAM_TOKEN, token),
        ]
    )


@dataclass(frozen=True)
class SigningKey:
    """Symmetric HMAC-SHA256 key used for every proxy signature in a process."""

    secret: bytes = field(repr=False)

    def __post_init__(self):
        if not self.secret:
            raise ConfigurationError("Proxy signing secret must not be empty")

    @classmethod
    def from_secrets(cls, primary: Optional[str], fallback: Optional[str] = None) -> "SigningKey":
        """Build the key from the primary secret, or the fallback when the primary is unset.

        Raises:
            ConfigurationError: If neither secret is configured.
        """
        secret = (primary or "").strip() or (fallback or "").strip()
        if not secret:
            raise ConfigurationError(
                "No proxy signing secret configured (set TG_PROXY_SECRET or the bot token)"
            )
        return cls(secret.encode())

    def sign(self, payload: str) -> str:
        digest = hmac.new(self.secret, payload.encode(), hashlib.sha256).digest()
        return to_base64url(digest)

    def verify(self, payload: str, signature: str) -> bool:
        expected = self.sign(payload)
        return hmac.compare_digest(expected.encode(), (signature or "").encode())
