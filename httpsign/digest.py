"""
Body digest computation and validation.

The Digest header binds the signature to the exact body bytes:
``Digest: SHA-256=<base64 of the SHA-256 hash>``.
"""

import base64
import hashlib
import hmac

import structlog

from .constants import DIGEST_ALGORITHM, HEADER_DIGEST
from .exceptions import DigestMismatch, MissingDigest
from .models import SignedMessage

logger = structlog.get_logger(__name__)


def compute_digest(body: bytes) -> str:
    """
    Compute the Digest header value for a body.

    Args:
        body: Raw request body bytes

    Returns:
        ``SHA-256=<base64>``
    """
    hashed = hashlib.sha256(body or b"").digest()
    return f"{DIGEST_ALGORITHM}={base64.b64encode(hashed).decode('ascii')}"


def verify_digest(claimed: str, body: bytes) -> bool:
    """
    Check a claimed Digest header value against the received body.

    Args:
        claimed: Digest header value
        body: Raw body bytes as received

    Returns:
        True if the claimed digest matches
    """
    algorithm, sep, _ = claimed.partition("=")
    if not sep or algorithm.strip().upper() != DIGEST_ALGORITHM:
        return False
    expected = compute_digest(body)
    # Normalize only the algorithm token; the value is compared verbatim
    normalized = f"{DIGEST_ALGORITHM}={claimed[len(algorithm) + 1:]}"
    return hmac.compare_digest(expected.encode('ascii'), normalized.encode('utf-8'))


class DigestValidator:
    """Rejects requests whose body does not match their Digest header."""

    def validate(self, message: SignedMessage) -> None:
        """
        Raises:
            MissingDigest: If the body is non-empty and no digest was sent
            DigestMismatch: If the digest does not match the body
        """
        claimed = message.header(HEADER_DIGEST)
        if claimed is None:
            if message.body:
                raise MissingDigest("request body without digest")
            return

        if not verify_digest(claimed, message.body):
            logger.info("digest_mismatch", body_size=len(message.body))
            raise DigestMismatch("digest does not match body")
