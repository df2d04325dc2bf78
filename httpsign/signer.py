"""
Request signer.

Adds the nonce and Digest headers to an outgoing request, then signs
``(request-target) nonce digest`` (plus Content-Type when present) with
HMAC-SHA512 and attaches the result in the Authorization header.
"""

from typing import Callable, Optional, Sequence

import structlog
from requests.auth import AuthBase

from .constants import (
    DEFAULT_SIGNED_HEADERS,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HEADER_DIGEST,
    HEADER_NONCE,
)
from .digest import compute_digest
from .exceptions import ConfigurationError, TransportError
from .headers import format_signature_header
from .models import Algorithm, SignatureParams
from .nonce import generate_nonce
from .signing_string import build_signing_string

logger = structlog.get_logger(__name__)


def _body_bytes(body) -> bytes:
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode('utf-8')
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    raise TransportError(f"cannot sign a streamed body of type {type(body).__name__}")


class Signer(AuthBase):
    """
    Signs outgoing requests with one key.

    Works on ``requests.PreparedRequest`` objects, or anything exposing
    ``method``, ``path_url``, a mutable ``headers`` mapping and ``body``.
    Can be passed as ``auth=`` to any requests call.
    """

    def __init__(
        self,
        key_id: str,
        secret: str,
        headers: Sequence[str] = DEFAULT_SIGNED_HEADERS,
        nonce_factory: Callable[[], str] = generate_nonce,
        algorithm: Algorithm = Algorithm.HMAC_SHA512,
    ):
        if not key_id:
            raise ConfigurationError("key_id cannot be empty")
        if not secret:
            raise ConfigurationError("secret cannot be empty")
        self.key_id = key_id
        self.secret = secret
        self.headers = [name.lower() for name in headers]
        self.nonce_factory = nonce_factory
        self.algorithm = algorithm

    def signed_headers_for(self, request) -> list:
        """Headers to cover for this request: the configured list plus Content-Type."""
        names = list(self.headers)
        content_type = HEADER_CONTENT_TYPE.lower()
        if request.headers.get(HEADER_CONTENT_TYPE) and content_type not in names:
            names.append(content_type)
        return names

    def sign(self, request):
        """
        Sign a request in place.

        Args:
            request: Prepared request to sign

        Returns:
            The same request, with nonce, Digest and Authorization set

        Raises:
            TransportError: If the request headers cannot be modified
        """
        body = _body_bytes(request.body)
        try:
            request.headers[HEADER_DIGEST] = compute_digest(body)
            request.headers[HEADER_NONCE] = self.nonce_factory()
        except (TypeError, AttributeError) as e:
            raise TransportError(f"cannot set signature headers: {e}")

        signed_headers = self.signed_headers_for(request)
        signing_string = build_signing_string(
            request.method,
            request.path_url,
            request.headers,
            signed_headers,
        )
        signature = self.algorithm.sign(
            self.secret.encode('utf-8'),
            signing_string.encode('utf-8'),
        )
        params = SignatureParams(
            key_id=self.key_id,
            algorithm=self.algorithm.value,
            headers=signed_headers,
            signature=signature,
        )
        try:
            request.headers[HEADER_AUTHORIZATION] = format_signature_header(params)
        except (TypeError, AttributeError) as e:
            raise TransportError(f"cannot set signature headers: {e}")

        logger.debug(
            "request_signed",
            key_id=self.key_id,
            method=request.method,
            path=request.path_url,
            headers=signed_headers,
        )
        return request

    def __call__(self, request):
        return self.sign(request)


def sign(request, key_id: str, secret: str, headers: Optional[Sequence[str]] = None):
    """Sign ``request`` with a one-off Signer."""
    signer = Signer(key_id, secret, headers=headers or DEFAULT_SIGNED_HEADERS)
    return signer.sign(request)
