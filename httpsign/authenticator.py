"""
Server-side verification of signed requests.

An Authenticator holds a read-only table of secrets, the list of headers
every signature must cover and an ordered list of validators. Verification
of one request stops at the first failing check.
"""

import hmac
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence, Union

import structlog

from .constants import DEFAULT_NONCE_WINDOW, REQUIRED_HEADERS
from .digest import DigestValidator
from .exceptions import (
    AuthenticationError,
    DuplicateKeyID,
    IncorrectAlgorithm,
    MissingHeader,
    NoKeyPairs,
    SignatureMismatch,
    UnknownKey,
)
from .headers import extract_signature_params
from .keypair import parse_key_pair
from .models import Algorithm, Secret, SignedMessage
from .nonce import NonceStore, NonceValidator
from .signing_string import build_signing_string

logger = structlog.get_logger(__name__)


class Authenticator:
    """
    Verifies signed requests against a table of shared secrets.

    Attributes:
        secrets: Read-only mapping of key id to Secret
        validators: Validators run in order after the signature check
        required_headers: Headers every signature must cover
    """

    def __init__(
        self,
        secrets: Union[Mapping[str, Secret], Iterable[Secret]],
        validators: Sequence = (),
        required_headers: Sequence[str] = REQUIRED_HEADERS,
    ):
        if isinstance(secrets, Mapping):
            table = dict(secrets)
        else:
            table = {}
            for secret in secrets:
                if secret.key_id in table:
                    raise DuplicateKeyID(f"duplicate access key id: {secret.key_id}")
                table[secret.key_id] = secret
        if not table:
            raise NoKeyPairs("keyPairs are required")

        self.secrets = MappingProxyType(table)
        self.validators = tuple(validators)
        self.required_headers = tuple(name.lower() for name in required_headers)

    def verify(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = b"",
    ) -> str:
        """
        Verify one request.

        Args:
            method: HTTP method
            path: Request path including the query string
            headers: Request headers; repeated headers comma-joined
            body: Raw body bytes exactly as received

        Returns:
            The key id the request was signed with

        Raises:
            AuthenticationError: A subclass naming the failed check
        """
        message = SignedMessage(method=method, path=path, headers=dict(headers), body=body)
        try:
            return self._verify(message)
        except AuthenticationError as e:
            logger.warning(
                "request_rejected",
                reason=e.reason,
                detail=str(e),
                method=method,
                path=path,
            )
            raise

    def verify_request(self, request) -> str:
        """Verify a request object exposing method, path_url, headers and body."""
        return self.verify(request.method, request.path_url, request.headers, request.body)

    def _verify(self, message: SignedMessage) -> str:
        params = extract_signature_params(message.headers)

        secret = self.secrets.get(params.key_id)
        if secret is None:
            raise UnknownKey(f"unknown access key id: {params.key_id}")

        claimed = [name.lower() for name in params.headers]
        for name in self.required_headers:
            if name not in claimed:
                raise MissingHeader(f"required header not signed: {name}")

        signing_string = build_signing_string(
            message.method, message.path, message.headers, claimed
        )

        if params.algorithm.lower() != secret.algorithm.value:
            raise IncorrectAlgorithm(f"unexpected algorithm: {params.algorithm}")

        expected = secret.algorithm.sign(secret.key, signing_string.encode('utf-8'))
        if not hmac.compare_digest(expected, params.signature):
            raise SignatureMismatch("signature does not match")

        for validator in self.validators:
            validator.validate(message)

        logger.debug("request_authenticated", key_id=params.key_id, path=message.path)
        return params.key_id


def new_authenticator(
    *key_pairs: str,
    nonce_store: Optional[NonceStore] = None,
    nonce_window: float = DEFAULT_NONCE_WINDOW,
) -> Authenticator:
    """
    Build an Authenticator from ``accessKeyID:secretAccessKey`` strings.

    Requests must sign ``(request-target)``, ``nonce`` and ``digest``; the
    nonce is checked before the digest.

    Args:
        *key_pairs: One or more key pairs
        nonce_store: Store for accepted nonces (in-memory by default)
        nonce_window: Validity window of a nonce, in seconds

    Raises:
        NoKeyPairs: If no key pair is given
        ConfigurationError: If a key pair is malformed or a key id repeats
    """
    if not key_pairs:
        raise NoKeyPairs("keyPairs are required")

    secrets = []
    for key_pair in key_pairs:
        key_id, secret = parse_key_pair(key_pair)
        secrets.append(Secret(key_id=key_id, key=secret.encode('utf-8'),
                              algorithm=Algorithm.HMAC_SHA512))

    validators = [
        NonceValidator(store=nonce_store, window_seconds=nonce_window),
        DigestValidator(),
    ]
    authenticator = Authenticator(secrets, validators=validators,
                                  required_headers=REQUIRED_HEADERS)
    logger.info("authenticator_ready", keys=len(authenticator.secrets))
    return authenticator
