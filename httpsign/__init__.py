"""
HTTP Signatures for Python

Signs outgoing HTTP requests with a shared HMAC-SHA512 secret and verifies
them on the server, with replay protection through a nonce and body
integrity through a Digest header.

Example usage:
    from httpsign import HTTPSignClient, new_authenticator

    client = HTTPSignClient("http://localhost:8080", "abc", "s3cr3t")
    response = client.get("/resource")

    authenticator = new_authenticator("abc:s3cr3t")
    key_id = authenticator.verify(method, path, headers, body)
"""

__version__ = "0.0.1"

from .authenticator import Authenticator, new_authenticator
from .client import HTTPSignClient
from .digest import DigestValidator, compute_digest, verify_digest
from .exceptions import (
    HTTPSignError,
    ConfigurationError,
    InvalidKeyPairFormat,
    MissingKeyPair,
    MissingKeyID,
    MissingSecret,
    MissingCredential,
    NoKeyPairs,
    DuplicateKeyID,
    AuthenticationError,
    ProtocolError,
    MalformedSignatureHeader,
    UnknownKey,
    MissingHeader,
    SignatureMismatch,
    IncorrectAlgorithm,
    MissingDigest,
    DigestMismatch,
    ReplayError,
    ReusedNonce,
    ExpiredNonce,
    MalformedNonce,
    TransportError,
    InputTooLargeError,
    HTTPStatusError
)
from .keypair import format_key_pair, parse_key_pair
from .models import Algorithm, Secret, SignatureParams, SignedMessage
from .nonce import InMemoryNonceStore, NonceStore, NonceValidator, generate_nonce
from .signer import Signer, sign
from .signing_string import build_signing_string

__all__ = [
    "Authenticator",
    "new_authenticator",
    "HTTPSignClient",
    "Signer",
    "sign",
    "build_signing_string",
    "DigestValidator",
    "compute_digest",
    "verify_digest",
    "NonceValidator",
    "NonceStore",
    "InMemoryNonceStore",
    "generate_nonce",
    "parse_key_pair",
    "format_key_pair",
    "Algorithm",
    "Secret",
    "SignatureParams",
    "SignedMessage",
    "HTTPSignError",
    "ConfigurationError",
    "InvalidKeyPairFormat",
    "MissingKeyPair",
    "MissingKeyID",
    "MissingSecret",
    "MissingCredential",
    "NoKeyPairs",
    "DuplicateKeyID",
    "AuthenticationError",
    "ProtocolError",
    "MalformedSignatureHeader",
    "UnknownKey",
    "MissingHeader",
    "SignatureMismatch",
    "IncorrectAlgorithm",
    "MissingDigest",
    "DigestMismatch",
    "ReplayError",
    "ReusedNonce",
    "ExpiredNonce",
    "MalformedNonce",
    "TransportError",
    "InputTooLargeError",
    "HTTPStatusError",
]
