"""
Custom exceptions for the httpsign library.
"""


class HTTPSignError(Exception):
    """Base exception for httpsign errors."""
    pass


class ConfigurationError(HTTPSignError):
    """Raised when keys or client configuration are invalid."""
    pass


class InvalidKeyPairFormat(ConfigurationError):
    """Raised when a key pair is not of the form accessKeyID:secretAccessKey."""
    pass


class MissingKeyPair(InvalidKeyPairFormat):
    """Raised when the key pair string is empty."""
    pass


class MissingKeyID(ConfigurationError):
    """Raised when the access key id half of a key pair is empty."""
    pass


class MissingSecret(ConfigurationError):
    """Raised when the secret half of a key pair is empty."""
    pass


class MissingCredential(ConfigurationError):
    """Raised when the CLI has no usable key pair."""
    pass


class NoKeyPairs(ConfigurationError):
    """Raised when an authenticator is built without any key pair."""
    pass


class DuplicateKeyID(ConfigurationError):
    """Raised when two key pairs share the same access key id."""
    pass


class AuthenticationError(HTTPSignError):
    """Base exception for every rejected request.

    ``reason`` is a stable code meant for logs; it must not be sent back
    to the client.
    """
    reason = "unauthorized"


class ProtocolError(AuthenticationError):
    """Raised when a request violates the signing protocol."""
    reason = "protocol_error"


class MalformedSignatureHeader(ProtocolError):
    """Raised when the signature header is absent or incomplete."""
    reason = "malformed_signature_header"


class UnknownKey(ProtocolError):
    """Raised when the key id is not registered."""
    reason = "unknown_key"


class MissingHeader(ProtocolError):
    """Raised when a header that must be signed is absent."""
    reason = "missing_header"


class SignatureMismatch(ProtocolError):
    """Raised when the recomputed signature differs from the claimed one."""
    reason = "signature_mismatch"


class IncorrectAlgorithm(SignatureMismatch):
    """Raised when the claimed algorithm differs from the key's algorithm."""
    reason = "incorrect_algorithm"


class MissingDigest(ProtocolError):
    """Raised when a request with a body carries no Digest header."""
    reason = "missing_digest"


class DigestMismatch(ProtocolError):
    """Raised when the body does not hash to the claimed digest."""
    reason = "digest_mismatch"


class ReplayError(AuthenticationError):
    """Raised when the nonce check rejects a request."""
    reason = "replay"


class ReusedNonce(ReplayError):
    """Raised when a nonce has already been accepted."""
    reason = "nonce_reused"


class ExpiredNonce(ReplayError):
    """Raised when a nonce falls outside the validity window."""
    reason = "nonce_expired"


class MalformedNonce(ReplayError):
    """Raised when a nonce is empty or unparsable."""
    reason = "nonce_malformed"


class TransportError(HTTPSignError):
    """Raised when an HTTP request cannot be built or sent."""
    pass


class InputTooLargeError(HTTPSignError):
    """Raised when input data exceeds size limits."""
    pass


class HTTPStatusError(HTTPSignError):
    """Raised when the server answers with an error status."""
    pass
