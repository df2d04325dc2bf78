"""
Key pair codec.

A key pair is a single ``accessKeyID:secretAccessKey`` string, the form in
which credentials arrive from the environment or the command line.
"""

from typing import Tuple

from .exceptions import (
    InvalidKeyPairFormat,
    MissingKeyID,
    MissingKeyPair,
    MissingSecret,
)

SEPARATOR = ":"


def parse_key_pair(key_pair: str) -> Tuple[str, str]:
    """
    Split a key pair into its access key id and secret.

    Args:
        key_pair: String of the form ``accessKeyID:secretAccessKey``

    Returns:
        Tuple of (key_id, secret)

    Raises:
        MissingKeyPair: If the string is empty
        InvalidKeyPairFormat: If there is not exactly one separator
        MissingKeyID: If the key id half is empty
        MissingSecret: If the secret half is empty
    """
    if not key_pair:
        raise MissingKeyPair("missing access key pair")

    parts = key_pair.split(SEPARATOR)
    if len(parts) != 2:
        raise InvalidKeyPairFormat("invalid key pair format")

    key_id, secret = parts
    if not key_id:
        raise MissingKeyID("missing access key id")
    if not secret:
        raise MissingSecret("missing secret access key")
    return key_id, secret


def format_key_pair(key_id: str, secret: str) -> str:
    """Join a key id and secret into key pair form, validating both halves."""
    key_pair = f"{key_id}{SEPARATOR}{secret}"
    parse_key_pair(key_pair)
    return key_pair
