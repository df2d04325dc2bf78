"""
Environment configuration.

Servers read their key pairs from ``HTTPSIGN_KEY_PAIRS`` as a comma
separated list of ``accessKeyID:secretAccessKey`` entries.
"""

import os
from typing import List, Mapping, Optional

from .authenticator import Authenticator, new_authenticator
from .constants import DEFAULT_NONCE_WINDOW, ENV_KEY_PAIRS
from .exceptions import NoKeyPairs
from .nonce import NonceStore


def load_key_pairs(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Read key pairs from the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        List of key pair strings, blanks removed

    Raises:
        NoKeyPairs: If the variable is unset or empty
    """
    environ = os.environ if environ is None else environ
    raw = environ.get(ENV_KEY_PAIRS, "")
    key_pairs = [entry.strip() for entry in raw.split(",") if entry.strip()]
    if not key_pairs:
        raise NoKeyPairs(f"{ENV_KEY_PAIRS} is not set")
    return key_pairs


def authenticator_from_env(
    environ: Optional[Mapping[str, str]] = None,
    nonce_store: Optional[NonceStore] = None,
) -> Authenticator:
    """Build the default Authenticator from key pairs in the environment."""
    return new_authenticator(
        *load_key_pairs(environ),
        nonce_store=nonce_store,
        nonce_window=DEFAULT_NONCE_WINDOW,
    )
