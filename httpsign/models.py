"""
Data models shared by the signer, the validators and the authenticator.
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .signing_string import normalize_headers


class Algorithm(str, Enum):
    """Keyed hash algorithms, valued by their wire token."""
    HMAC_SHA512 = "hmac-sha512"

    def sign(self, key: bytes, message: bytes) -> bytes:
        """Compute the raw keyed hash of ``message``."""
        return hmac.new(key, message, hashlib.sha512).digest()


@dataclass(frozen=True)
class Secret:
    """A registered signing key."""
    key_id: str
    key: bytes = field(repr=False)
    algorithm: Algorithm = Algorithm.HMAC_SHA512


@dataclass(frozen=True)
class SignatureParams:
    """Parsed fields of a signature header."""
    key_id: str
    algorithm: str
    headers: List[str]
    signature: bytes = field(repr=False)


@dataclass
class SignedMessage:
    """
    The parts of an incoming request that verification looks at.

    Header names are lowercased and repeated values comma-joined on
    construction.
    """
    method: str
    path: str
    headers: Dict[str, str]
    body: bytes = b""

    def __post_init__(self):
        self.headers = normalize_headers(self.headers)
        if self.body is None:
            self.body = b""
        elif isinstance(self.body, str):
            self.body = self.body.encode('utf-8')

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())
