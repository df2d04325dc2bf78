"""
Nonce generation and replay protection.

Nonces produced by the signer are the signing time in nanoseconds since
the epoch. The validator rejects nonces outside its time window and
delegates the "seen before?" question to an injectable store.
"""

import threading
import time
from typing import Dict, Optional, Protocol

import structlog

from .constants import DEFAULT_NONCE_WINDOW, HEADER_NONCE
from .exceptions import ConfigurationError, ExpiredNonce, MalformedNonce, ReusedNonce
from .models import SignedMessage

logger = structlog.get_logger(__name__)

NANOSECONDS = 1_000_000_000

# time.time_ns() stays within 19 digits until the year 2286
MAX_NONCE_DIGITS = 19


def generate_nonce() -> str:
    """Generate a nonce for request signing."""
    return str(time.time_ns())


class NonceStore(Protocol):
    """Storage for accepted nonces.

    Implementations must make ``check_and_store`` atomic, so that two
    concurrent requests presenting the same nonce cannot both succeed.
    """

    def check_and_store(self, nonce: str, ttl_seconds: float) -> bool:
        """Record the nonce and return True if it had not been seen."""
        ...


class InMemoryNonceStore:
    """
    In-process nonce store.

    Only suitable for a single server process; use a shared cache when
    several processes verify requests.
    """

    def __init__(self):
        self._cache: Dict[str, float] = {}
        self._lock = threading.Lock()

    def check_and_store(self, nonce: str, ttl_seconds: float) -> bool:
        now = time.monotonic()
        with self._lock:
            self._cleanup(now)
            if nonce in self._cache:
                return False
            self._cache[nonce] = now + ttl_seconds
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _cleanup(self, now: float) -> None:
        """Remove expired nonces."""
        expired = [nonce for nonce, expires in self._cache.items() if expires <= now]
        for nonce in expired:
            del self._cache[nonce]


class NonceValidator:
    """
    Enforces single use of each nonce within a time window.

    Args:
        store: Nonce store; defaults to an InMemoryNonceStore
        window_seconds: Maximum distance between the nonce's time and now
        timestamped: Whether nonces carry their creation time. When False
            any non-empty string is accepted once, with no window check.
    """

    def __init__(
        self,
        store: Optional[NonceStore] = None,
        window_seconds: float = DEFAULT_NONCE_WINDOW,
        timestamped: bool = True,
    ):
        if window_seconds <= 0:
            raise ConfigurationError("nonce window must be positive")
        self.store = store if store is not None else InMemoryNonceStore()
        self.window_seconds = window_seconds
        self.timestamped = timestamped

    def validate(self, message: SignedMessage) -> None:
        self.validate_nonce(message.header(HEADER_NONCE) or "")

    def validate_nonce(self, nonce: str, now: Optional[float] = None) -> None:
        """
        Accept and record a nonce, or reject it.

        Args:
            nonce: Nonce value from the request
            now: Current time in seconds (defaults to time.time())

        Raises:
            MalformedNonce: If the nonce is empty or not a timestamp
            ExpiredNonce: If the nonce is outside the window
            ReusedNonce: If the nonce has already been accepted
        """
        if not nonce:
            raise MalformedNonce("empty nonce")

        if self.timestamped:
            self._check_window(nonce, time.time() if now is None else now)

        # Entries must outlive the window on both sides of "now"
        if not self.store.check_and_store(nonce, 2 * self.window_seconds):
            logger.warning("replay_detected", nonce=nonce[-8:])
            raise ReusedNonce("nonce already used")

    def _check_window(self, nonce: str, now: float) -> None:
        if not (nonce.isascii() and nonce.isdigit()) or len(nonce) > MAX_NONCE_DIGITS:
            raise MalformedNonce("nonce is not a timestamp")
        skew = int(now * NANOSECONDS) - int(nonce)
        if abs(skew) > self.window_seconds * NANOSECONDS:
            logger.info("nonce_expired", nonce=nonce[-8:], skew=round(skew / NANOSECONDS, 3))
            raise ExpiredNonce("nonce outside validity window")
