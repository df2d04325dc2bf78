"""
Unit tests for nonce generation and replay protection.
"""

import threading
import time
from unittest.mock import Mock

import pytest

from httpsign import (
    ConfigurationError,
    ExpiredNonce,
    InMemoryNonceStore,
    MalformedNonce,
    NonceValidator,
    ReplayError,
    ReusedNonce,
    SignedMessage,
    generate_nonce,
)

NS = 1_000_000_000


class TestGenerateNonce:
    """Test generate_nonce."""

    def test_is_current_timestamp(self):
        before = time.time_ns()
        nonce = generate_nonce()
        after = time.time_ns()

        assert nonce.isdigit()
        assert before <= int(nonce) <= after

    def test_unique(self):
        nonces = {generate_nonce() for _ in range(100)}
        assert len(nonces) > 1


class TestInMemoryNonceStore:
    """Test InMemoryNonceStore."""

    def test_first_use(self):
        store = InMemoryNonceStore()
        assert store.check_and_store("n1", 60) is True
        assert len(store) == 1

    def test_second_use(self):
        store = InMemoryNonceStore()
        store.check_and_store("n1", 60)
        assert store.check_and_store("n1", 60) is False

    def test_expired_entries_are_evicted(self):
        store = InMemoryNonceStore()
        store.check_and_store("n1", 0)

        assert store.check_and_store("n2", 60) is True
        assert len(store) == 1
        assert store.check_and_store("n1", 60) is True

    def test_concurrent_same_nonce_accepted_once(self):
        store = InMemoryNonceStore()
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(store.check_and_store("shared", 60))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1


class TestNonceValidator:
    """Test NonceValidator."""

    @pytest.fixture
    def validator(self):
        return NonceValidator(window_seconds=300)

    def test_accepts_fresh_nonce(self, validator):
        validator.validate_nonce(generate_nonce())

    def test_rejects_reuse(self, validator):
        nonce = generate_nonce()
        validator.validate_nonce(nonce)

        with pytest.raises(ReusedNonce):
            validator.validate_nonce(nonce)

    def test_empty_nonce_skips_store(self):
        store = Mock()
        validator = NonceValidator(store=store)

        with pytest.raises(MalformedNonce):
            validator.validate_nonce("")
        store.check_and_store.assert_not_called()

    @pytest.mark.parametrize("nonce", ["abc", "12ab", "-5", "1.5", "²"])
    def test_non_numeric_nonce(self, validator, nonce):
        with pytest.raises(MalformedNonce):
            validator.validate_nonce(nonce)

    @pytest.mark.parametrize("digits", [20, 400, 5000])
    def test_oversized_nonce(self, digits):
        """Numeric nonces longer than a nanosecond timestamp are malformed."""
        store = Mock()
        validator = NonceValidator(store=store)

        with pytest.raises(MalformedNonce):
            validator.validate_nonce("9" * digits)
        store.check_and_store.assert_not_called()

    def test_largest_timestamp_expired(self, validator):
        with pytest.raises(ExpiredNonce):
            validator.validate_nonce("9" * 19, now=time.time())

    def test_old_nonce_expired(self, validator):
        now = time.time()
        nonce = str(int((now - 301) * NS))

        with pytest.raises(ExpiredNonce):
            validator.validate_nonce(nonce, now=now)

    def test_future_nonce_expired(self, validator):
        now = time.time()
        nonce = str(int((now + 301) * NS))

        with pytest.raises(ExpiredNonce):
            validator.validate_nonce(nonce, now=now)

    def test_nonce_within_window(self, validator):
        now = time.time()
        validator.validate_nonce(str(int((now - 200) * NS)), now=now)
        validator.validate_nonce(str(int((now + 200) * NS)), now=now)

    def test_expired_nonce_not_recorded(self):
        store = Mock()
        validator = NonceValidator(store=store, window_seconds=10)

        with pytest.raises(ExpiredNonce):
            validator.validate_nonce("1", now=time.time())
        store.check_and_store.assert_not_called()

    def test_store_ttl_covers_window(self):
        store = Mock()
        store.check_and_store.return_value = True
        validator = NonceValidator(store=store, window_seconds=30)

        validator.validate_nonce(generate_nonce())

        args, _ = store.check_and_store.call_args
        assert args[1] == 60

    def test_opaque_nonces(self):
        validator = NonceValidator(timestamped=False)
        validator.validate_nonce("any-opaque-value")

        with pytest.raises(ReusedNonce):
            validator.validate_nonce("any-opaque-value")

    def test_validate_reads_header(self, validator):
        nonce = generate_nonce()
        message = SignedMessage(method="GET", path="/", headers={"Nonce": nonce})

        validator.validate(message)
        with pytest.raises(ReusedNonce):
            validator.validate(message)

    def test_validate_without_header(self, validator):
        message = SignedMessage(method="GET", path="/", headers={})
        with pytest.raises(MalformedNonce):
            validator.validate(message)

    def test_errors_are_replay_errors(self, validator):
        with pytest.raises(ReplayError):
            validator.validate_nonce("")

    def test_invalid_window(self):
        with pytest.raises(ConfigurationError):
            NonceValidator(window_seconds=0)
