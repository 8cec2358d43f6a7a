"""Tests for state token generation and comparison."""

from __future__ import annotations

import base64

from tracker_server.utils.crypto import Crypto


def test_generate_state_is_unique() -> None:
    """10,000 consecutive tokens never repeat."""
    tokens = [Crypto.generate_state() for _ in range(10_000)]
    assert len(set(tokens)) == len(tokens)


def test_generate_state_has_256_bits() -> None:
    """Tokens decode to 32 random bytes."""
    token = Crypto.generate_state()
    padded = token + "=" * (-len(token) % 4)
    assert len(base64.urlsafe_b64decode(padded)) == 32


def test_consecutive_states_differ() -> None:
    """Two calls in a row produce different tokens."""
    assert Crypto.generate_state() != Crypto.generate_state()


def test_tokens_match_equal() -> None:
    """Identical tokens match."""
    assert Crypto.tokens_match("abc123", "abc123") is True


def test_tokens_match_different() -> None:
    """Different tokens do not match."""
    assert Crypto.tokens_match("abc123", "wrong") is False


def test_tokens_match_missing_side() -> None:
    """A missing or empty value never matches, even against itself."""
    assert Crypto.tokens_match(None, "abc123") is False
    assert Crypto.tokens_match("abc123", None) is False
    assert Crypto.tokens_match("", "") is False
    assert Crypto.tokens_match(None, None) is False
