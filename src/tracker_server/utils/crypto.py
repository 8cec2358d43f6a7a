"""Cryptographic helpers for login state tokens and signing keys."""

from __future__ import annotations

import secrets

# 32 bytes = 256 bits of entropy, base64url-encoded to 43 characters.
_STATE_BYTES = 32


class Crypto:
    """Static helpers for token generation and comparison.

    All randomness comes from the ``secrets`` module. Errors from the OS
    randomness source are not caught: a process that cannot draw random
    bytes must not keep issuing tokens.
    """

    @staticmethod
    def generate_state() -> str:
        """Generate a single-use anti-CSRF state token."""
        return secrets.token_urlsafe(_STATE_BYTES)

    @staticmethod
    def generate_signing_key() -> str:
        """Generate a per-process session signing key."""
        return secrets.token_urlsafe(_STATE_BYTES)

    @staticmethod
    def tokens_match(expected: str | None, received: str | None) -> bool:
        """Constant-time equality. A missing value on either side never matches."""
        if not expected or not received:
            return False
        return secrets.compare_digest(expected.encode(), received.encode())
