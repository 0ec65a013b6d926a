"""Digest and MAC helpers."""

from __future__ import annotations

import hashlib
import hmac


def sha1_digest(data: bytes) -> bytes:
    """Return the SHA-1 digest of ``data``."""
    return hashlib.sha1(data).digest()


def sha256_digest(data: bytes) -> bytes:
    """Return the SHA-256 digest of ``data``."""
    return hashlib.sha256(data).digest()


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    """Return the HMAC-SHA256 tag of ``data`` under ``key``."""
    return hmac.new(key, data, hashlib.sha256).digest()