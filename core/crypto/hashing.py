"""
Hashing Utilities

SHA-256 helpers shared by the transcript anchorer, the content stores and
the ledger adapters.

- ``cid_to_digest`` derives the 32-byte ledger field from a CID string
- ``local_cid`` derives the placeholder CID used when pinning is unavailable

All functions are pure and deterministic.
"""
from __future__ import annotations

import hashlib

# Prefix of CIDv1 raw-leaf base32 identifiers; reused for local placeholders.
LOCAL_CID_PREFIX = "bafkreig"
LOCAL_CID_HASH_CHARS = 50


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def cid_to_digest(cid: str) -> bytes:
    """
    Fixed-length (32 byte) digest of a CID, stored in the ledger's
    transcript field.
    """
    return sha256(cid.encode("utf-8"))


def local_cid(content: bytes, prefix: str = LOCAL_CID_PREFIX) -> str:
    """
    Deterministic placeholder CID for content that could not be pinned.

    Same bytes always produce the same identifier, so a degraded transcript
    can later be re-pinned and checked against what the ledger recorded.
    """
    return prefix + hashlib.sha256(content).hexdigest()[:LOCAL_CID_HASH_CHARS]
