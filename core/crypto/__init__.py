"""
Core cryptographic utilities.
"""
from .hashing import (
    LOCAL_CID_PREFIX,
    cid_to_digest,
    local_cid,
    sha256,
)

__all__ = [
    "LOCAL_CID_PREFIX",
    "cid_to_digest",
    "local_cid",
    "sha256",
]
