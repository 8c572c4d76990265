"""
In-Memory Content Store
"""

from __future__ import annotations

import base64
import hashlib
import threading
from typing import Optional

from core.schemas.errors import ContentStoreError


class InMemoryContentStore:
    """
    Content store held in a dict. CIDs are derived from the SHA-256 of the
    content (base32, CIDv1 raw-leaf look-alike), so re-pinning is a no-op.

    ``available=False`` simulates an outage: every pin raises.
    """

    def __init__(self, gateway: str = "https://ipfs.io/ipfs/", available: bool = True) -> None:
        self.gateway = gateway
        self.available = available
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def pin(self, content: bytes, *, name: str = "blob.json") -> str:
        if not self.available:
            raise ContentStoreError("Content store unavailable", details={"name": name})
        digest = base64.b32encode(hashlib.sha256(content).digest()).decode("ascii").lower()
        cid = "bafkrei" + digest.rstrip("=")[:52]
        with self._lock:
            self._blobs[cid] = content
        return cid

    def get(self, cid: str) -> Optional[bytes]:
        with self._lock:
            return self._blobs.get(cid)

    def url_for(self, cid: str) -> str:
        return f"{self.gateway.rstrip('/')}/{cid}"

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
