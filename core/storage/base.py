"""
Content-Addressable Store Interface
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentStore(Protocol):
    """Pins byte blobs and returns their content identifier."""

    def pin(self, content: bytes, *, name: str = "blob.json") -> str:
        """
        Raises:
            ContentStoreError: the store is unavailable or rejected the blob
        """
        ...

    def url_for(self, cid: str) -> str:
        """Public gateway URL for ``cid``."""
        ...
