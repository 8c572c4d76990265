"""
Content-Addressable Storage

ContentStore protocol plus in-memory and IPFS HTTP implementations.
"""

from typing import Optional

from core.http import HttpClient

from .base import ContentStore
from .ipfs import IpfsHttpStore
from .memory import InMemoryContentStore


def create_content_store(config, http: Optional[HttpClient] = None) -> ContentStore:
    """Build the content store named by a StorageConfig."""
    backend = config.backend.lower()
    if backend == "memory":
        return InMemoryContentStore(gateway=config.gateway)
    if backend == "ipfs":
        return IpfsHttpStore(
            config.endpoint,
            gateway=config.gateway,
            api_key=config.api_key,
            http=http,
        )
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    "ContentStore",
    "InMemoryContentStore",
    "IpfsHttpStore",
    "create_content_store",
]
