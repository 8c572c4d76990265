"""
IPFS HTTP Store

Pins through the IPFS HTTP RPC API (``POST /api/v0/add?pin=true``) of a
local node or a pinning service exposing the same endpoint.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.http import HttpClient, HttpError
from core.schemas.errors import ContentStoreError

logger = logging.getLogger(__name__)


class IpfsHttpStore:
    """ContentStore backed by an IPFS HTTP API endpoint."""

    def __init__(
        self,
        endpoint: str = "http://127.0.0.1:5001",
        *,
        gateway: str = "https://ipfs.io/ipfs/",
        api_key: Optional[str] = None,
        http: Optional[HttpClient] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.gateway = gateway
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.http = http or HttpClient(timeout=60.0)

    def pin(self, content: bytes, *, name: str = "blob.json") -> str:
        url = f"{self.endpoint}/api/v0/add"
        try:
            response = self.http.post(
                url,
                params={"pin": "true", "cid-version": "1"},
                files={"file": (name, content, "application/json")},
                headers=self._headers,
            )
            response.raise_for_status()
            cid = response.json().get("Hash")
        except (HttpError, ValueError, AttributeError) as e:
            raise ContentStoreError(f"IPFS pin failed: {e}", details={"endpoint": self.endpoint}) from e
        if not cid:
            raise ContentStoreError("IPFS response missing Hash", details={"endpoint": self.endpoint})
        logger.info("Pinned %s (%d bytes) as %s", name, len(content), cid)
        return cid

    def url_for(self, cid: str) -> str:
        return f"{self.gateway.rstrip('/')}/{cid}"
