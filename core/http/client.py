"""
HTTP Client

One pooled requests Session shared by the ledger gateway, the IPFS
pinning store and the researcher's source fetcher. Transport failures
become HttpError; status codes are left for the caller to interpret.
"""

from __future__ import annotations

import json as jsonlib
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


class HttpError(Exception):
    """Transport failure, or a non-2xx status passed through ``raise_for_status``."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional["HttpResponse"] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


@dataclass
class HttpResponse:
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return jsonlib.loads(self.content)

    def raise_for_status(self) -> None:
        if not self.ok:
            raise HttpError(
                f"HTTP {self.status_code} from {self.url or 'server'}: {self.text[:200]}",
                status_code=self.status_code,
                response=self,
            )

    @classmethod
    def from_requests(cls, response: requests.Response) -> "HttpResponse":
        return cls(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            url=str(response.url),
        )


class HttpClient:
    """
    Usage:
        with HttpClient(timeout=10) as http:
            page = http.get("https://example.com/article")
            if page.ok:
                print(page.text)
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        default_headers: Optional[dict[str, str]] = None,
        proxy: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.default_headers = dict(default_headers or {})
        self.proxy = proxy
        self._session = session

    @classmethod
    def from_config(cls, http_config: Any, proxy: Optional[str] = None) -> "HttpClient":
        """Build from the ``http`` section of RuntimeConfig."""
        return cls(
            timeout=http_config.timeout,
            default_headers={"User-Agent": http_config.user_agent},
            proxy=proxy,
        )

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            session = requests.Session()
            if self.proxy:
                session.proxies.update({"http": self.proxy, "https": self.proxy})
            self._session = session
        return self._session

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> HttpResponse:
        """
        Send a request. ``kwargs`` (params, data, json, files) go straight
        to ``requests``.

        Raises:
            HttpError: the request never got a response
        """
        merged = {**self.default_headers, **(headers or {})}
        try:
            response = self.session.request(
                method, url, headers=merged, timeout=timeout or self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise HttpError(f"{method} {url} failed: {e}") from e
        return HttpResponse.from_requests(response)

    def get(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
