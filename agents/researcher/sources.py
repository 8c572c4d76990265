"""
Source content fetching for the Evidence Analyzer.

Fetches a market's source URL and reduces it to plain text. Failures are
not errors: research proceeds without source content.
"""

from __future__ import annotations

import re
from typing import Optional, TYPE_CHECKING

from core.http import HttpError

if TYPE_CHECKING:
    from agents.context import AgentContext

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.DOTALL | re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.DOTALL | re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def html_to_text(html: str) -> str:
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def fetch_source_content(
    ctx: "AgentContext",
    url: Optional[str],
    max_chars: int = 4000,
) -> Optional[str]:
    """Plain text of ``url`` truncated to ``max_chars``, or None."""
    if not url or ctx.http is None:
        return None
    try:
        response = ctx.http.get(url)
    except HttpError as e:
        ctx.warning(f"Source fetch failed for {url}: {e}")
        return None
    if not response.ok:
        ctx.warning(f"Source fetch for {url} returned HTTP {response.status_code}")
        return None

    headers = {k.lower(): v for k, v in response.headers.items()}
    body = response.text
    if "html" in headers.get("content-type", "") or "<html" in body[:500].lower():
        body = html_to_text(body)
    text = body.strip()
    return text[:max_chars] or None
