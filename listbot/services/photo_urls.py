"""
Photo reference normalization.

Telegram fetches photos by URL from its own servers, so only public absolute
http(s) URLs are worth forwarding. Data URIs, loopback hosts and anything
unparseable are dropped here rather than failing the whole post.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable
from urllib.parse import urlsplit

from listbot.services.redaction import summarize_photos


log = logging.getLogger(__name__)

LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def _is_absolute_http(s: str) -> bool:
    low = s.lower()
    return low.startswith("http://") or low.startswith("https://")


def _public_http_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https") or not host:
        return False
    if host.lower() in LOOPBACK_HOSTS:
        return False
    if any(c.isspace() for c in url):
        return False
    return True


def backend_origin(backend_base_url: str) -> str:
    """`https://api.example.com/api/` -> `https://api.example.com`"""
    base = backend_base_url.strip().rstrip("/")
    if base.lower().endswith("/api"):
        base = base[: -len("/api")]
    return base.rstrip("/")


def normalize_photo_url(raw: object, backend_base_url: str | None) -> str | None:
    """Return a publicly fetchable absolute URL for `raw`, or None to drop it."""
    if not isinstance(raw, str):
        log.warning("photos: dropping non-string photo reference (%s)", type(raw).__name__)
        return None

    ref = raw.strip()

    if ref.lower().startswith("data:"):
        log.info("photos: dropping inline data URI (%d chars), Telegram cannot fetch it", len(ref))
        return None

    if not ref:
        return None

    if _is_absolute_http(ref):
        if not _public_http_url(ref):
            log.info("photos: dropping unreachable url %s", ref)
            return None
        return ref

    if _SCHEME_RE.match(ref) or ref.startswith("//"):
        log.info("photos: dropping unsupported reference %s", summarize_photos([ref])[0])
        return None

    origin = backend_origin(backend_base_url or "")
    if not origin:
        log.info("photos: no backend url configured, dropping relative path %s", ref)
        return None

    resolved = f"{origin}/{ref.lstrip('/')}"
    if not _public_http_url(resolved):
        log.info("photos: resolved url %s is not publicly fetchable, dropping", resolved)
        return None
    return resolved


def normalize_photo_urls(photos: Iterable[object], backend_base_url: str | None) -> list[str]:
    out: list[str] = []
    for raw in photos:
        url = normalize_photo_url(raw, backend_base_url)
        if url is not None:
            out.append(url)
    return out
