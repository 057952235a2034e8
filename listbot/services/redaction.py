from __future__ import annotations
from typing import Any

DEFAULT_SENSITIVE_KEYS = {
    "phone_number", "phone",
    "token", "bot_token", "secret_token",
    "authorization",
}

REDACTED = "**********"

def redact_payload(value: Any, *, extra_keys: set[str] | None = None) -> Any:
    sensitive = set(DEFAULT_SENSITIVE_KEYS)
    if extra_keys:
        sensitive |= {k.lower() for k in extra_keys}

    def _walk(v: Any) -> Any:
        if isinstance(v, dict):
            out = {}
            for k, vv in v.items():
                if isinstance(k, str) and k.lower() in sensitive:
                    out[k] = REDACTED
                else:
                    out[k] = _walk(vv)
            return out
        if isinstance(v, list):
            return [_walk(x) for x in v]
        return v

    return _walk(value)


def redact_secret(text: str, secret: str) -> str:
    """Mask every occurrence of `secret` (e.g. a bot token embedded in a URL)."""
    if not secret:
        return text
    return text.replace(secret, REDACTED)


def summarize_photos(photos: list[str], *, max_chars: int = 60) -> list[str]:
    # data URIs can be megabytes long
    out = []
    for p in photos:
        if p.startswith("data:"):
            out.append(f"data:...({len(p)} chars)")
        elif len(p) > max_chars:
            out.append(p[:max_chars] + "...")
        else:
            out.append(p)
    return out
