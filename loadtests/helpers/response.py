"""Response error extraction for load test observability.

Parses Stockroom API error bodies into human-readable messages. Every error
response has the shape {"error": "msg"} or {"error": {"field": ["msg", ...]}}.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except Exception:
        # Not JSON, return raw text truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body, dict) and "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(
                f"{field}: {'; '.join(messages) if isinstance(messages, list) else messages}"
                for field, messages in error.items()
            )
        return str(error)

    # Unknown shape, stringify it
    return str(body)[:300]


def is_stock_shortage(response: Response) -> bool:
    """True when an order was refused because a product ran out of stock."""
    if response.status_code != 400:
        return False
    try:
        error = response.json().get("error")
    except Exception:
        return False
    return isinstance(error, dict) and "quantity" in error
