"""Response error extraction for load test observability.

Storefront errors use the envelope ``{"success": false, "message": "...", "errors": [...]}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact, human-readable error message from an API error response."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    message = body.get("message") or "(no message)"
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        return f"{message}: {' | '.join(map(str, errors))}"
    return message
