"""
Authentication headers for OpenAI requests.
"""

from __future__ import annotations

BETA_HEADER = "OpenAI-Beta"


def bearer_headers(api_key: str, beta: str | None = None) -> dict[str, str]:
    """Build request headers with bearer authentication.

    Args:
        api_key: API key sent as a bearer token
        beta: Optional beta feature flag (e.g. ``assistants=v2``)

    Returns:
        Headers dictionary
    """
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if beta:
        headers[BETA_HEADER] = beta
    return headers
