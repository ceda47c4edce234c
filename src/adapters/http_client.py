"""httpx wrapper.

Why a wrapper:
- The tree never speaks HTTP (everything goes through cdsctl); only `doctor`
  checks that each context API answers.
- Timeouts and headers live in one place; tests plug in `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

USER_AGENT = "cds-explorer/0.1"


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Build an `httpx.AsyncClient` with safe defaults."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


async def ping_api(api_url: str, client: httpx.AsyncClient) -> tuple[bool, str]:
    """Hit the unauthenticated `/mon/version` endpoint of a CDS API."""

    try:
        response = await client.get(api_url.rstrip("/") + "/mon/version")
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__
    if response.is_success:
        return True, f"HTTP {response.status_code}"
    return False, f"HTTP {response.status_code}"
