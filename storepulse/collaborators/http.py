"""HTTP client factory for the storefront probes."""

import httpx


def build_http_client(
    user_agent: str,
    connect_timeout: float = 10.0,
    timeout: float = 30.0,
    verify_tls: bool = False,
) -> httpx.AsyncClient:
    """AsyncClient that follows redirects with bounded connect/overall timeouts."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=connect_timeout),
        verify=verify_tls,
        follow_redirects=True,
        headers={"User-Agent": user_agent},
    )
