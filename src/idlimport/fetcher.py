"""HTTP transport for document retrieval.

All network I/O for an import run goes through a single Fetcher instance
shared across the per-URL pipelines. The Fetcher receives an
httpx.AsyncClient via constructor injection — ``pipeline.open_state`` owns
the client lifecycle. One attempt per URL; retries are the caller's concern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urljoin

import httpx
import structlog

from idlimport.errors import FetchError

if TYPE_CHECKING:
    from idlimport.config import FetcherSettings

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once per run."""
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=max(1, settings.max_connections // 2),
        ),
    )


class Fetcher:
    """Single-attempt HTTP transport implementing TransportProtocol."""

    def __init__(self, client: httpx.AsyncClient, max_redirects: int = 5) -> None:
        self._client = client
        self._max_redirects = max_redirects

    async def get(self, url: str) -> bytes:
        """Fetch a URL, following redirects hop by hop.

        Returns the raw response body on success. Raises FetchError on
        network errors, non-2xx responses and overlong redirect chains.
        """
        current_url = url

        try:
            for hop in range(self._max_redirects + 1):
                response = await self._client.get(current_url)

                if response.is_redirect and "location" in response.headers:
                    if hop == self._max_redirects:
                        raise FetchError(url, f"Too many redirects fetching {url}")
                    current_url = urljoin(current_url, response.headers["location"])
                    continue

                if not response.is_success:
                    raise FetchError(url, f"HTTP {response.status_code} fetching {url}")

                log.info(
                    "fetch_complete",
                    url=url,
                    status_code=response.status_code,
                    content_length=len(response.content),
                )
                return response.content

        except FetchError:
            raise
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, f"Network error fetching {url}: {exc}") from exc

        raise FetchError(url, f"Redirect loop fetching {url}")
