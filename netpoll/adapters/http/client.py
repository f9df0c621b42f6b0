"""JSON-over-HTTP client for the roster API and the collector."""

from typing import Any

import httpx
import structlog

from netpoll.core.config import settings
from netpoll.core.errors import FetchError, ReportError

logger = structlog.get_logger()


class JSONClient:
    """Thin async wrapper around httpx for JSON GET and POST."""

    def __init__(
        self,
        timeout: float = settings.http_timeout_s,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get_json(self, url: str) -> Any:
        """GET a URL and decode its JSON body.

        Raises:
            FetchError: on network errors, non-2xx status or invalid JSON.
        """
        client = await self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"GET {url} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"GET {url} returned invalid JSON: {e}") from e

    async def post_json(self, url: str, payload: Any) -> None:
        """POST a JSON body. The response body is ignored.

        Raises:
            ReportError: on network errors or non-2xx status.
        """
        client = await self._get_client()
        try:
            response = await client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ReportError(f"POST {url} returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ReportError(f"POST {url} failed: {e}") from e

    async def __aenter__(self) -> "JSONClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
