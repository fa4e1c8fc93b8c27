"""Base client for the hosted record store's REST interface."""

import logging
from typing import Any, Dict, Optional

import httpx

from tracker_core_lib.exceptions import RecordStoreError

logger = logging.getLogger(__name__)


class BaseServiceClient:
    """Base class for record store HTTP clients.

    The record store exposes each table at `{base_url}/rest/v1/{table}` with
    PostgREST-style query parameters (`id=eq.5`, `order=created_at.desc`).
    Requests are authenticated with the project's public API key only.

    Usage:
        class TimelineServiceClient(BaseServiceClient):
            async def get_timeline(self, timeline_id: int) -> TimelineRecord:
                rows = await self._request(
                    "GET", "timelines", params={"select": "*", "id": f"eq.{timeline_id}"}
                )
                return TimelineRecord(**rows[0])
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize service client.

        Args:
            base_url: Record store base URL (e.g., https://project.example.co)
            api_key: Public API key sent as `apikey` and bearer token
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

        logger.info(f"Initialized {self.__class__.__name__} with base_url={self.base_url}")

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _headers(
        self,
        prefer: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> dict:
        """Generate request headers.

        Args:
            prefer: Optional PostgREST Prefer header (e.g. "return=representation")
            correlation_id: Optional correlation ID for request tracing
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"

        if prefer:
            headers["Prefer"] = prefer

        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client instance with configured timeout.

        Returns:
            Configured AsyncClient ready for use with async context manager
        """
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None if empty).

        Raises:
            RecordStoreError: On transport failure or non-2xx response
        """
        try:
            async with self._get_client() as client:
                response = await client.request(
                    method,
                    self._table_url(table),
                    params=params,
                    json=json,
                    headers=self._headers(prefer=prefer, correlation_id=correlation_id),
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"{method} {table} failed with status {e.response.status_code}: {e.response.text}"
            )
            raise RecordStoreError(
                f"Record store request failed ({e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {table} failed: {e}")
            raise RecordStoreError(f"Record store unreachable: {e}") from e

        if not response.content:
            return None
        return response.json()

