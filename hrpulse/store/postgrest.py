"""Supabase/PostgREST collection store client.

Translates collection queries into PostgREST HTTP requests:

    GET  {url}/rest/v1/{collection}?select=*&status=in.(sent,read)&order=name.asc
    HEAD {url}/rest/v1/{collection}?select=*   (Prefer: count=exact)

Counts are read from the ``Content-Range`` response header (``0-9/42`` or
``*/42``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from hrpulse.store.base import CountResult, QueryResult, TransportError

if TYPE_CHECKING:
    from hrpulse.store.base import Filter

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_filter_params(filters: tuple[Filter, ...] | list[Filter]) -> list[tuple[str, str]]:
    """Render filters as PostgREST query parameters.

    Args:
        filters: Column predicates

    Returns:
        List of (column, "op.value") pairs, preserving repeated columns
    """
    params: list[tuple[str, str]] = []
    for f in filters:
        if f.op == "in":
            values = ",".join(_format_value(v) for v in f.value)
            params.append((f.column, f"in.({values})"))
        elif f.value is None and f.op in ("eq", "neq"):
            params.append((f.column, "is.null" if f.op == "eq" else "not.is.null"))
        else:
            params.append((f.column, f"{f.op}.{_format_value(f.value)}"))
    return params


def parse_content_range(header: str | None) -> int:
    """Extract the total row count from a Content-Range header.

    Args:
        header: Header value such as ``0-24/3573`` or ``*/0``

    Returns:
        Total count

    Raises:
        TransportError: If the header is missing or carries no exact total
    """
    if not header or "/" not in header:
        raise TransportError(f"Missing Content-Range in count response: {header!r}")

    total = header.rsplit("/", 1)[1]
    if not total.isdigit():
        raise TransportError(f"Count not available in Content-Range: {header!r}")
    return int(total)


class PostgrestStore:
    """Collection store backed by a Supabase/PostgREST HTTP API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize PostgREST store.

        Args:
            url: Project base URL (without ``/rest/v1``)
            api_key: Key sent as ``apikey`` header and bearer token
            timeout: Transport-level request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Open the underlying HTTP client."""
        if self._http_client is not None:
            return

        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"

        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.info(f"PostgREST store connected to {self.base_url}")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.info("PostgREST store closed")

    async def __aenter__(self) -> PostgrestStore:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        collection: str,
        params: list[tuple[str, str]],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        if self._http_client is None:
            raise RuntimeError("PostgREST store not started")

        try:
            response = await self._http_client.request(
                method,
                f"/{collection}",
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {collection} failed: {type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            detail = response.text[:200] if method != "HEAD" else ""
            raise TransportError(
                f"{method} {collection} returned HTTP {response.status_code} {detail}".rstrip(),
                status_code=response.status_code,
            )
        return response

    async def query(
        self,
        collection: str,
        filters: tuple[Filter, ...] | list[Filter] = (),
        *,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> QueryResult:
        """Read rows from a collection.

        Raises:
            TransportError: On network failure, HTTP error or malformed body
        """
        params = [("select", columns), *build_filter_params(filters)]
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))

        response = await self._request("GET", collection, params)

        try:
            rows = response.json()
        except ValueError as e:
            raise TransportError(f"GET {collection} returned invalid JSON: {e}") from e

        if not isinstance(rows, list):
            raise TransportError(f"GET {collection} returned {type(rows).__name__}, expected list")

        logger.debug(f"Query {collection} returned {len(rows)} rows")
        return QueryResult(rows=rows)

    async def count(
        self,
        collection: str,
        filters: tuple[Filter, ...] | list[Filter] = (),
    ) -> CountResult:
        """Count rows in a collection.

        Raises:
            TransportError: On network failure, HTTP error or missing count
        """
        params = [("select", "*"), *build_filter_params(filters)]
        response = await self._request(
            "HEAD",
            collection,
            params,
            headers={"Prefer": "count=exact"},
        )
        return CountResult(count=parse_content_range(response.headers.get("content-range")))
