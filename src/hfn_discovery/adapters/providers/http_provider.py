"""REST search provider for the network's /api/search endpoint."""

from datetime import datetime
from typing import Any, Optional

import httpx
import structlog

from hfn_discovery.core import ItemType, ProviderError, SearchFilters, SearchProvider, SearchResult

logger = structlog.get_logger(__name__)


class HttpSearchProvider(SearchProvider):
    """Query the backend search API over HTTP."""

    name = "REST API"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        page_size: int = 20,
        token: Optional[str] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.token = token

    async def search(self, query: str, filters: SearchFilters) -> list[SearchResult]:
        """Fetch the first page of results for query and filters."""
        params = self._build_params(query, filters)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/api/search",
                    headers=self._get_headers(),
                    params=params,
                )
            except httpx.HTTPError as e:
                raise ProviderError(f"Search request failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(f"Search API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"Search API returned invalid JSON: {e}") from e

        rows = data.get("results") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise ProviderError("Search API response has no 'results' list")

        results: list[SearchResult] = []
        for row in rows:
            result = self._create_result_from_row(row)
            if result:
                results.append(result)

        logger.debug(
            "Search API responded",
            query=query,
            returned=len(rows),
            parsed=len(results),
            total=data.get("total", len(rows)),
        )
        return results

    def _build_params(self, query: str, filters: SearchFilters) -> dict[str, str]:
        """Build query string parameters understood by the search endpoint."""
        params: dict[str, str] = {"page": "1", "limit": str(self.page_size)}

        if query:
            params["q"] = query
        if filters.types:
            params["types"] = ",".join(sorted(t.value for t in filters.types))
        if filters.tags:
            params["tags"] = ",".join(sorted(filters.tags))
        if filters.date is not None:
            if filters.date.start:
                params["dateFrom"] = filters.date.start.isoformat()
            if filters.date.end:
                params["dateTo"] = filters.date.end.isoformat()

        return params

    def _create_result_from_row(self, row: Any) -> Optional[SearchResult]:
        """Create a result from one API row, skipping malformed rows."""
        try:
            date_value = row.get("date")
            return SearchResult(
                id=str(row["id"]),
                type=ItemType.parse(row["type"]),
                title=row["title"],
                url=row.get("url") or "",
                description=row.get("description"),
                image_url=row.get("imageUrl"),
                date=_parse_datetime(date_value) if date_value else None,
                tags=[str(tag) for tag in row.get("tags") or []],
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed search result", error=str(e), row=repr(row)[:200])
            return None

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        headers = {"Accept": "application/json"}

        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        return headers


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
