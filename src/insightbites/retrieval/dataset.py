"""Delaware restaurant inspection dataset via the Socrata SODA API.

The resource is a read-only JSON endpoint that accepts SoQL query
parameters ($select, $where, $group, $order, $limit). An app token is
optional but raises the rate limit; it travels in the X-App-Token
header, never in the URL, so request logs cannot leak it.
"""

import logging
import time
from datetime import date

import httpx
import mlflow
from mlflow.entities import SpanType

from insightbites.config import Settings, settings
from insightbites.core.types import ViolationRecord

logger = logging.getLogger(__name__)

ORDER_NEWEST_FIRST = "insp_date DESC"
# System row id: a total order, so $offset paging neither skips nor repeats rows
ORDER_ROW_ID = ":id"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class DatasetError(Exception):
    """Any failure fetching from the dataset endpoint."""


class DatasetTransportError(DatasetError):
    """Network-level failure (DNS, connect, timeout)."""


class DatasetStatusError(DatasetError):
    """The endpoint answered with a non-success status."""

    def __init__(self, status_code: int):
        super().__init__(f"Dataset endpoint returned HTTP {status_code}")
        self.status_code = status_code


class DatasetResponseError(DatasetError):
    """The endpoint answered, but not with the expected shape."""


# ---------------------------------------------------------------------------
# Row parsing
# ---------------------------------------------------------------------------

def _parse_date(value) -> date | None:
    """Parse a SODA floating timestamp to a date.

    '2024-03-05T00:00:00.000' → date(2024, 3, 5)
    """
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise DatasetResponseError(f"Unparseable inspection date: {value!r}") from e


def parse_record(row: dict) -> ViolationRecord:
    """Convert one SODA row into a ViolationRecord.

    SODA omits null columns from the JSON object, so every text column
    defaults to an empty string.
    """
    if not isinstance(row, dict):
        raise DatasetResponseError(f"Expected a JSON object per row, got {type(row).__name__}")

    return ViolationRecord(
        restaurant_name=str(row.get("restname") or ""),
        address=str(row.get("restaddress") or ""),
        city=str(row.get("restcity") or ""),
        zip_code=str(row.get("restzip") or ""),
        inspection_date=_parse_date(row.get("insp_date")),
        violation_code=str(row.get("violation") or ""),
        violation_description=str(row.get("vio_desc") or ""),
        inspection_type=row.get("insp_type") or None,
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class SocrataClient:
    """Async client for one SODA resource.

    Args:
        url: Resource URL ending in .json.
        app_token: Socrata app token; empty string sends none.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests inject httpx.MockTransport).
    """

    def __init__(
        self,
        url: str,
        app_token: str = "",
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self._app_token = app_token
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings = settings, **kwargs) -> "SocrataClient":
        return cls(config.dataset_url, app_token=config.app_token, timeout=config.http_timeout, **kwargs)

    async def _get(self, params: dict) -> list:
        """Run one SoQL request and return the decoded JSON array."""
        with mlflow.start_span(name="soda_query", span_type=SpanType.RETRIEVER) as span:
            span.set_inputs({"url": self.url, **params})

            headers = {"Accept": "application/json"}
            if self._app_token:
                headers["X-App-Token"] = self._app_token

            t0 = time.monotonic()
            try:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    resp = await client.get(self.url, params=params, headers=headers)
                    resp.raise_for_status()
                    data = resp.json()
            except httpx.HTTPStatusError as e:
                raise DatasetStatusError(e.response.status_code) from e
            except httpx.HTTPError as e:
                raise DatasetTransportError(f"{type(e).__name__}: {e}") from e
            except ValueError as e:
                raise DatasetResponseError("Dataset endpoint returned invalid JSON") from e

            if not isinstance(data, list):
                raise DatasetResponseError(f"Expected a JSON array, got {type(data).__name__}")

            duration_ms = round((time.monotonic() - t0) * 1000, 1)
            logger.debug(
                "SODA query returned %d rows", len(data),
                extra={"where": params.get("$where", ""), "row_count": len(data), "duration_ms": duration_ms},
            )
            span.set_outputs({"row_count": len(data), "duration_ms": duration_ms})
            return data

    async def count(self, where: str = "") -> int:
        """Total number of rows matching a $where clause."""
        params = {"$select": "count(*)"}
        if where:
            params["$where"] = where
        data = await self._get(params)
        try:
            return int(data[0]["count"])
        except (IndexError, KeyError, TypeError, ValueError) as e:
            raise DatasetResponseError(f"Unexpected count response: {data!r:.200}") from e

    async def rows(
        self,
        where: str = "",
        limit: int = 200,
        order: str = ORDER_NEWEST_FIRST,
        offset: int = 0,
    ) -> list[ViolationRecord]:
        """Matching rows in `order` (newest inspection first by default), at most `limit` from `offset`."""
        params: dict = {"$limit": limit, "$order": order}
        if offset:
            params["$offset"] = offset
        if where:
            params["$where"] = where
        data = await self._get(params)
        return [parse_record(row) for row in data]

    async def distinct_cities(self, limit: int = 1000) -> list[str]:
        """Every distinct restaurant city, alphabetical, blanks dropped."""
        data = await self._get({
            "$select": "restcity",
            "$group": "restcity",
            "$order": "restcity",
            "$limit": limit,
        })
        cities = set()
        for row in data:
            if not isinstance(row, dict):
                raise DatasetResponseError(f"Unexpected city row: {row!r:.100}")
            city = row.get("restcity")
            if city:
                cities.add(str(city))
        return sorted(cities, key=str.casefold)
