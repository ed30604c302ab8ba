"""Violation fetching: filtering strategies and the stale-response guard.

Two strategies answer the same ViolationQuery:

  - RemoteFilterStrategy: renders the query as SoQL and lets the dataset
    endpoint filter. Issues a count query and a row query per change.
  - LocalFilterStrategy: downloads the dataset once, then filters, sorts
    and caps in memory on every change.

ViolationFetcher owns the observable lifecycle (loading / fetching /
error) for one viewer session. Each refresh bumps a generation counter;
a superseded in-flight fetch is cancelled and any result that still
arrives for an older generation is dropped, so the visible ResultSet
always belongs to the newest filter selection.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import date
from typing import Protocol

import mlflow
from mlflow.entities import SpanType

from insightbites.config import Settings, settings
from insightbites.core.types import ResultSet, ViewState, ViolationRecord
from insightbites.filters.query import ViolationQuery
from insightbites.retrieval.dataset import ORDER_ROW_ID, DatasetError, SocrataClient

logger = logging.getLogger(__name__)

REMOTE_ROW_LIMIT = 200
LOCAL_ROW_LIMIT = 250
DATASET_PAGE_SIZE = 50000
REMOTE_INSPECTION_TYPES = ("Complaint", "Follow-up")

FETCH_ERROR_MESSAGE = "Failed to fetch restaurant violations"


class FilterStrategy(Protocol):
    name: str
    client: SocrataClient
    row_limit: int
    inspection_types: tuple[str, ...]

    async def fetch(self, query: ViolationQuery) -> ResultSet: ...

    async def cities(self) -> list[str]: ...


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class RemoteFilterStrategy:
    """Server-side filtering: one count query plus one capped row query."""

    name = "remote"

    def __init__(
        self,
        client: SocrataClient,
        row_limit: int = REMOTE_ROW_LIMIT,
        inspection_types: tuple[str, ...] = REMOTE_INSPECTION_TYPES,
        city_list_limit: int = 1000,
    ):
        self.client = client
        self.row_limit = row_limit
        self.inspection_types = tuple(inspection_types)
        self.city_list_limit = city_list_limit

    async def fetch(self, query: ViolationQuery) -> ResultSet:
        where = query.where()
        total = await self.client.count(where)
        rows = await self.client.rows(where, limit=self.row_limit)
        return ResultSet(total_count=total, rows=tuple(rows))

    async def cities(self) -> list[str]:
        return await self.client.distinct_cities(limit=self.city_list_limit)


def _newest_first(records) -> list[ViolationRecord]:
    # Stable sort; undated rows go last
    return sorted(records, key=lambda r: r.inspection_date or date.min, reverse=True)


class LocalFilterStrategy:
    """Client-side filtering over a dataset fetched once per process."""

    name = "local"

    def __init__(
        self,
        client: SocrataClient,
        row_limit: int = LOCAL_ROW_LIMIT,
        inspection_types: tuple[str, ...] = (),
        page_size: int = DATASET_PAGE_SIZE,
    ):
        self.client = client
        self.row_limit = row_limit
        self.inspection_types = tuple(inspection_types)
        self.page_size = page_size
        self._dataset: tuple[ViolationRecord, ...] | None = None
        self._lock: asyncio.Lock | None = None

    def _get_lock(self) -> asyncio.Lock:
        """Lazy-init the lock (must be created inside a running event loop)."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def dataset(self) -> tuple[ViolationRecord, ...]:
        """The full dataset, newest first. Downloaded on first use, then read-only."""
        if self._dataset is not None:
            return self._dataset
        async with self._get_lock():
            if self._dataset is None:
                self._dataset = tuple(_newest_first(await self._download()))
                logger.info(
                    "Cached %d violation records for local filtering", len(self._dataset),
                    extra={"row_count": len(self._dataset)},
                )
        return self._dataset

    async def _download(self) -> list[ViolationRecord]:
        """Page through the whole resource in row-id order until a short page comes back."""
        records: list[ViolationRecord] = []
        while True:
            page = await self.client.rows(limit=self.page_size, order=ORDER_ROW_ID, offset=len(records))
            records.extend(page)
            if len(page) < self.page_size:
                return records
            logger.debug("Fetched dataset page", extra={"row_count": len(records)})

    async def fetch(self, query: ViolationQuery) -> ResultSet:
        data = await self.dataset()
        matched = [record for record in data if query.matches(record)]
        return ResultSet(total_count=len(matched), rows=tuple(matched[: self.row_limit]))

    async def cities(self) -> list[str]:
        data = await self.dataset()
        return sorted({record.city for record in data if record.city}, key=str.casefold)


def build_strategy(
    config: Settings = settings,
    client: SocrataClient | None = None,
) -> RemoteFilterStrategy | LocalFilterStrategy:
    """Create the filtering strategy selected by configuration."""
    client = client or SocrataClient.from_settings(config)

    if config.filter_strategy == "local":
        return LocalFilterStrategy(
            client,
            row_limit=config.row_limit if config.row_limit is not None else LOCAL_ROW_LIMIT,
            inspection_types=tuple(config.inspection_types or ()),
            page_size=config.dataset_page_size,
        )

    return RemoteFilterStrategy(
        client,
        row_limit=config.row_limit if config.row_limit is not None else REMOTE_ROW_LIMIT,
        inspection_types=(
            tuple(config.inspection_types)
            if config.inspection_types is not None
            else REMOTE_INSPECTION_TYPES
        ),
        city_list_limit=config.city_list_limit,
    )


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------

class ViolationFetcher:
    """Runs queries through a strategy and publishes the latest ViewState.

    Args:
        strategy: Remote or local filtering strategy.
        on_change: Optional callback invoked with the ViewState after every
            state transition.
    """

    def __init__(
        self,
        strategy: FilterStrategy,
        on_change: Callable[[ViewState], None] | None = None,
    ):
        self.strategy = strategy
        self.state = ViewState()
        self._on_change = on_change
        self._generation = 0
        self._inflight: asyncio.Task | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)

    async def load_cities(self) -> tuple[str, ...]:
        """Populate the city list. Failure is logged and leaves the list empty."""
        try:
            cities = await self.strategy.cities()
        except DatasetError as e:
            logger.error("Failed to fetch cities list: %s", e)
            return self.state.cities

        self.state.cities = tuple(cities)
        self.state.result = ResultSet(
            total_count=self.state.result.total_count,
            rows=self.state.result.rows,
            cities=self.state.cities,
        )
        self._notify()
        return self.state.cities

    async def refresh(self, query: ViolationQuery) -> ResultSet | None:
        """Fetch for `query` and replace the ResultSet.

        Returns the new ResultSet, or None when the fetch failed or was
        superseded by a newer refresh before it finished.
        """
        self._generation += 1
        generation = self._generation

        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        self.state.fetching = True
        self._notify()

        task = asyncio.create_task(self._fetch(query, generation))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Superseded fetch cancelled", extra={"generation": generation})
                return None
            self.state.fetching = False
            raise
        except DatasetError as e:
            if generation != self._generation:
                return None
            logger.error(
                "%s: %s", FETCH_ERROR_MESSAGE, e,
                extra={"where": query.where(), "generation": generation},
            )
            self.state.error = FETCH_ERROR_MESSAGE
            self._settle()
            return None

        if generation != self._generation:
            logger.debug("Discarding stale result", extra={"generation": generation})
            return None

        self.state.result = ResultSet(
            total_count=result.total_count,
            rows=result.rows,
            cities=self.state.cities,
        )
        self.state.error = None
        self._settle()
        return self.state.result

    def _settle(self) -> None:
        self.state.fetching = False
        self.state.loading = False
        self._notify()

    async def _fetch(self, query: ViolationQuery, generation: int) -> ResultSet:
        with mlflow.start_span(name=f"{self.strategy.name}_fetch", span_type=SpanType.RETRIEVER) as span:
            where = query.where()
            span.set_inputs({"where": where, "generation": generation})

            t0 = time.monotonic()
            result = await self.strategy.fetch(query)
            duration_ms = round((time.monotonic() - t0) * 1000, 1)

            logger.info(
                "Fetched %d of %d violations", len(result.rows), result.total_count,
                extra={
                    "where": where,
                    "generation": generation,
                    "row_count": len(result.rows),
                    "duration_ms": duration_ms,
                },
            )
            span.set_outputs({"total_count": result.total_count, "row_count": len(result.rows)})
            return result
