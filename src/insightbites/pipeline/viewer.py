"""Viewer session: filter selection → debounced query → fetcher.

Mirrors what the browser component does on every interaction. Discrete
selections (mode, county, city, zip) refresh immediately; restaurant
name search goes through a 500 ms debouncer first. A refresh is only
issued when the selection actually changes the query.
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping

from insightbites.core.counties import COUNTY_MAP
from insightbites.core.types import County, FilterMode, ResultSet, ViewState
from insightbites.filters.query import ViolationQuery, build_query
from insightbites.filters.state import FilterState
from insightbites.pipeline.debounce import DEBOUNCE_SECONDS, Debouncer
from insightbites.pipeline.fetcher import ViolationFetcher

logger = logging.getLogger(__name__)


class ViolationViewer:
    def __init__(
        self,
        fetcher: ViolationFetcher,
        county_map: Mapping[County, Iterable[str]] = COUNTY_MAP,
        debounce_seconds: float = DEBOUNCE_SECONDS,
    ):
        self.fetcher = fetcher
        self.filters = FilterState()
        self.county_map = county_map
        self._debouncer = Debouncer(self._on_search_settled, delay=debounce_seconds)
        self._last_query: ViolationQuery | None = None

    @property
    def state(self) -> ViewState:
        return self.fetcher.state

    def current_query(self) -> ViolationQuery:
        return build_query(self.filters, self.county_map, self.fetcher.strategy.inspection_types)

    async def start(self) -> None:
        """Initial load: the city list and the unfiltered violations, independently."""
        await asyncio.gather(self.fetcher.load_cities(), self._refresh(force=True))

    async def set_mode(self, mode: FilterMode) -> ResultSet | None:
        self._debouncer.cancel()
        self.filters.set_mode(mode)
        return await self._refresh()

    async def select_county(self, county: County | None) -> ResultSet | None:
        self.filters.select_county(county)
        return await self._refresh()

    async def select_city(self, city: str) -> ResultSet | None:
        self.filters.select_city(city)
        return await self._refresh()

    async def set_zip_code(self, zip_code: str) -> ResultSet | None:
        self.filters.set_zip_code(zip_code)
        return await self._refresh()

    def type_search(self, text: str) -> None:
        """One keystroke's worth of search input; the query follows once typing pauses."""
        self.filters.set_search_text(text)
        self._debouncer.push(text)

    async def settle(self) -> None:
        """Wait for any pending debounced search and the refresh it triggers."""
        await self._debouncer.wait()

    async def close(self) -> None:
        self._debouncer.cancel()

    async def _on_search_settled(self, text: str) -> None:
        if self.filters.mode != FilterMode.RESTAURANT:
            return
        self.filters.settle_search_text(text)
        await self._refresh()

    async def _refresh(self, force: bool = False) -> ResultSet | None:
        query = self.current_query()
        if not force and query == self._last_query and self.state.error is None:
            return self.state.result

        self._last_query = query
        logger.info(
            "Refreshing violations",
            extra={"mode": self.filters.mode.value, "where": query.where()},
        )
        return await self.fetcher.refresh(query)
