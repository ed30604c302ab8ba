"""API route handlers for InsightBites.

GET /api/v1/violations — filtered violations, newest first
GET /api/v1/cities     — city dropdown values
GET /api/v1/counties   — county → cities lookup
"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from insightbites.api.schemas import (
    CitiesResponse,
    ErrorResponse,
    ViolationListResponse,
    ViolationResponse,
)
from insightbites.config import settings
from insightbites.core.counties import COUNTY_MAP, parse_county
from insightbites.core.types import FilterMode, ResultSet, ViewState, row_key
from insightbites.filters.query import build_query
from insightbites.filters.state import FilterState
from insightbites.pipeline.fetcher import FETCH_ERROR_MESSAGE, build_strategy
from insightbites.retrieval.dataset import DatasetError
from insightbites.views import summary_lines

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["violations"])

_strategy = None


def get_strategy():
    """Process-wide filtering strategy (the local strategy caches the dataset)."""
    global _strategy
    if _strategy is None:
        _strategy = build_strategy(settings)
    return _strategy


def _to_response(result: ResultSet, where: str) -> ViolationListResponse:
    view = ViewState(result=result, loading=False)
    return ViolationListResponse(
        total_count=result.total_count,
        shown=len(result.rows),
        summary=summary_lines(view),
        where=where,
        rows=[
            ViolationResponse(key=row_key(record, i), **asdict(record))
            for i, record in enumerate(result.rows)
        ],
    )


@router.get(
    "/violations",
    response_model=ViolationListResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Unknown county"},
        502: {"model": ErrorResponse, "description": "Dataset fetch failed"},
    },
)
async def list_violations(
    mode: FilterMode = FilterMode.NONE,
    county: str = "",
    city: str = "",
    zip_code: str = "",
    search: str = "",
    strategy=Depends(get_strategy),
):
    """Violations for one filter selection. Only the parameter for `mode` is applied."""
    filters = FilterState()
    filters.set_mode(mode)
    if county:
        try:
            filters.select_county(parse_county(county))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    filters.select_city(city)
    filters.set_zip_code(zip_code)
    # The request carries already-settled search text
    filters.set_search_text(search)
    filters.settle_search_text(search)

    query = build_query(filters, COUNTY_MAP, strategy.inspection_types)
    try:
        result = await strategy.fetch(query)
    except DatasetError as e:
        logger.error("%s: %s", FETCH_ERROR_MESSAGE, e, extra={"mode": mode.value, "where": query.where()})
        raise HTTPException(status_code=502, detail=FETCH_ERROR_MESSAGE)

    return _to_response(result, query.where())


@router.get("/cities", response_model=CitiesResponse)
async def list_cities(strategy=Depends(get_strategy)):
    """Distinct cities for the dropdown. Failures yield an empty list."""
    try:
        cities = await strategy.cities()
    except DatasetError as e:
        logger.error("Failed to fetch cities list: %s", e)
        cities = []
    return CitiesResponse(cities=cities)


@router.get("/counties")
async def list_counties() -> dict[str, list[str]]:
    return {county.value: sorted(cities) for county, cities in COUNTY_MAP.items()}
