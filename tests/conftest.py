"""Shared test fixtures."""

import httpx
import mlflow
import pytest

from insightbites.retrieval.dataset import SocrataClient

DATASET_URL = "https://data.example.gov/resource/test-0000.json"


@pytest.fixture(autouse=True)
def _disable_mlflow_tracing():
    """Disable MLflow tracing during tests — no side effects, no mlruns/ writes."""
    mlflow.tracing.disable()
    yield
    mlflow.tracing.enable()


def _make_row(
    name: str,
    day: str,
    city: str = "Dover",
    zip_code: str = "19901",
    insp_type: str = "Complaint",
    violation: str = "2-301.14",
    description: str = "Hands not washed when required",
) -> dict:
    """A SODA JSON row as the Delaware endpoint returns it."""
    return {
        "restname": name,
        "restaddress": "1 Main St",
        "restcity": city,
        "restzip": zip_code,
        "insp_date": f"{day}T00:00:00.000",
        "insp_type": insp_type,
        "violation": violation,
        "vio_desc": description,
    }


@pytest.fixture
def make_row():
    return _make_row


class FakeSoda:
    """In-process stand-in for a SODA resource, served through httpx.MockTransport.

    Answers count, distinct-city and row queries from a fixed row list and
    records the decoded query parameters of every request.
    """

    def __init__(self, rows=(), count: int | None = None, cities=None, status: int = 200):
        self.rows = list(rows)
        self.count = count
        self.cities = cities
        self.status = status
        self.requests: list[dict] = []
        self.tokens: list[str | None] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.requests.append(params)
        self.tokens.append(request.headers.get("x-app-token"))

        if self.status != 200:
            return httpx.Response(self.status, json={"message": "boom"})

        if params.get("$select") == "count(*)":
            total = self.count if self.count is not None else len(self.rows)
            return httpx.Response(200, json=[{"count": str(total)}])

        if params.get("$group") == "restcity":
            cities = self.cities if self.cities is not None else sorted({r["restcity"] for r in self.rows})
            return httpx.Response(200, json=[{"restcity": c} for c in cities])

        rows = list(self.rows)
        if params.get("$order") == "insp_date DESC":
            rows.sort(key=lambda r: r["insp_date"], reverse=True)
        offset = int(params.get("$offset", 0))
        limit = int(params.get("$limit", 1000))
        return httpx.Response(200, json=rows[offset : offset + limit])

    def where_clauses(self) -> list[str]:
        return [p.get("$where", "") for p in self.requests]

    def client(self, app_token: str = "") -> SocrataClient:
        return SocrataClient(DATASET_URL, app_token=app_token, transport=httpx.MockTransport(self))


@pytest.fixture
def fake_soda():
    return FakeSoda
