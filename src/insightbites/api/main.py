"""InsightBites API — FastAPI application serving filtered violation data.

Run:
    uvicorn insightbites.api.main:app --reload
    # or
    insightbites-api
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from insightbites.api.routes import get_strategy, router
from insightbites.config import settings
from insightbites.observability import correlation_id, init_tracing, setup_logging
from insightbites.retrieval.dataset import DatasetError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and tracing on startup."""
    setup_logging(json_format=settings.log_json, level=settings.log_level, secrets=[settings.app_token])
    init_tracing(settings)
    logger.info(
        "InsightBites API ready (strategy=%s, dataset=%s)",
        settings.filter_strategy, settings.dataset_url,
    )
    yield
    logger.info("Shutting down")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation ID and log one line when it completes.

    The ID comes from the X-Request-ID header when the caller sends one and
    is echoed back on the response. uvicorn's access log is silenced, so
    this line is the request log.
    """

    async def dispatch(self, request: Request, call_next):
        cid = request.headers.get("x-request-id") or uuid.uuid4().hex
        token = correlation_id.set(cid)
        t0 = time.monotonic()
        try:
            response = await call_next(request)
            duration_ms = round((time.monotonic() - t0) * 1000, 1)
            response.headers["x-request-id"] = cid
            logger.info(
                "%s %s -> %d", request.method, request.url.path, response.status_code,
                extra={"mode": request.query_params.get("mode"), "duration_ms": duration_ms},
            )
            return response
        finally:
            correlation_id.reset(token)


app = FastAPI(
    title="InsightBites",
    description="Delaware restaurant inspection violations, filterable by county, city, "
    "zip code or restaurant name.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health(strategy=Depends(get_strategy)):
    """Health check — verifies the dataset endpoint answers a count query."""
    checks = {"strategy": strategy.name}
    try:
        await strategy.client.count()
        checks["dataset"] = "ok"
    except DatasetError as e:
        checks["dataset"] = f"error: {e}"

    status = "healthy" if checks["dataset"] == "ok" else "degraded"
    return {"status": status, "checks": checks}


def run():
    """Entry point for insightbites-api console script."""
    uvicorn.run("insightbites.api.main:app", host="0.0.0.0", port=8000, reload=True)
