"""
File: main.py
Purpose: Application entrypoint for the Graph connector. Wires routers, logging, metrics, clients.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .clients import init_clients, close_clients
from .config import Settings
from .instrumentation import setup_metrics, REQUESTS, LATENCY
from .logging_setup import configure_logging
from .routers import health, metrics, ingest
from .schemas.ingest import IngestResponse

log = logging.getLogger("graph-connector")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    configure_logging(settings.LOG_LEVEL, settings.SDK_LOG_LEVEL)
    settings.validate_startup()
    await init_clients(app)
    log.info("Graph connector started (credential mode: %s)", settings.CREDENTIAL_MODE.value)
    yield
    await close_clients(app)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(
        title="Graph Connector - Document Ingestion",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings()
    app.state.http = None
    setup_metrics(app)

    # Simple request timing middleware for metrics
    @app.middleware("http")
    async def prometheus_mw(request: Request, call_next):
        """Track request metrics and latency histograms."""
        start = time.perf_counter()
        resp = await call_next(request)
        # matched route template; unmatched paths share one series
        matched = request.scope.get("route")
        route = getattr(matched, "path", None) or "unmatched"
        LATENCY.labels(route=route, method=request.method).observe(time.perf_counter() - start)
        REQUESTS.labels(route=route, method=request.method, status=str(resp.status_code)).inc()
        return resp

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        """Report unreadable request bodies in the ingest response shape."""
        log.warning("Rejected request body on %s: %s", request.url.path, exc.errors())
        body = IngestResponse(
            success=False,
            message="Invalid request body",
            processed_count=0,
            errors=["Request body must be a JSON object with a 'documents' array"],
        )
        return JSONResponse(status_code=400, content=body.model_dump(by_alias=True))

    # Routers
    app.include_router(health.router, prefix="", tags=["system"])
    app.include_router(metrics.router, prefix="", tags=["system"])
    app.include_router(ingest.router, prefix="/api", tags=["ingest"])
    return app


app = create_app()


def main():
    """CLI entry point."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
