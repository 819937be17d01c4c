"""
File: clients.py
Purpose: Initialize and manage the shared async HTTP client used for Graph calls.
"""

import httpx
from fastapi import FastAPI
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from .config import Settings


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    limits = httpx.Limits(max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE,
                          max_connections=settings.HTTP_MAX_CONNECTIONS)
    timeout = httpx.Timeout(settings.HTTP_TIMEOUT_SECS)
    return httpx.AsyncClient(limits=limits, timeout=timeout)


async def init_clients(app: FastAPI) -> None:
    """Create the shared async client and attach to app.state."""
    app.state.http = build_http_client(app.state.settings)
    # Propagate trace context on outbound Graph requests
    HTTPXClientInstrumentor.instrument_client(app.state.http)


async def close_clients(app: FastAPI) -> None:
    """Close shared async clients on shutdown."""
    if getattr(app.state, "http", None) is not None:
        await app.state.http.aclose()
        app.state.http = None
