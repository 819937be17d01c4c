"""
File: instrumentation.py
Purpose: Prometheus metrics collectors used across the connector

Exports:
  - REQUESTS(route, method, status): count HTTP requests
  - LATENCY(route, method): HTTP request duration histogram
  - GRAPH_BATCHES(outcome): composite requests, outcome in {"submitted","failed"}
  - GRAPH_DOCUMENTS(outcome): documents, outcome in {"succeeded","failed","timeout"}
"""

from fastapi import FastAPI
from prometheus_client import Counter, Histogram, CollectorRegistry, CONTENT_TYPE_LATEST, generate_latest

REGISTRY = CollectorRegistry(auto_describe=True)

REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["route", "method", "status"],
    registry=REGISTRY,
)

LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["route", "method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60),
    registry=REGISTRY,
)

GRAPH_BATCHES = Counter(
    "graph_batches_total",
    "Composite ($batch) requests sent to Microsoft Graph",
    labelnames=["outcome"],
    registry=REGISTRY,
)

GRAPH_DOCUMENTS = Counter(
    "graph_documents_total",
    "Documents pushed to Microsoft Graph by outcome",
    labelnames=["outcome"],
    registry=REGISTRY,
)


def setup_metrics(app: FastAPI) -> None:
    """Attach registry to app.state for /metrics endpoint to read."""
    app.state.prom_registry = REGISTRY


def render_metrics():
    """Return (content_type, payload) for a Starlette/FastAPI Response."""
    return CONTENT_TYPE_LATEST, generate_latest(REGISTRY)
