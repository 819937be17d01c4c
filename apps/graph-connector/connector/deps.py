"""
File: deps.py
Purpose: Request-scoped dependency providers (settings, credential resolver, orchestrator).
"""

import httpx
from fastapi import Depends, Request

from .auth import Authenticator, AzureTokenIssuer
from .batching import BatchSubmitter
from .config import Settings
from .credentials import CredentialResolver
from .graph_client import GraphBatchClient
from .service import IngestionOrchestrator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http(request: Request) -> httpx.AsyncClient:
    """Shared outbound client opened by the app lifespan."""
    http = getattr(request.app.state, "http", None)
    if http is None:
        raise RuntimeError("HTTP client not initialised; the application lifespan has not run")
    return http


def get_resolver(settings: Settings = Depends(get_settings)) -> CredentialResolver:
    return CredentialResolver(settings.fallback_credential(), settings.CREDENTIAL_MODE)


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http),
) -> IngestionOrchestrator:
    """Build a fresh orchestrator per request; only the HTTP pool is shared."""
    authenticator = Authenticator(AzureTokenIssuer(), scope=settings.GRAPH_SCOPE)
    submitter = BatchSubmitter(
        GraphBatchClient(http, settings.GRAPH_BASE_URL),
        batch_size=settings.GRAPH_BATCH_SIZE,
        concurrency=settings.BATCH_CONCURRENCY,
        deadline_secs=settings.INGEST_DEADLINE_SECS,
    )
    return IngestionOrchestrator(authenticator, submitter)
