"""
File: routers/ingest.py
Purpose: Ingest endpoints (credential -> validate -> authenticate -> batch upsert).
Notes:
- 400 for a malformed X-Authentication header, empty documents, or any per-document failure.
- 401 with an empty body for every authentication failure.
- 500 problem body for anything unexpected; the exception is logged, not returned.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Response, status
from fastapi.responses import JSONResponse

from ..credentials import CredentialResolver
from ..deps import get_orchestrator, get_resolver
from ..errors import ErrorKind
from ..schemas.ingest import IngestRequest, IngestResponse, ProblemDetails
from ..service import IngestionOrchestrator

log = logging.getLogger("graph-connector.api")

router = APIRouter()


def _json(code: int, body: IngestResponse) -> JSONResponse:
    return JSONResponse(status_code=code, content=body.model_dump(by_alias=True))


def problem_response() -> JSONResponse:
    problem = ProblemDetails(
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred during document ingestion",
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem.model_dump(),
        media_type="application/problem+json",
    )


async def _handle(
    body: Optional[IngestRequest],
    auth_header: Optional[str],
    api_key: Optional[str],
    resolver: CredentialResolver,
    orchestrator: IngestionOrchestrator,
    batched: bool,
) -> Response:
    resolution = resolver.resolve(auth_header, api_key)
    if resolution.error_kind is ErrorKind.FORMAT:
        return _json(status.HTTP_400_BAD_REQUEST, IngestResponse(
            success=False, message="Invalid authentication header", processed_count=0, errors=[resolution.error],
        ))
    if not resolution.ok:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    documents = body.documents if body is not None else None
    try:
        result = await orchestrator.ingest(documents, resolution.credential, batched=batched)
    except Exception:
        log.exception("Unexpected error during document ingestion")
        return problem_response()

    if result.error_kind is ErrorKind.AUTH:
        log.warning("Authentication failed for ingestion request")
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    response = IngestResponse(
        success=result.overall_success,
        message=result.message,
        processed_count=result.processed_count,
        errors=result.errors,
    )
    return _json(status.HTTP_200_OK if result.overall_success else status.HTTP_400_BAD_REQUEST, response)


@router.post("/ingest", response_model=IngestResponse)
async def ingest(
    body: Optional[IngestRequest] = None,
    x_authentication: Optional[str] = Header(None, alias="X-Authentication"),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    resolver: CredentialResolver = Depends(get_resolver),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Ingest JSON documents into a Microsoft Graph connection as external items (batched)."""
    return await _handle(body, x_authentication, x_api_key, resolver, orchestrator, batched=True)


@router.post("/ingest/single", response_model=IngestResponse)
async def ingest_single(
    body: Optional[IngestRequest] = None,
    x_authentication: Optional[str] = Header(None, alias="X-Authentication"),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    resolver: CredentialResolver = Depends(get_resolver),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> Response:
    """Same contract as /ingest, one PUT per document instead of $batch."""
    return await _handle(body, x_authentication, x_api_key, resolver, orchestrator, batched=False)
