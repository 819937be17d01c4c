"""
File: service.py
Purpose: Ingestion orchestrator: validate, authenticate once, push all documents, aggregate.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from .auth import Authenticator
from .batching import BatchSubmitter, ChunkResult
from .credentials import Credential
from .errors import ErrorKind, VALIDATION_EMPTY

log = logging.getLogger("graph-connector.service")


@dataclass(frozen=True)
class IngestionResult:
    """Aggregate outcome of one ingestion call."""
    overall_success: bool
    processed_count: int
    errors: List[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None

    @property
    def message(self) -> str:
        if self.error_kind is ErrorKind.VALIDATION:
            return "No documents provided"
        if self.error_kind is ErrorKind.AUTH:
            return "Authentication failed"
        if self.overall_success:
            return "All documents ingested successfully"
        return "Some documents failed to ingest"

    @classmethod
    def from_chunks(cls, total: int, chunks: Sequence[ChunkResult]) -> "IngestionResult":
        processed = sum(c.success_count for c in chunks)
        errors = [e for c in chunks for e in c.errors]
        log.debug("Aggregated %d chunks: %d/%d succeeded", len(chunks), processed, total)
        return cls(overall_success=not errors, processed_count=processed, errors=errors)


class IngestionOrchestrator:
    """Own the document array for one request and drive auth + batch submission."""

    def __init__(self, authenticator: Authenticator, submitter: BatchSubmitter):
        self.authenticator = authenticator
        self.submitter = submitter

    async def ingest(self, documents: Optional[Sequence[Any]], credential: Optional[Credential],
                     batched: bool = True) -> IngestionResult:
        if not documents:
            return IngestionResult(False, 0, [VALIDATION_EMPTY], ErrorKind.VALIDATION)

        auth = await self.authenticator.authenticate(credential)
        if not auth.ok:
            return IngestionResult(False, 0, [auth.error or "Authentication failed"], ErrorKind.AUTH)

        log.info("Starting ingestion of %d documents", len(documents))
        if batched:
            chunks = await self.submitter.submit(documents, credential, auth.token)
        else:
            chunks = [await self.submitter.put_documents(documents, credential, auth.token)]

        result = IngestionResult.from_chunks(len(documents), chunks)
        log.info(
            "Ingestion completed. Success: %s, Processed: %d, Errors: %d",
            result.overall_success, result.processed_count, len(result.errors),
        )
        return result
