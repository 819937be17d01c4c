"""
File: batching.py
Purpose: Split documents into Graph-sized batches, submit each as one composite
request, and correlate sub-responses back to absolute document indexes.

Failure semantics:
  - A non-2xx sub-response, or a missing one, fails only that document.
  - A composite request that fails as a whole fails every document of its chunk.
  - Chunks that do not finish before the ingestion deadline fail as timeouts.

Chunks may run concurrently (BATCH_CONCURRENCY); results are always merged back
in chunk order, so the error list is in ascending document order either way.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .config import GRAPH_MAX_BATCH
from .credentials import Credential
from .errors import ErrorKind, item_error, missing_response_error, timeout_error, transport_error
from .graph_client import BatchClient, BatchStep, BatchSubmission, item_url
from .instrumentation import GRAPH_BATCHES, GRAPH_DOCUMENTS
from .mapper import map_document

log = logging.getLogger("graph-connector.batching")


@dataclass(frozen=True)
class BatchOutcome:
    """Result for one document."""
    index: int
    succeeded: bool
    error_detail: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


@dataclass
class ChunkResult:
    """Per-document outcomes of one chunk, in submission order."""
    start_index: int
    outcomes: List[BatchOutcome] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def errors(self) -> List[str]:
        return [o.error_detail for o in self.outcomes if not o.succeeded and o.error_detail]


def chunk_documents(documents: Sequence[Any], size: int = GRAPH_MAX_BATCH) -> Iterator[Tuple[int, Sequence[Any]]]:
    """Yield (start_index, chunk) pairs of at most `size` documents."""
    if size < 1 or size > GRAPH_MAX_BATCH:
        raise ValueError(f"batch size must be between 1 and {GRAPH_MAX_BATCH}, got {size}")
    for start in range(0, len(documents), size):
        yield start, documents[start:start + size]


def _fail_all(start_index: int, count: int, message, kind: ErrorKind) -> ChunkResult:
    return ChunkResult(
        start_index=start_index,
        outcomes=[
            BatchOutcome(start_index + i, False, message(start_index + i), kind)
            for i in range(count)
        ],
    )


class BatchSubmitter:
    """Submit mapped documents to one connection through a BatchClient."""

    def __init__(
        self,
        client: BatchClient,
        batch_size: int = GRAPH_MAX_BATCH,
        concurrency: int = 1,
        deadline_secs: float = 0.0,
    ):
        if batch_size < 1 or batch_size > GRAPH_MAX_BATCH:
            raise ValueError(f"batch size must be between 1 and {GRAPH_MAX_BATCH}, got {batch_size}")
        self.client = client
        self.batch_size = batch_size
        self.concurrency = max(1, concurrency)
        self.deadline_secs = deadline_secs

    def _steps(self, documents: Sequence[Any], start_index: int, connection_id: str) -> List[BatchStep]:
        steps = []
        for offset, document in enumerate(documents):
            item = map_document(document, start_index + offset)
            step = BatchStep(id=str(uuid.uuid4()), url=item_url(connection_id, item.id), body=item.to_graph())
            log.debug("Added document %d to batch with request ID %s", start_index + offset, step.id)
            steps.append(step)
        return steps

    async def submit_chunk(
        self, documents: Sequence[Any], start_index: int, credential: Credential, token: str
    ) -> ChunkResult:
        """Submit one chunk (<= batch size) as a single composite request."""
        if len(documents) > self.batch_size:
            raise ValueError(f"chunk of {len(documents)} exceeds batch size {self.batch_size}")

        try:
            steps = self._steps(documents, start_index, credential.connection_id)
            log.info("Executing batch request with %d documents (start=%d)", len(steps), start_index)
            submission = await self.client.submit_batch(token, steps)
        except Exception as e:
            log.exception("Error processing batch starting at index %d", start_index)
            submission = BatchSubmission.failed(str(e) or e.__class__.__name__)

        if not submission.ok:
            GRAPH_BATCHES.labels(outcome="failed").inc()
            GRAPH_DOCUMENTS.labels(outcome="failed").inc(len(documents))
            return _fail_all(
                start_index,
                len(documents),
                lambda i: transport_error(i, submission.error or "unknown error"),
                ErrorKind.TRANSPORT,
            )

        GRAPH_BATCHES.labels(outcome="submitted").inc()
        result = ChunkResult(start_index=start_index)
        for offset, step in enumerate(steps):
            index = start_index + offset
            response = submission.responses.get(step.id)
            if response is None:
                log.error("Failed to get response for document %d from batch", index)
                result.outcomes.append(BatchOutcome(index, False, missing_response_error(index), ErrorKind.ITEM))
            elif response.is_success:
                log.debug("Ingested document %d via batch", index)
                result.outcomes.append(BatchOutcome(index, True))
            else:
                body = response.body_text()
                log.error("Failed to ingest document %d via batch: %s - %s", index, response.status, body)
                result.outcomes.append(BatchOutcome(index, False, item_error(index, response.status, body), ErrorKind.ITEM))

        GRAPH_DOCUMENTS.labels(outcome="succeeded").inc(result.success_count)
        GRAPH_DOCUMENTS.labels(outcome="failed").inc(len(documents) - result.success_count)
        return result

    async def _bounded_chunk(
        self,
        documents: Sequence[Any],
        start_index: int,
        credential: Credential,
        token: str,
        semaphore: asyncio.Semaphore,
        deadline: Optional[float],
    ) -> ChunkResult:
        async with semaphore:
            if deadline is None:
                return await self.submit_chunk(documents, start_index, credential, token)
            remaining = deadline - asyncio.get_running_loop().time()
            try:
                if remaining <= 0:
                    raise asyncio.TimeoutError()
                return await asyncio.wait_for(
                    self.submit_chunk(documents, start_index, credential, token), timeout=remaining
                )
            except asyncio.TimeoutError:
                log.warning("Deadline elapsed before batch at index %d completed", start_index)
                GRAPH_DOCUMENTS.labels(outcome="timeout").inc(len(documents))
                return _fail_all(start_index, len(documents), timeout_error, ErrorKind.TIMEOUT)

    async def submit(self, documents: Sequence[Any], credential: Credential, token: str) -> List[ChunkResult]:
        """Submit all documents chunk by chunk; results are in chunk order."""
        deadline = None
        if self.deadline_secs > 0:
            deadline = asyncio.get_running_loop().time() + self.deadline_secs

        semaphore = asyncio.Semaphore(self.concurrency)
        chunks = list(chunk_documents(documents, self.batch_size))
        if self.concurrency == 1:
            return [
                await self._bounded_chunk(chunk, start, credential, token, semaphore, deadline)
                for start, chunk in chunks
            ]
        return list(await asyncio.gather(*(
            self._bounded_chunk(chunk, start, credential, token, semaphore, deadline)
            for start, chunk in chunks
        )))

    async def put_documents(self, documents: Sequence[Any], credential: Credential, token: str) -> ChunkResult:
        """Upsert documents one request at a time (no composite request)."""
        result = ChunkResult(start_index=0)
        for index, document in enumerate(documents):
            item = map_document(document, index)
            step = BatchStep(id=item.id, url=item_url(credential.connection_id, item.id), body=item.to_graph())
            try:
                submission = await self.client.put_item(token, step)
            except Exception as e:
                log.exception("Failed to ingest document %d", index)
                submission = BatchSubmission.failed(str(e) or e.__class__.__name__)

            response = submission.responses.get(step.id) if submission.ok else None
            if response is not None and response.is_success:
                log.info("Ingested document %d", index)
                result.outcomes.append(BatchOutcome(index, True))
            elif response is not None:
                body = response.body_text()
                log.error("Failed to ingest document %d: %s - %s", index, response.status, body)
                result.outcomes.append(BatchOutcome(index, False, item_error(index, response.status, body), ErrorKind.ITEM))
            elif submission.ok:
                result.outcomes.append(BatchOutcome(index, False, missing_response_error(index), ErrorKind.ITEM))
            else:
                result.outcomes.append(BatchOutcome(
                    index, False, f"Failed to ingest document {index}: {submission.error}", ErrorKind.TRANSPORT
                ))
        GRAPH_DOCUMENTS.labels(outcome="succeeded").inc(result.success_count)
        GRAPH_DOCUMENTS.labels(outcome="failed").inc(len(documents) - result.success_count)
        return result
