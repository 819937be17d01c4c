"""
File: graph_client.py
Purpose: Thin async client for Graph JSON batching ($batch) and single item upserts.
Notes:
- Never raises for remote failures; returns a BatchSubmission carrying the error kind.
- No retries: throttled (429) sub-responses are reported like any other failure.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import httpx

from .errors import ErrorKind

log = logging.getLogger("graph-connector.graph")


@dataclass(frozen=True)
class BatchStep:
    """One PUT sub-request inside a composite request."""
    id: str
    url: str
    body: Dict[str, Any]
    method: str = "PUT"

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "method": self.method,
            "url": self.url,
            "headers": {"Content-Type": "application/json"},
            "body": self.body,
        }


def item_url(connection_id: str, item_id: str) -> str:
    """Relative Graph URL of an external item."""
    return f"/external/connections/{quote(connection_id, safe='')}/items/{quote(item_id, safe='')}"


@dataclass(frozen=True)
class SubResponse:
    status: int
    body: Any = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def body_text(self) -> str:
        if self.body is None:
            return ""
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body, ensure_ascii=False)


@dataclass(frozen=True)
class BatchSubmission:
    """Sub-responses keyed by step id, or the reason none were obtained."""
    responses: Dict[str, SubResponse] = field(default_factory=dict)
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def failed(cls, message: str, kind: ErrorKind = ErrorKind.TRANSPORT) -> "BatchSubmission":
        return cls(error_kind=kind, error=message)


class BatchClient(Protocol):
    """Indexing service capability used by the batch submitter."""

    async def submit_batch(self, token: str, steps: List[BatchStep]) -> BatchSubmission:
        ...

    async def put_item(self, token: str, step: BatchStep) -> BatchSubmission:
        ...


class GraphBatchClient:
    """Submit steps to {base_url}/$batch using a shared httpx.AsyncClient."""

    def __init__(self, http: httpx.AsyncClient, base_url: str = "https://graph.microsoft.com/v1.0"):
        self.http = http
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def _headers(token: str) -> Dict[str, str]:
        return {"authorization": f"Bearer {token}", "content-type": "application/json"}

    async def submit_batch(self, token: str, steps: List[BatchStep]) -> BatchSubmission:
        """POST one composite request and demultiplex the sub-responses by id."""
        payload = {"requests": [s.to_json() for s in steps]}
        try:
            resp = await self.http.post(f"{self.base_url}/$batch", json=payload, headers=self._headers(token))
        except httpx.HTTPError as e:
            log.error("Graph batch request failed: %s", e)
            return BatchSubmission.failed(str(e) or e.__class__.__name__)

        if not resp.is_success:
            body = resp.text[:512]
            log.error("Graph batch request rejected: %s - %s", resp.status_code, body)
            return BatchSubmission.failed(f"{resp.status_code} - {body}")

        try:
            data = resp.json()
            entries = data.get("responses") or []
            responses = {}
            for entry in entries:
                if entry.get("id") is None:
                    log.warning("Dropping Graph sub-response without id (status=%s)", entry.get("status"))
                    continue
                responses[str(entry["id"])] = SubResponse(int(entry.get("status", 0)), entry.get("body"))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            log.error("Unparseable Graph batch response: %s", e)
            return BatchSubmission.failed(f"Unparseable batch response: {e}")

        log.debug("Graph batch returned %d/%d sub-responses", len(responses), len(steps))
        return BatchSubmission(responses=responses)

    async def put_item(self, token: str, step: BatchStep) -> BatchSubmission:
        """PUT one external item directly (no batching)."""
        try:
            resp = await self.http.request(
                step.method, f"{self.base_url}{step.url}", json=step.body, headers=self._headers(token)
            )
        except httpx.HTTPError as e:
            log.error("Graph item request failed: %s", e)
            return BatchSubmission.failed(str(e) or e.__class__.__name__)
        return BatchSubmission(responses={step.id: SubResponse(resp.status_code, resp.text)})
