"""
File: tests/conftest.py
Purpose: Shared fakes for the identity provider and the Graph batch endpoint.
"""

from typing import Callable, List, Optional

import pytest
from fastapi.testclient import TestClient

from connector.auth import Authenticator
from connector.batching import BatchSubmitter
from connector.config import Settings
from connector.credentials import Credential
from connector.deps import get_orchestrator
from connector.graph_client import BatchStep, BatchSubmission, SubResponse
from connector.main import create_app
from connector.service import IngestionOrchestrator

VALID_HEADER = '{"clientId":"cid","clientSecret":"secret","tenantId":"tid","connectionId":"conn"}'


class FakeIssuer:
    """TokenIssuer that returns a fixed token or raises."""

    def __init__(self, token: str = "token-123", exc: Optional[Exception] = None):
        self.token = token
        self.exc = exc
        self.calls: List[Credential] = []

    async def issue_token(self, credential, scope):
        self.calls.append(credential)
        if self.exc is not None:
            raise self.exc
        return self.token


class FakeBatchClient:
    """BatchClient answering each step with status_for(step); records every batch."""

    def __init__(
        self,
        status_for: Callable[[BatchStep], int] = lambda step: 200,
        exc: Optional[Exception] = None,
        drop: Callable[[BatchStep], bool] = lambda step: False,
    ):
        self.status_for = status_for
        self.exc = exc
        self.drop = drop
        self.batches: List[List[BatchStep]] = []
        self.puts: List[BatchStep] = []

    async def submit_batch(self, token, steps):
        self.batches.append(list(steps))
        if self.exc is not None:
            raise self.exc
        responses = {}
        for step in steps:
            if self.drop(step):
                continue
            code = self.status_for(step)
            responses[step.id] = SubResponse(code, None if code < 300 else {"error": {"code": "BadRequest"}})
        return BatchSubmission(responses=responses)

    async def put_item(self, token, step):
        self.puts.append(step)
        if self.exc is not None:
            raise self.exc
        return BatchSubmission(responses={step.id: SubResponse(self.status_for(step), "")})


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def credential() -> Credential:
    return Credential(tenant_id="tid", client_id="cid", client_secret="secret", connection_id="conn")


@pytest.fixture
def issuer() -> FakeIssuer:
    return FakeIssuer()


@pytest.fixture
def batch_client() -> FakeBatchClient:
    return FakeBatchClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(LOG_LEVEL="INFO")


@pytest.fixture
def make_client(settings, issuer, batch_client):
    """Factory for a TestClient whose orchestrator talks to the fakes."""

    def _make(settings: Settings = settings, issuer=issuer, batch_client=batch_client) -> TestClient:
        app = create_app(settings)
        app.dependency_overrides[get_orchestrator] = lambda: IngestionOrchestrator(
            Authenticator(issuer), BatchSubmitter(batch_client)
        )
        return TestClient(app)

    return _make
