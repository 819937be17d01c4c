"""
File: auth.py
Purpose: Exchange a request credential for a Microsoft Graph app-only access token.
Notes:
- Pass/fail only: every provider-side failure collapses to a failed AuthResult.
- No token caching; each ingestion call authenticates again.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import anyio
from azure.core.exceptions import ClientAuthenticationError, ServiceRequestError
from azure.identity import AzureAuthorityHosts, ClientSecretCredential

from .credentials import Credential
from .errors import ErrorKind

log = logging.getLogger("graph-connector.auth")


class TokenIssuer(Protocol):
    """Identity provider capability: credential + scope -> bearer token."""

    async def issue_token(self, credential: Credential, scope: str) -> str:
        ...


class AzureTokenIssuer:
    """Client-secret flow against the Azure public cloud authority."""

    def __init__(self, authority: str = AzureAuthorityHosts.AZURE_PUBLIC_CLOUD):
        self.authority = authority

    def _get_token_sync(self, credential: Credential, scope: str) -> str:
        with ClientSecretCredential(
            credential.tenant_id,
            credential.client_id,
            credential.client_secret,
            authority=self.authority,
        ) as azure_credential:
            return azure_credential.get_token(scope).token

    async def issue_token(self, credential: Credential, scope: str) -> str:
        """Acquire a token (blocking SDK call offloaded to a worker thread)."""
        return await anyio.to_thread.run_sync(self._get_token_sync, credential, scope)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a token exchange."""
    token: Optional[str] = field(default=None, repr=False)
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.token)

    @classmethod
    def failed(cls, message: str) -> "AuthResult":
        return cls(error_kind=ErrorKind.AUTH, error=message)


class Authenticator:
    """Validate a credential by obtaining an access token for the Graph scope."""

    def __init__(self, issuer: TokenIssuer, scope: str = "https://graph.microsoft.com/.default"):
        self.issuer = issuer
        self.scope = scope

    async def authenticate(self, credential: Optional[Credential]) -> AuthResult:
        if credential is None or not credential.is_complete:
            log.warning("Credential is missing one or more required fields")
            return AuthResult.failed("Incomplete credential")

        try:
            token = await self.issuer.issue_token(credential, self.scope)
        except ClientAuthenticationError as e:
            log.warning("Authentication failed: %s", e.message)
            return AuthResult.failed("Authentication failed")
        except ServiceRequestError as e:
            log.warning("Identity provider unreachable: %s", e.message)
            return AuthResult.failed("Identity provider unreachable")
        except Exception:
            log.exception("Unexpected error during token acquisition")
            return AuthResult.failed("Unexpected authentication error")

        if not token:
            log.warning("Failed to obtain access token")
            return AuthResult.failed("Empty access token")

        log.info("Authenticated application for tenant %s", credential.tenant_id)
        return AuthResult(token=token)
