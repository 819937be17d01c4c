"""
File: credentials.py
Purpose: Resolve the Graph app credential for a request from headers or configuration.
Notes:
- Header JSON keys are matched case-insensitively (clientId, ClientID, clientid...).
- A parseable header with missing/empty fields still resolves; the authenticator
  rejects incomplete credentials so that case surfaces as 401, not 400.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from .config import CredentialMode, FallbackCredential
from .errors import ErrorKind

log = logging.getLogger("graph-connector.credentials")

_HEADER_FIELDS = {
    "tenantid": "tenant_id",
    "clientid": "client_id",
    "clientsecret": "client_secret",
    "connectionid": "connection_id",
}


@dataclass(frozen=True)
class Credential:
    """Tenant + app registration + target connection for one request."""
    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)
    connection_id: str

    @property
    def is_complete(self) -> bool:
        return all((self.tenant_id, self.client_id, self.client_secret, self.connection_id))


@dataclass(frozen=True)
class CredentialResolution:
    """Either a credential or the reason none could be produced."""
    credential: Optional[Credential] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.credential is not None

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "CredentialResolution":
        return cls(error_kind=kind, error=message)


def parse_auth_header(raw: str) -> CredentialResolution:
    """Parse an X-Authentication header value into a credential."""
    try:
        data = json.loads(raw)
    except ValueError as e:
        return CredentialResolution.failed(
            ErrorKind.FORMAT, f"Invalid X-Authentication header format: {e}"
        )
    if not isinstance(data, dict):
        return CredentialResolution.failed(
            ErrorKind.FORMAT, "Invalid X-Authentication header format: expected a JSON object"
        )

    values = {attr: "" for attr in _HEADER_FIELDS.values()}
    for key, value in data.items():
        attr = _HEADER_FIELDS.get(str(key).lower())
        if attr is None or value is None:
            continue
        if not isinstance(value, str):
            return CredentialResolution.failed(
                ErrorKind.FORMAT,
                f"Invalid X-Authentication header format: '{key}' must be a string",
            )
        values[attr] = value.strip()
    return CredentialResolution(credential=Credential(**values))


class CredentialResolver:
    """Produce a per-request credential according to the configured mode."""

    def __init__(self, fallback: FallbackCredential, mode: CredentialMode = CredentialMode.REQUEST):
        self.fallback = fallback
        self.mode = mode

    @property
    def has_fallback(self) -> bool:
        return bool(self.fallback.tenant_id and self.fallback.client_id)

    def _from_fallback(self, client_secret: Optional[str] = None) -> Credential:
        return Credential(
            tenant_id=self.fallback.tenant_id,
            client_id=self.fallback.client_id,
            client_secret=self.fallback.client_secret if client_secret is None else client_secret,
            connection_id=self.fallback.connection_id,
        )

    def resolve(self, auth_header: Optional[str] = None, api_key: Optional[str] = None) -> CredentialResolution:
        """Return the credential for a request, or an error kind (FORMAT / AUTH)."""
        if self.mode is CredentialMode.API_KEY:
            if not api_key:
                log.warning("API key is null or empty")
                return CredentialResolution.failed(ErrorKind.AUTH, "API key is missing")
            return CredentialResolution(credential=self._from_fallback(client_secret=api_key))

        if auth_header and auth_header.strip():
            resolution = parse_auth_header(auth_header)
            if not resolution.ok:
                log.warning("Rejected X-Authentication header: %s", resolution.error)
            return resolution

        if self.has_fallback:
            log.debug("No X-Authentication header; using configured credential")
            return CredentialResolution(credential=self._from_fallback())

        log.warning("No credential supplied and no fallback configured")
        return CredentialResolution.failed(ErrorKind.AUTH, "No credential supplied")
