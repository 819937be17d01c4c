"""
File: config.py
Purpose: Centralized configuration using environment variables (12-factor).
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Hard ceiling of the Graph JSON batching endpoint
GRAPH_MAX_BATCH = 20


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class CredentialMode(str, Enum):
    """Where the Graph app credential for a request comes from."""
    REQUEST = "request"   # X-Authentication header, config fallback
    CONFIG = "config"     # deployment-wide credential from environment
    API_KEY = "api-key"   # X-API-Key is the client secret, rest from environment


@dataclass(frozen=True)
class FallbackCredential:
    """Deployment-level credential values handed to the resolver."""
    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    connection_id: str = ""


class Settings(BaseSettings):
    """Load service configuration from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    ENV: str = "prod"
    SERVICE_NAME: str = "graph-connector"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    SDK_LOG_LEVEL: str = "WARNING"

    CREDENTIAL_MODE: CredentialMode = CredentialMode.REQUEST

    # Fallback credential (simpler deployment mode)
    GRAPH_TENANT_ID: str = ""
    GRAPH_CLIENT_ID: str = ""
    GRAPH_CLIENT_SECRET: str = ""
    GRAPH_CONNECTION_ID: str = ""

    # Microsoft Graph
    GRAPH_BASE_URL: str = "https://graph.microsoft.com/v1.0"
    GRAPH_SCOPE: str = "https://graph.microsoft.com/.default"
    GRAPH_BATCH_SIZE: int = Field(GRAPH_MAX_BATCH, ge=1, le=GRAPH_MAX_BATCH)

    # Ingestion behaviour
    BATCH_CONCURRENCY: int = Field(1, ge=1)
    INGEST_DEADLINE_SECS: float = Field(0.0, ge=0)  # 0 => no deadline

    # HTTP client tuning
    HTTP_TIMEOUT_SECS: float = 30.0
    HTTP_MAX_KEEPALIVE: int = 20
    HTTP_MAX_CONNECTIONS: int = 50

    def fallback_credential(self) -> FallbackCredential:
        """Return the configured credential as an explicit value."""
        return FallbackCredential(
            tenant_id=self.GRAPH_TENANT_ID,
            client_id=self.GRAPH_CLIENT_ID,
            client_secret=self.GRAPH_CLIENT_SECRET,
            connection_id=self.GRAPH_CONNECTION_ID,
        )

    def validate_startup(self) -> None:
        """Fail fast when a config-backed credential mode lacks tenant/client."""
        if self.CREDENTIAL_MODE is CredentialMode.REQUEST:
            return
        if not self.GRAPH_TENANT_ID:
            raise ConfigurationError("Microsoft Graph TenantId not configured")
        if not self.GRAPH_CLIENT_ID:
            raise ConfigurationError("Microsoft Graph ClientId not configured")
