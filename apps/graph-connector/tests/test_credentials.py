"""
File: tests/test_credentials.py
Purpose: Credential resolution from headers and configuration.
"""

import pytest

from connector.config import ConfigurationError, CredentialMode, FallbackCredential, Settings
from connector.credentials import CredentialResolver, parse_auth_header
from connector.errors import ErrorKind

FALLBACK = FallbackCredential(tenant_id="ft", client_id="fc", client_secret="fs", connection_id="fconn")


def test_header_keys_are_case_insensitive():
    res = parse_auth_header('{"CLIENTID":"c","clientsecret":"s","TenantId":"t","connectionID":"x"}')
    assert res.ok
    cred = res.credential
    assert (cred.tenant_id, cred.client_id, cred.client_secret, cred.connection_id) == ("t", "c", "s", "x")
    assert cred.is_complete


def test_malformed_header_is_a_format_error():
    res = parse_auth_header("{not json")
    assert not res.ok
    assert res.error_kind is ErrorKind.FORMAT
    assert "Invalid X-Authentication header format" in res.error


def test_non_object_header_is_a_format_error():
    assert parse_auth_header("[1, 2]").error_kind is ErrorKind.FORMAT


def test_missing_fields_resolve_but_are_incomplete():
    res = parse_auth_header('{"clientId":"c","tenantId":"t"}')
    assert res.ok
    assert not res.credential.is_complete


def test_secret_is_not_in_repr():
    res = parse_auth_header('{"clientId":"c","clientSecret":"hunter2","tenantId":"t","connectionId":"x"}')
    assert "hunter2" not in repr(res.credential)


def test_header_takes_precedence_over_fallback():
    resolver = CredentialResolver(FALLBACK)
    res = resolver.resolve('{"clientId":"c","clientSecret":"s","tenantId":"t","connectionId":"x"}')
    assert res.credential.tenant_id == "t"


def test_no_header_uses_fallback():
    res = CredentialResolver(FALLBACK).resolve(None)
    assert res.ok and res.credential.connection_id == "fconn"


def test_no_header_and_no_fallback_is_auth_failure():
    res = CredentialResolver(FallbackCredential()).resolve("  ")
    assert res.error_kind is ErrorKind.AUTH


def test_api_key_mode_uses_key_as_secret():
    resolver = CredentialResolver(FALLBACK, CredentialMode.API_KEY)
    res = resolver.resolve(None, "the-key")
    assert res.credential.client_secret == "the-key"
    assert res.credential.tenant_id == "ft"
    assert resolver.resolve(None, None).error_kind is ErrorKind.AUTH


def test_config_mode_requires_tenant_and_client():
    with pytest.raises(ConfigurationError):
        Settings(CREDENTIAL_MODE="config", GRAPH_CLIENT_ID="c", GRAPH_TENANT_ID="").validate_startup()
    with pytest.raises(ConfigurationError):
        Settings(CREDENTIAL_MODE="api-key", GRAPH_TENANT_ID="t", GRAPH_CLIENT_ID="").validate_startup()
    Settings(CREDENTIAL_MODE="config", GRAPH_TENANT_ID="t", GRAPH_CLIENT_ID="c").validate_startup()
    Settings(CREDENTIAL_MODE="request", GRAPH_TENANT_ID="", GRAPH_CLIENT_ID="").validate_startup()
