"""Tests for the client service against an in-process issuer."""

from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport

from certauth.client.oauth_client import OAuthApiClient
from certauth.client.service import OAuthService, load_client_identity
from certauth.client.token_cache import TokenCache
from certauth.core.errors import ConfigError, ConfigErrorKind
from certauth.core.settings import ClientSettings
from certauth.crypto.keys import export_pkcs12
from certauth.crypto.types import Certificate, CertLoadError, CertLoadErrorKind

BASE_URL = "http://test"
PFX_PASSWORD = "OAuthDemo2026!"


def _service(
    transport: httpx.AsyncBaseTransport,
    identity: Certificate,
    unauthorized: Certificate | CertLoadError | None = None,
) -> OAuthService:
    api_client = OAuthApiClient(BASE_URL, transport=transport)
    cache = TokenCache(api_client.request_token, identity)
    return OAuthService(api_client, cache, unauthorized)


class TestCalls:
    """Public and secured resource calls."""

    async def test_public(
        self, issuer_transport: ASGITransport, client_cert: Certificate
    ) -> None:
        result = await _service(issuer_transport, client_cert).call_public()
        assert result.ok
        assert len(result.data or []) == 5

    async def test_secured(
        self, issuer_transport: ASGITransport, client_cert: Certificate
    ) -> None:
        service = _service(issuer_transport, client_cert)
        result = await service.call_secured()
        assert result.ok
        assert len(result.data or []) == 10
        assert service.cache.cached is not None

    async def test_secured_with_refused_certificate(
        self, issuer_transport: ASGITransport, other_cert: Certificate
    ) -> None:
        result = await _service(issuer_transport, other_cert).call_secured()
        assert result.status_code == 401
        assert result.details == "Failed to acquire access token using certificate"

    async def test_override_is_not_cached(
        self,
        issuer_transport: ASGITransport,
        client_cert: Certificate,
    ) -> None:
        service = _service(issuer_transport, client_cert)
        token = await service.get_access_token(override_identity=client_cert)
        assert token
        assert service.cache.cached is None


class TestProveOAuthWorks:
    """Three-step validation check."""

    async def test_all_steps_pass(
        self,
        issuer_transport: ASGITransport,
        client_cert: Certificate,
        other_cert: Certificate,
    ) -> None:
        service = _service(issuer_transport, client_cert, other_cert)
        result = await service.prove_oauth_works()
        assert [s.success for s in result.steps] == [True, True, True]
        assert result.steps[0].actual_result.startswith("SUCCESS")
        assert result.steps[1].actual_result.startswith("SUCCESS")
        assert result.steps[2].actual_result == (
            "SUCCESS - Secured endpoint returned 10 items"
        )
        assert result.conclusion.startswith("OAUTH VALIDATION WORKS")

    async def test_unauthorized_certificate_unavailable(
        self, issuer_transport: ASGITransport, client_cert: Certificate
    ) -> None:
        missing = CertLoadError(
            kind=CertLoadErrorKind.FILE_NOT_FOUND, message="no such file"
        )
        service = _service(issuer_transport, client_cert, missing)
        result = await service.prove_oauth_works()
        assert result.steps[0].actual_result.startswith("SKIPPED")
        assert not result.steps[0].success
        assert result.steps[1].success
        assert result.steps[2].success
        assert result.conclusion.startswith("OAUTH VALIDATION HAS ISSUES")

    async def test_authorized_certificate_refused(
        self,
        issuer_transport: ASGITransport,
        other_cert: Certificate,
        client_cert: Certificate,
    ) -> None:
        # Identities swapped: the pinned certificate plays the unauthorized role.
        service = _service(issuer_transport, other_cert, client_cert)
        result = await service.prove_oauth_works()
        assert result.steps[0].actual_result.startswith("FAILURE")
        assert result.steps[1].actual_result.startswith("FAILURE")
        assert result.steps[2].actual_result == "SKIPPED - No valid token available"
        assert result.conclusion.startswith("OAUTH VALIDATION HAS ISSUES")


class TestFromSettings:
    """Wiring from CLIENT_* configuration."""

    def test_loads_identities(
        self,
        tmp_path: Path,
        client_cert: Certificate,
        other_cert: Certificate,
    ) -> None:
        client_pfx = tmp_path / "client.pfx"
        client_pfx.write_bytes(export_pkcs12(client_cert, PFX_PASSWORD))
        other_pfx = tmp_path / "unauthorized.pfx"
        other_pfx.write_bytes(export_pkcs12(other_cert, PFX_PASSWORD))

        service = OAuthService.from_settings(
            ClientSettings(
                api_base_url=BASE_URL,
                certificate_path=str(client_pfx),
                certificate_password=PFX_PASSWORD,
                unauthorized_certificate_path=str(other_pfx),
                unauthorized_certificate_password=PFX_PASSWORD,
            )
        )
        assert isinstance(service, OAuthService)

    def test_missing_client_certificate(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as excinfo:
            OAuthService.from_settings(
                ClientSettings(certificate_path=str(tmp_path / "missing.pfx"))
            )
        assert excinfo.value.kind == ConfigErrorKind.CLIENT_CERTIFICATE_UNAVAILABLE

    def test_wrong_client_password(
        self, tmp_path: Path, client_cert: Certificate
    ) -> None:
        pfx = tmp_path / "client.pfx"
        pfx.write_bytes(export_pkcs12(client_cert, PFX_PASSWORD))
        with pytest.raises(ConfigError):
            load_client_identity(str(pfx), "wrong")
