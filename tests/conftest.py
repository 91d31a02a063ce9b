"""Shared test fixtures for certauth."""

import logging
from collections.abc import AsyncIterator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
import structlog
from httpx import ASGITransport, AsyncClient

from certauth.core.app import create_app
from certauth.core.clock import Clock, get_clock
from certauth.crypto.jwt_manager import SigningKey
from certauth.crypto.keys import generate_self_signed_certificate
from certauth.crypto.types import Certificate
from certauth.oauth.policy import TrustPolicy

NOW = datetime(2026, 1, 17, 12, 0, 0, tzinfo=UTC)
SECRET = "test-signing-secret-with-at-least-32-bytes!"
CLIENT_CN = "OAuthDemoClientCert"


def fixed_clock(moment: datetime = NOW) -> Clock:
    return lambda: moment


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ambient issuer and logging configuration out of tests."""
    for name in (
        "AUTH_SIGNING_SECRET",
        "AUTH_SIGNING_CERT_PATH",
        "AUTH_EXPECTED_THUMBPRINT",
        "AUTH_EXPIRATION_MINUTES",
        "AUTH_CORS_ORIGINS",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo the stdout handler and structlog config installed by app factories."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def now() -> datetime:
    """Fixed validation time shared by the certificate fixtures."""
    return NOW


@pytest.fixture(scope="session")
def client_cert() -> Certificate:
    """Client certificate valid around NOW, with its private key."""
    return generate_self_signed_certificate(
        CLIENT_CN,
        not_before=NOW - timedelta(days=1),
        not_after=NOW + timedelta(days=365),
    )


@pytest.fixture(scope="session")
def other_cert() -> Certificate:
    """A second, time-valid certificate the issuer does not pin."""
    return generate_self_signed_certificate(
        "Unauthorized",
        not_before=NOW - timedelta(days=1),
        not_after=NOW + timedelta(days=365),
    )


@pytest.fixture(scope="session")
def signing_cert() -> Certificate:
    """Issuer signing certificate (RSA) with its private key."""
    return generate_self_signed_certificate(
        "OAuthDemo",
        not_before=NOW - timedelta(days=30),
        not_after=NOW + timedelta(days=365),
    )


@pytest.fixture
def secret_policy() -> TrustPolicy:
    """HMAC policy in relaxed mode (no pinned thumbprint)."""
    return TrustPolicy(signing_key=SigningKey.from_secret(SECRET))


@pytest.fixture
def pinned_policy(client_cert: Certificate) -> TrustPolicy:
    """HMAC policy pinned to the client certificate's thumbprint."""
    return TrustPolicy(
        signing_key=SigningKey.from_secret(SECRET),
        expected_thumbprint=client_cert.thumbprint.lower(),
    )


@pytest.fixture
def issuer_transport(pinned_policy: TrustPolicy) -> ASGITransport:
    """In-process transport into the issuer app with a fixed clock."""
    app = create_app(pinned_policy)
    app.dependency_overrides[get_clock] = lambda: fixed_clock()
    return ASGITransport(app=app)


@pytest.fixture
async def client(issuer_transport: ASGITransport) -> AsyncIterator[AsyncClient]:
    """httpx client against the issuer app."""
    async with AsyncClient(transport=issuer_transport, base_url="http://test") as ac:
        yield ac
