"""Client-side orchestration: token acquisition, resource calls, OAuth checks."""

from datetime import timedelta
from typing import Self

import httpx

from certauth.client.oauth_client import OAuthApiClient
from certauth.client.token_cache import TokenCache
from certauth.client.types import OAuthTestResult, ResourceResult, TestStep
from certauth.core.errors import AcquisitionError, ConfigError, ConfigErrorKind
from certauth.core.logging import get_logger
from certauth.core.settings import ClientSettings
from certauth.crypto.certificates import load_pkcs12_file
from certauth.crypto.types import Certificate, CertLoadError

HTTP_UNAUTHORIZED = 401
TOKEN_PREVIEW_LENGTH = 10

logger = get_logger("client.service")


def load_client_identity(path: str, password: str) -> Certificate:
    """Load the client's own certificate; raises ConfigError if unusable."""
    loaded = load_pkcs12_file(path, password)
    if isinstance(loaded, CertLoadError):
        raise ConfigError(
            ConfigErrorKind.CLIENT_CERTIFICATE_UNAVAILABLE,
            f"cannot load client certificate: {loaded.message}",
        )
    return loaded


def _preview(token: str) -> str:
    return token[:TOKEN_PREVIEW_LENGTH] + "..."


class OAuthService:
    """Acquires tokens through the cache and calls the issuer's resources."""

    def __init__(
        self,
        api_client: OAuthApiClient,
        cache: TokenCache,
        unauthorized_identity: Certificate | CertLoadError | None = None,
    ) -> None:
        self.api_client = api_client
        self.cache = cache
        self._unauthorized_identity = unauthorized_identity

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Wire client, cache, and identities from configuration."""
        api_client = OAuthApiClient(
            settings.api_base_url,
            timeout=settings.timeout_seconds,
            verify=settings.verify_tls,
            transport=transport,
        )
        identity = load_client_identity(
            settings.certificate_path, settings.certificate_password
        )
        unauthorized: Certificate | CertLoadError | None = None
        if settings.unauthorized_certificate_path:
            unauthorized = load_pkcs12_file(
                settings.unauthorized_certificate_path,
                settings.unauthorized_certificate_password,
            )
        cache = TokenCache(
            api_client.request_token,
            identity,
            safety_margin=timedelta(seconds=settings.safety_margin_seconds),
        )
        return cls(api_client, cache, unauthorized)

    async def get_access_token(self, override_identity: Certificate | None = None) -> str:
        """Token for the default identity (cached) or an override (never cached)."""
        return await self.cache.get_token(override_identity)

    async def call_public(self) -> ResourceResult:
        return await self.api_client.get_forecast(secured=False)

    async def call_secured(self) -> ResourceResult:
        """Acquire a token and call the secured forecast with it."""
        try:
            token = await self.get_access_token()
        except AcquisitionError as exc:
            logger.warning("Could not acquire access token", kind=exc.kind)
            return ResourceResult(
                status_code=HTTP_UNAUTHORIZED,
                details="Failed to acquire access token using certificate",
            )
        return await self.api_client.get_forecast(secured=True, access_token=token)

    async def prove_oauth_works(self) -> OAuthTestResult:
        """Show that an unauthorized certificate is refused and a trusted one works."""
        result = OAuthTestResult(
            test="Prove OAuth Works - Certificate Validation",
            description=(
                "An unauthorized certificate must be refused a token, the "
                "configured certificate must receive one, and that token must "
                "open the secured endpoint"
            ),
            steps=[
                TestStep(
                    step=1,
                    action="Attempt to get JWT token with UNAUTHORIZED certificate",
                    expected_result="Failure - token request should be denied",
                ),
                TestStep(
                    step=2,
                    action="Attempt to get JWT token with AUTHORIZED certificate",
                    expected_result="Success - token request should be granted",
                ),
                TestStep(
                    step=3,
                    action="Call secured endpoint with valid token",
                    expected_result="Success - endpoint should return data",
                ),
            ],
        )
        unauthorized_step, authorized_step, secured_step = result.steps

        await self._check_unauthorized(unauthorized_step)
        token = await self._check_authorized(authorized_step)
        await self._check_secured(secured_step, token)

        if all(s.success for s in result.steps):
            result.conclusion = (
                "OAUTH VALIDATION WORKS: unauthorized certificates are rejected, "
                "authorized certificates are accepted, and secured endpoints are protected."
            )
        else:
            result.conclusion = (
                "OAUTH VALIDATION HAS ISSUES - review the individual step results."
            )
        logger.info("OAuth validation check complete", conclusion=result.conclusion)
        return result

    async def _check_unauthorized(self, step: TestStep) -> None:
        identity = self._unauthorized_identity
        if not isinstance(identity, Certificate):
            step.actual_result = "SKIPPED - unauthorized certificate not available"
            logger.warning("Unauthorized certificate not available for the check")
            return
        try:
            await self.get_access_token(override_identity=identity)
        except AcquisitionError as exc:
            step.actual_result = f"SUCCESS - Unauthorized certificate was REJECTED ({exc})"
            step.success = True
            return
        step.actual_result = (
            "FAILURE - Unauthorized certificate was ACCEPTED (OAuth validation not working!)"
        )
        logger.error("Unauthorized certificate should have been rejected")

    async def _check_authorized(self, step: TestStep) -> str | None:
        try:
            token = await self.get_access_token()
        except AcquisitionError as exc:
            step.actual_result = f"FAILURE - Authorized certificate was REJECTED ({exc})"
            logger.error("Authorized certificate should have been accepted", kind=exc.kind)
            return None
        step.actual_result = (
            f"SUCCESS - Authorized certificate accepted, token received: {_preview(token)}"
        )
        step.success = True
        return token

    async def _check_secured(self, step: TestStep, token: str | None) -> None:
        if token is None:
            step.actual_result = "SKIPPED - No valid token available"
            return
        resource = await self.api_client.get_forecast(secured=True, access_token=token)
        if resource.ok:
            count = len(resource.data or [])
            step.actual_result = f"SUCCESS - Secured endpoint returned {count} items"
            step.success = True
            return
        step.actual_result = f"FAILURE - Secured endpoint returned {resource.status_code}"
        logger.error("Secured endpoint should have been accessible")
