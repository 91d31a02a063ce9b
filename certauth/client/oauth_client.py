"""HTTP client for the token issuer and its forecast resources."""

import httpx

from certauth.client.types import AcquiredToken, ResourceResult
from certauth.core.errors import AcquisitionError, AcquisitionErrorKind
from certauth.core.logging import get_logger
from certauth.crypto.types import Certificate

TOKEN_PATH = "/Auth/token"
PUBLIC_FORECAST_PATH = "/WeatherForecast/public"
SECURED_FORECAST_PATH = "/WeatherForecast/secured"
HTTP_BAD_GATEWAY = 502


class OAuthApiClient:
    """Submits certificates for tokens and calls forecast endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        verify: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._verify = verify
        self._transport = transport
        self.logger = get_logger("client.oauth_client")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            verify=self._verify,
            transport=self._transport,
        )

    async def request_token(self, certificate: Certificate) -> AcquiredToken:
        """POST the certificate to the token endpoint; raises AcquisitionError."""
        try:
            async with self._client() as client:
                response = await client.post(
                    TOKEN_PATH,
                    json={"CertificateBase64": certificate.to_base64()},
                )
        except httpx.TimeoutException as exc:
            self.logger.error("Token request timed out", timeout=self._timeout)
            raise AcquisitionError(
                AcquisitionErrorKind.TIMEOUT, "token request timed out"
            ) from exc
        except httpx.HTTPError as exc:
            self.logger.error("Token request failed", error=str(exc))
            raise AcquisitionError(
                AcquisitionErrorKind.NETWORK, f"token request failed: {exc}"
            ) from exc

        if not response.is_success:
            self.logger.error(
                "Failed to acquire token",
                status_code=response.status_code,
                body=response.text,
            )
            raise AcquisitionError(
                AcquisitionErrorKind.STATUS,
                f"token endpoint returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            token = AcquiredToken.model_validate(response.json())
        except ValueError as exc:
            raise AcquisitionError(
                AcquisitionErrorKind.STATUS,
                "token endpoint returned an unreadable body",
                status_code=response.status_code,
            ) from exc
        self.logger.info("Acquired access token", expires_in=token.expires_in)
        return token

    async def get_forecast(
        self, secured: bool, access_token: str | None = None
    ) -> ResourceResult:
        """GET a forecast resource, with a bearer token when one is given."""
        path = SECURED_FORECAST_PATH if secured else PUBLIC_FORECAST_PATH
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        try:
            async with self._client() as client:
                response = await client.get(path, headers=headers)
        except httpx.HTTPError as exc:
            self.logger.error("Forecast request failed", path=path, error=str(exc))
            return ResourceResult(
                status_code=HTTP_BAD_GATEWAY, details="Forecast service unavailable"
            )
        if not response.is_success:
            return ResourceResult(status_code=response.status_code, details=response.text)
        try:
            return ResourceResult(status_code=response.status_code, data=response.json())
        except ValueError:
            self.logger.error(
                "Forecast response unreadable",
                path=path,
                status_code=response.status_code,
            )
            return ResourceResult(
                status_code=HTTP_BAD_GATEWAY,
                details="Forecast service returned an unreadable body",
            )
