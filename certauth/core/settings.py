"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

EXPIRATION_MINUTES_DEFAULT = 60
EXPIRATION_MINUTES_MAX = 60 * 24 * 365
ISSUER_DEFAULT = "OAuthApi"
AUDIENCE_DEFAULT = "OAuthClient"
CLIENT_TIMEOUT_DEFAULT = 10.0
SAFETY_MARGIN_SECONDS_DEFAULT = 30


class LoggingSettings(BaseSettings):
    """Log level and renderer selection."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    format: str = "console"


class AuthSettings(BaseSettings):
    """Token issuer settings: signing material, trust pinning, claims."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    signing_secret: str = ""
    signing_cert_path: str = ""
    signing_cert_password: str = ""
    expected_thumbprint: str = ""
    issuer: str = ISSUER_DEFAULT
    audience: str = AUDIENCE_DEFAULT
    # Kept as text so a malformed value degrades to the default at policy build.
    expiration_minutes: str = str(EXPIRATION_MINUTES_DEFAULT)
    cors_origins: str = ""

    def get_cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class ClientSettings(BaseSettings):
    """Settings for the certificate-authenticating API client."""

    model_config = SettingsConfigDict(env_prefix="CLIENT_")

    api_base_url: str = "https://localhost:5001"
    certificate_path: str = ""
    certificate_password: str = ""
    unauthorized_certificate_path: str = ""
    unauthorized_certificate_password: str = ""
    timeout_seconds: float = CLIENT_TIMEOUT_DEFAULT
    safety_margin_seconds: int = SAFETY_MARGIN_SECONDS_DEFAULT
    verify_tls: bool = False
