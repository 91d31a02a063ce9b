"""Issuer trust policy and its construction from settings."""

from pydantic import BaseModel, ConfigDict, field_validator

from certauth.core.errors import ConfigError, ConfigErrorKind
from certauth.core.logging import get_logger
from certauth.core.settings import (
    AUDIENCE_DEFAULT,
    EXPIRATION_MINUTES_DEFAULT,
    EXPIRATION_MINUTES_MAX,
    ISSUER_DEFAULT,
    AuthSettings,
)
from certauth.crypto.certificates import load_pkcs12_file
from certauth.crypto.jwt_manager import JWTManager, SigningKey
from certauth.crypto.types import CertLoadError

logger = get_logger("oauth.policy")


def parse_expiration_minutes(raw: object) -> int:
    """Return ``raw`` as a lifetime of at most one year, or the default with a warning."""
    try:
        minutes = int(str(raw).strip())
    except ValueError:
        minutes = 0
    if not 0 < minutes <= EXPIRATION_MINUTES_MAX:
        logger.warning(
            "Invalid expiration minutes, using default",
            configured=raw,
            default=EXPIRATION_MINUTES_DEFAULT,
        )
        return EXPIRATION_MINUTES_DEFAULT
    return minutes


class TrustPolicy(BaseModel):
    """What certificates are trusted and how issued tokens are signed."""

    model_config = ConfigDict(frozen=True)

    signing_key: SigningKey
    expected_thumbprint: str | None = None
    issuer: str = ISSUER_DEFAULT
    audience: str = AUDIENCE_DEFAULT
    expiration_minutes: int = EXPIRATION_MINUTES_DEFAULT

    @field_validator("expiration_minutes", mode="before")
    @classmethod
    def _degrade_expiration(cls, value: object) -> int:
        return parse_expiration_minutes(value)

    @field_validator("expected_thumbprint", mode="before")
    @classmethod
    def _blank_thumbprint_is_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    def jwt_manager(self) -> JWTManager:
        """JWT manager bound to this policy's key, issuer, and audience."""
        return JWTManager(self.signing_key, issuer=self.issuer, audience=self.audience)


def _load_signing_key(settings: AuthSettings) -> SigningKey:
    if settings.signing_secret and settings.signing_cert_path:
        raise ConfigError(
            ConfigErrorKind.CONFLICTING_SIGNING_KEYS,
            "configure either a signing secret or a signing certificate, not both",
        )
    if settings.signing_secret:
        return SigningKey.from_secret(settings.signing_secret)
    if settings.signing_cert_path:
        loaded = load_pkcs12_file(
            settings.signing_cert_path, settings.signing_cert_password
        )
        if isinstance(loaded, CertLoadError):
            logger.error(
                "Failed to load signing certificate",
                path=settings.signing_cert_path,
                kind=loaded.kind,
            )
            raise ConfigError(
                ConfigErrorKind.SIGNING_CERTIFICATE_UNAVAILABLE,
                f"cannot load signing certificate: {loaded.message}",
            )
        logger.info(
            "Signing certificate loaded",
            path=settings.signing_cert_path,
            subject=loaded.subject,
        )
        return SigningKey.from_certificate(loaded)
    raise ConfigError(
        ConfigErrorKind.MISSING_SIGNING_KEY,
        "no signing secret or signing certificate configured",
    )


def build_trust_policy(settings: AuthSettings) -> TrustPolicy:
    """Build the issuer policy at startup; raises ConfigError on fatal problems."""
    policy = TrustPolicy(
        signing_key=_load_signing_key(settings),
        expected_thumbprint=settings.expected_thumbprint,
        issuer=settings.issuer or ISSUER_DEFAULT,
        audience=settings.audience or AUDIENCE_DEFAULT,
        expiration_minutes=settings.expiration_minutes,
    )
    if policy.expected_thumbprint is None:
        logger.warning(
            "No expected thumbprint configured; accepting any time-valid certificate"
        )
    return policy
