"""Exceptions for fatal configuration problems and client acquisition failures."""

from enum import StrEnum


class ConfigErrorKind(StrEnum):
    """Startup configuration failures."""

    MISSING_SIGNING_KEY = "missing_signing_key"
    CONFLICTING_SIGNING_KEYS = "conflicting_signing_keys"
    SIGNING_CERTIFICATE_UNAVAILABLE = "signing_certificate_unavailable"
    CLIENT_CERTIFICATE_UNAVAILABLE = "client_certificate_unavailable"


class ConfigError(Exception):
    """Configuration that prevents the process from starting."""

    def __init__(self, kind: ConfigErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class AcquisitionErrorKind(StrEnum):
    """Ways a token request to the issuer can fail."""

    NETWORK = "network"
    STATUS = "status"
    TIMEOUT = "timeout"


class AcquisitionError(Exception):
    """Token acquisition from the issuer failed."""

    def __init__(
        self,
        kind: AcquisitionErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)
