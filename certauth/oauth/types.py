"""Type definitions for certificate exchange and token validation."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class RejectReason(StrEnum):
    """Categorical reasons a certificate is refused a token."""

    CERTIFICATE_REQUIRED = "certificate_required"
    MALFORMED_ENCODING = "malformed_encoding"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"
    THUMBPRINT_MISMATCH = "thumbprint_mismatch"


class CertificateVerdict(BaseModel):
    """Outcome of certificate validation."""

    accepted: bool
    reason: RejectReason | None = None


class IssuedToken(BaseModel):
    """A signed bearer token and the claims it was built from."""

    access_token: str
    subject: str
    jti: str
    thumbprint: str
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        return int((self.expires_at - self.issued_at).total_seconds())


class AuthenticatedIdentity(BaseModel):
    """Caller identity recovered from a verified bearer token."""

    subject: str
    thumbprint: str
    jti: str
    expires_at: datetime


class GuardVerdict(BaseModel):
    """Outcome of bearer token authorization."""

    accepted: bool
    identity: AuthenticatedIdentity | None = None
    reason: str | None = None


class TokenRequest(BaseModel):
    """Body of POST /Auth/token."""

    model_config = ConfigDict(populate_by_name=True)

    certificate_base64: str | None = Field(default=None, alias="CertificateBase64")


class TokenResponse(BaseModel):
    """Token endpoint success response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    client_id: str
