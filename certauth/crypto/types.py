"""Type definitions for certificates, JWKS, and JWT operations."""

import base64
from datetime import datetime
from enum import StrEnum
from typing import Self

from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from pydantic import BaseModel, ConfigDict, model_validator

SigningPrivateKey = RSAPrivateKey | EllipticCurvePrivateKey


class Certificate(BaseModel):
    """A parsed X.509 certificate, optionally holding its private key."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    subject: str
    thumbprint: str
    not_before: datetime
    not_after: datetime
    raw_bytes: bytes
    private_key: SigningPrivateKey | None = None

    @model_validator(mode="after")
    def _check_window(self) -> Self:
        if self.not_before > self.not_after:
            raise ValueError("not_before must not be later than not_after")
        return self

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    def to_base64(self) -> str:
        """Base64 of the DER encoding, as submitted to the token endpoint."""
        return base64.b64encode(self.raw_bytes).decode("ascii")


class CertLoadErrorKind(StrEnum):
    """Why a certificate could not be loaded."""

    MALFORMED_ENCODING = "malformed_encoding"
    FILE_NOT_FOUND = "file_not_found"
    BAD_PASSPHRASE = "bad_passphrase"


class CertLoadError(BaseModel):
    """Failed certificate load, returned in place of a Certificate."""

    model_config = ConfigDict(frozen=True)

    kind: CertLoadErrorKind
    message: str


class JWKEntry(BaseModel):
    """Single JWK entry in a JWKS response."""

    kty: str = "RSA"
    use: str = "sig"
    alg: str = "RS256"
    kid: str
    n: str
    e: str


class JWKSResponse(BaseModel):
    """JSON Web Key Set response."""

    keys: list[JWKEntry]


class TokenClaims(BaseModel):
    """Claims bundle for access token creation."""

    sub: str
    jti: str
    thumbprint: str
    ttl_minutes: int = 60


class DecodedToken(BaseModel):
    """Decoded and verified JWT token claims."""

    model_config = ConfigDict(extra="allow")

    sub: str = ""
    iss: str = ""
    aud: str = ""
    jti: str = ""
    thumbprint: str = ""
    name: str | None = None
    iat: int = 0
    exp: int = 0
