"""JWT creation and verification over an HMAC secret or a certificate key."""

from datetime import datetime, timedelta
from typing import Self

import jwt
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from jwt.types import Options
from pydantic import BaseModel, ConfigDict

from certauth.core.errors import ConfigError, ConfigErrorKind
from certauth.crypto.types import (
    Certificate,
    DecodedToken,
    SigningPrivateKey,
    TokenClaims,
)

HMAC_ALGORITHM = "HS256"
RSA_ALGORITHM = "RS256"
EC_ALGORITHMS = {256: "ES256", 384: "ES384", 521: "ES512"}
REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub", "jti"]

SigningPublicKey = RSAPublicKey | EllipticCurvePublicKey


class SigningKey(BaseModel):
    """One signing mechanism: a shared secret or a certificate private key."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    algorithm: str
    signing_material: str | SigningPrivateKey
    verification_material: str | SigningPublicKey
    kid: str | None = None

    @property
    def is_symmetric(self) -> bool:
        return self.algorithm == HMAC_ALGORITHM

    @classmethod
    def from_secret(cls, secret: str) -> Self:
        """HS256 key over a shared secret string."""
        if not secret:
            raise ConfigError(
                ConfigErrorKind.MISSING_SIGNING_KEY, "signing secret is empty"
            )
        return cls(
            algorithm=HMAC_ALGORITHM,
            signing_material=secret,
            verification_material=secret,
        )

    @classmethod
    def from_certificate(cls, certificate: Certificate) -> Self:
        """Asymmetric key from a certificate that carries its private key."""
        private_key = certificate.private_key
        if private_key is None:
            raise ConfigError(
                ConfigErrorKind.MISSING_SIGNING_KEY,
                f"signing certificate {certificate.subject} has no private key",
            )
        if isinstance(private_key, RSAPrivateKey):
            algorithm = RSA_ALGORITHM
        else:
            algorithm = EC_ALGORITHMS.get(private_key.curve.key_size, "ES256")
        return cls(
            algorithm=algorithm,
            signing_material=private_key,
            verification_material=private_key.public_key(),
            kid=certificate.thumbprint,
        )


class JWTManager:
    """Creates and verifies access tokens with a single signing key."""

    def __init__(self, signing_key: SigningKey, issuer: str, audience: str) -> None:
        self._key = signing_key
        self._issuer = issuer
        self._audience = audience

    def create_access_token(self, claims: TokenClaims, now: datetime) -> str:
        """Create a signed access token issued at ``now`` (whole seconds)."""
        issued_at = now.replace(microsecond=0)
        payload = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": claims.sub,
            "name": claims.sub,
            "jti": claims.jti,
            "thumbprint": claims.thumbprint,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=claims.ttl_minutes),
        }
        headers = {"kid": self._key.kid} if self._key.kid else None
        return jwt.encode(
            payload,
            self._key.signing_material,
            algorithm=self._key.algorithm,
            headers=headers,
        )

    def verify_token(self, token: str, now: datetime) -> DecodedToken:
        """Verify signature, issuer, audience, and expiry as of ``now``."""
        opts: Options = {
            "verify_exp": False,
            "verify_iat": False,
            "verify_nbf": False,
            "require": REQUIRED_CLAIMS,
        }
        raw = jwt.decode(
            token,
            self._key.verification_material,
            algorithms=[self._key.algorithm],
            issuer=self._issuer,
            audience=self._audience,
            options=opts,
        )
        if now.timestamp() >= raw["exp"]:
            raise jwt.ExpiredSignatureError("Signature has expired")
        return DecodedToken.model_validate(raw)
