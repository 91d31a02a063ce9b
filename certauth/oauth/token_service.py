"""Access token issuance for validated certificates."""

from datetime import datetime, timedelta

import uuid_utils

from certauth.core.logging import get_logger
from certauth.crypto.types import Certificate, TokenClaims
from certauth.oauth.policy import TrustPolicy
from certauth.oauth.types import IssuedToken

logger = get_logger("oauth.token_service")


def generate_jti() -> str:
    """Fresh token identifier; uniqueness is not tracked."""
    return str(uuid_utils.uuid7())


def issue_token(cert: Certificate, policy: TrustPolicy, now: datetime) -> IssuedToken:
    """Sign a bearer token for a certificate that already passed validation."""
    claims = TokenClaims(
        sub=cert.subject,
        jti=generate_jti(),
        thumbprint=cert.thumbprint,
        ttl_minutes=policy.expiration_minutes,
    )
    access_token = policy.jwt_manager().create_access_token(claims, now)
    issued_at = now.replace(microsecond=0)
    token = IssuedToken(
        access_token=access_token,
        subject=claims.sub,
        jti=claims.jti,
        thumbprint=claims.thumbprint,
        issuer=policy.issuer,
        audience=policy.audience,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(minutes=claims.ttl_minutes),
    )
    logger.info(
        "Token issued",
        subject=token.subject,
        thumbprint=token.thumbprint,
        algorithm=policy.signing_key.algorithm,
        expires_at=token.expires_at.isoformat(),
    )
    return token
