"""Bearer token authorization for protected resources."""

from datetime import UTC, datetime

import jwt

from certauth.core.logging import get_logger
from certauth.oauth.policy import TrustPolicy
from certauth.oauth.types import AuthenticatedIdentity, GuardVerdict

logger = get_logger("oauth.guard")

_REASONS: list[tuple[type[jwt.PyJWTError], str]] = [
    (jwt.ExpiredSignatureError, "token_expired"),
    (jwt.InvalidSignatureError, "invalid_signature"),
    (jwt.InvalidAlgorithmError, "invalid_signature"),
    (jwt.InvalidIssuerError, "invalid_issuer"),
    (jwt.InvalidAudienceError, "invalid_audience"),
]


def _reason_for(exc: Exception) -> str:
    for exc_type, reason in _REASONS:
        if isinstance(exc, exc_type):
            return reason
    return "invalid_token"


def authorize(token: str, policy: TrustPolicy, now: datetime) -> GuardVerdict:
    """Admit a token only if signature, issuer, audience, and expiry all check out."""
    try:
        claims = policy.jwt_manager().verify_token(token, now)
    except (jwt.PyJWTError, ValueError) as exc:
        reason = _reason_for(exc)
        logger.warning("Bearer token rejected", reason=reason)
        return GuardVerdict(accepted=False, reason=reason)

    identity = AuthenticatedIdentity(
        subject=claims.sub,
        thumbprint=claims.thumbprint,
        jti=claims.jti,
        expires_at=datetime.fromtimestamp(claims.exp, UTC),
    )
    return GuardVerdict(accepted=True, identity=identity)
