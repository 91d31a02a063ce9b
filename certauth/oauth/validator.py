"""Certificate validity-window and thumbprint pinning checks."""

from datetime import datetime

from certauth.core.logging import get_logger
from certauth.crypto.types import Certificate
from certauth.oauth.policy import TrustPolicy
from certauth.oauth.types import CertificateVerdict, RejectReason

logger = get_logger("oauth.validator")


def _reject(reason: RejectReason, cert: Certificate, **details: object) -> CertificateVerdict:
    logger.warning(
        "Certificate rejected",
        reason=reason,
        subject=cert.subject,
        thumbprint=cert.thumbprint,
        **details,
    )
    return CertificateVerdict(accepted=False, reason=reason)


def thumbprints_match(expected: str, actual: str) -> bool:
    """Case-insensitive thumbprint comparison."""
    return expected.casefold() == actual.casefold()


def validate_certificate(
    cert: Certificate, policy: TrustPolicy, now: datetime
) -> CertificateVerdict:
    """Check the validity window, then the pinned thumbprint if one is set.

    Without an expected thumbprint any time-valid certificate is accepted.
    No chain, CA, or revocation checks are made.
    """
    if now < cert.not_before:
        return _reject(RejectReason.NOT_YET_VALID, cert, not_before=cert.not_before)
    if now > cert.not_after:
        return _reject(RejectReason.EXPIRED, cert, not_after=cert.not_after)
    expected = policy.expected_thumbprint
    if expected is not None and not thumbprints_match(expected, cert.thumbprint):
        return _reject(RejectReason.THUMBPRINT_MISMATCH, cert, expected=expected)
    return CertificateVerdict(accepted=True)
