"""Tests for certificate validity and thumbprint pinning."""

from datetime import datetime, timedelta

from structlog.testing import capture_logs

from certauth.crypto.jwt_manager import SigningKey
from certauth.crypto.types import Certificate
from certauth.oauth.policy import TrustPolicy
from certauth.oauth.token_service import issue_token
from certauth.oauth.types import RejectReason
from certauth.oauth.validator import thumbprints_match, validate_certificate

SECRET = "validator-test-secret-0123456789abcdef"


def _fake_cert(
    thumbprint: str,
    not_before: datetime,
    not_after: datetime,
) -> Certificate:
    return Certificate(
        subject="CN=fake",
        thumbprint=thumbprint,
        not_before=not_before,
        not_after=not_after,
        raw_bytes=b"\x30\x00",
    )


def _policy(expected: str | None = None) -> TrustPolicy:
    return TrustPolicy(
        signing_key=SigningKey.from_secret(SECRET),
        expected_thumbprint=expected,
    )


class TestThumbprintsMatch:
    """Thumbprint comparison ignores case."""

    def test_case_insensitive(self) -> None:
        assert thumbprints_match("AA:BB", "aa:bb")

    def test_different_values(self) -> None:
        assert not thumbprints_match("AA:BB", "AA:BC")


class TestValidityWindow:
    """Tests for the not-before / not-after checks."""

    def test_expired(self, now: datetime) -> None:
        cert = _fake_cert("AA", now - timedelta(days=10), now - timedelta(days=1))
        verdict = validate_certificate(cert, _policy(), now)
        assert not verdict.accepted
        assert verdict.reason == RejectReason.EXPIRED

    def test_not_yet_valid(self, now: datetime) -> None:
        cert = _fake_cert("AA", now + timedelta(days=1), now + timedelta(days=10))
        verdict = validate_certificate(cert, _policy(), now)
        assert verdict.reason == RejectReason.NOT_YET_VALID

    def test_window_edges_are_inclusive(self, now: datetime) -> None:
        starts_now = _fake_cert("AA", now, now + timedelta(days=1))
        ends_now = _fake_cert("AA", now - timedelta(days=1), now)
        assert validate_certificate(starts_now, _policy(), now).accepted
        assert validate_certificate(ends_now, _policy(), now).accepted

    def test_expiry_checked_before_thumbprint(self, now: datetime) -> None:
        cert = _fake_cert("AA", now - timedelta(days=10), now - timedelta(days=1))
        verdict = validate_certificate(cert, _policy(expected="BB"), now)
        assert verdict.reason == RejectReason.EXPIRED

    def test_rejection_is_logged(self, now: datetime) -> None:
        cert = _fake_cert("AA", now - timedelta(days=10), now - timedelta(days=1))
        with capture_logs() as logs:
            validate_certificate(cert, _policy(), now)
        assert logs[0]["event"] == "Certificate rejected"
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["reason"] == RejectReason.EXPIRED


class TestThumbprintPinning:
    """Tests for the expected-thumbprint check."""

    def test_matching_thumbprint_differing_case(self, now: datetime) -> None:
        cert = _fake_cert("AA:BB", now - timedelta(days=1), now + timedelta(days=1))
        policy = _policy(expected="aa:bb")
        verdict = validate_certificate(cert, policy, now)
        assert verdict.accepted
        assert verdict.reason is None
        assert issue_token(cert, policy, now).expires_in == 3600

    def test_mismatch(
        self, client_cert: Certificate, other_cert: Certificate, now: datetime
    ) -> None:
        policy = _policy(expected=client_cert.thumbprint)
        verdict = validate_certificate(other_cert, policy, now)
        assert verdict.reason == RejectReason.THUMBPRINT_MISMATCH

    def test_relaxed_mode_accepts_any_valid_certificate(
        self, other_cert: Certificate, now: datetime
    ) -> None:
        assert validate_certificate(other_cert, _policy(), now).accepted

    def test_blank_expected_thumbprint_is_relaxed(
        self, other_cert: Certificate, now: datetime
    ) -> None:
        assert validate_certificate(other_cert, _policy(expected="  "), now).accepted
