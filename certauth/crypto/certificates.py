"""Load X.509 certificates from request payloads and PKCS#12 files."""

import base64
import binascii
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurvePrivateKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, pkcs12

from certauth.crypto.types import (
    Certificate,
    CertLoadError,
    CertLoadErrorKind,
    SigningPrivateKey,
)


def compute_thumbprint(cert: x509.Certificate) -> str:
    """Uppercase hex SHA-1 of the DER encoding."""
    return cert.fingerprint(hashes.SHA1()).hex().upper()


def _malformed(message: str) -> CertLoadError:
    return CertLoadError(kind=CertLoadErrorKind.MALFORMED_ENCODING, message=message)


def _to_certificate(
    cert: x509.Certificate, private_key: SigningPrivateKey | None = None
) -> Certificate:
    return Certificate(
        subject=cert.subject.rfc4514_string(),
        thumbprint=compute_thumbprint(cert),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        raw_bytes=cert.public_bytes(Encoding.DER),
        private_key=private_key,
    )


def load_certificate_der(raw: bytes) -> Certificate | CertLoadError:
    """Parse a DER-encoded certificate."""
    try:
        cert = x509.load_der_x509_certificate(raw)
        return _to_certificate(cert)
    except ValueError as exc:
        return _malformed(f"invalid DER certificate: {exc}")


def load_certificate_base64(data: str) -> Certificate | CertLoadError:
    """Parse a base64-encoded DER certificate from a request body.

    Whitespace and line breaks are ignored, so wrapped output of base64
    tools is accepted; any other non-alphabet character is malformed.
    """
    try:
        raw = base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError):
        return _malformed("certificate is not valid base64")
    if not raw:
        return _malformed("certificate payload is empty")
    return load_certificate_der(raw)


def load_certificate_pem(pem: str) -> Certificate | CertLoadError:
    """Parse a PEM certificate, as delivered by the ASGI TLS extension."""
    try:
        cert = x509.load_pem_x509_certificate(pem.encode())
        return _to_certificate(cert)
    except ValueError as exc:
        return _malformed(f"invalid PEM certificate: {exc}")


def load_pkcs12_file(path: str | Path, password: str = "") -> Certificate | CertLoadError:
    """Load a certificate and its private key from a .pfx file."""
    pfx_path = Path(path)
    if not pfx_path.is_file():
        return CertLoadError(
            kind=CertLoadErrorKind.FILE_NOT_FOUND,
            message=f"certificate file not found: {pfx_path}",
        )
    try:
        data = pfx_path.read_bytes()
    except OSError as exc:
        return CertLoadError(
            kind=CertLoadErrorKind.FILE_NOT_FOUND,
            message=f"certificate file unreadable: {exc}",
        )
    return load_pkcs12_bytes(data, password)


def load_pkcs12_bytes(data: bytes, password: str = "") -> Certificate | CertLoadError:
    """Unwrap PKCS#12 bytes; a wrong passphrase and a corrupt container look alike."""
    try:
        key, cert, _extra = pkcs12.load_key_and_certificates(
            data, password.encode() if password else None
        )
    except (ValueError, TypeError):
        if password:
            return CertLoadError(
                kind=CertLoadErrorKind.BAD_PASSPHRASE,
                message="could not unwrap PKCS#12 container with the given passphrase",
            )
        return _malformed("invalid PKCS#12 container")
    if cert is None:
        return _malformed("PKCS#12 container holds no certificate")
    signing_key = key if isinstance(key, RSAPrivateKey | EllipticCurvePrivateKey) else None
    return _to_certificate(cert, signing_key)
