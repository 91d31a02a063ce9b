"""Self-signed certificate generation, PKCS#12 export, and JWK conversion."""

import base64
from datetime import UTC, datetime, timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from certauth.crypto.certificates import load_certificate_der
from certauth.crypto.types import Certificate, JWKEntry

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
DEFAULT_VALIDITY_DAYS = 365


def generate_self_signed_certificate(
    common_name: str,
    not_before: datetime | None = None,
    not_after: datetime | None = None,
    *,
    use_ec: bool = False,
) -> Certificate:
    """Create a self-signed client-auth certificate holding its private key."""
    now = datetime.now(UTC)
    not_before = not_before or now - timedelta(days=1)
    not_after = not_after or now + timedelta(days=DEFAULT_VALIDITY_DAYS)

    private_key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey
    if use_ec:
        private_key = ec.generate_private_key(ec.SECP256R1())
    else:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT,
            key_size=RSA_KEY_SIZE,
        )

    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=False)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=not use_ec,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=False,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=False,
        )
        .add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CLIENT_AUTH]),
            critical=False,
        )
        .sign(private_key, hashes.SHA256())
    )

    loaded = load_certificate_der(cert.public_bytes(serialization.Encoding.DER))
    assert isinstance(loaded, Certificate)
    return loaded.model_copy(update={"private_key": private_key})


def export_pkcs12(certificate: Certificate, password: str, friendly_name: str = "") -> bytes:
    """Serialize a certificate and its private key as a password-protected .pfx."""
    if certificate.private_key is None:
        raise ValueError("certificate has no private key to export")
    cert = x509.load_der_x509_certificate(certificate.raw_bytes)
    encryption: serialization.KeySerializationEncryption
    if password:
        encryption = serialization.BestAvailableEncryption(password.encode())
    else:
        encryption = serialization.NoEncryption()
    return pkcs12.serialize_key_and_certificates(
        name=friendly_name.encode() or None,
        key=certificate.private_key,
        cert=cert,
        cas=None,
        encryption_algorithm=encryption,
    )


def _int_to_base64url(value: int) -> str:
    """Encode an integer as base64url without padding."""
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def public_key_to_jwk_entry(public_key: object, kid: str) -> JWKEntry | None:
    """Convert an RSA public key to JWK format; other key types have no entry."""
    if not isinstance(public_key, RSAPublicKey):
        return None
    numbers = public_key.public_numbers()
    return JWKEntry(
        kid=kid,
        n=_int_to_base64url(numbers.n),
        e=_int_to_base64url(numbers.e),
    )
