"""Create a self-signed client certificate and write it as a .pfx file.

Usage: python -m certauth.tools.create_cert OUT.pfx --password PASS [--cn NAME]
"""

import argparse
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

from certauth.crypto.keys import export_pkcs12, generate_self_signed_certificate

DEFAULT_COMMON_NAME = "OAuthDemoClientCert"
DEFAULT_DAYS = 365


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("output", type=Path)
    parser.add_argument("--password", default="")
    parser.add_argument("--cn", default=DEFAULT_COMMON_NAME)
    parser.add_argument("--days", type=int, default=DEFAULT_DAYS)
    parser.add_argument("--ec", action="store_true", help="use a P-256 key instead of RSA")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    now = datetime.now(UTC)
    cert = generate_self_signed_certificate(
        args.cn,
        not_before=now - timedelta(days=1),
        not_after=now + timedelta(days=args.days),
        use_ec=args.ec,
    )
    args.output.write_bytes(export_pkcs12(cert, args.password, friendly_name=args.cn))

    print("Certificate created:")
    print(f"Subject: {cert.subject}")
    print(f"Thumbprint: {cert.thumbprint}")
    print(f"Valid from: {cert.not_before} to {cert.not_after}")
    print(f"Saved to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
