"""Certificate-for-token exchange endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request
from pydantic import ValidationError
from starlette.responses import JSONResponse

from certauth.api.deps import get_policy
from certauth.core.clock import Clock, get_clock
from certauth.core.logging import get_logger
from certauth.crypto.certificates import load_certificate_base64, load_certificate_pem
from certauth.crypto.types import Certificate, CertLoadError, CertLoadErrorKind
from certauth.oauth.policy import TrustPolicy
from certauth.oauth.token_service import issue_token
from certauth.oauth.types import RejectReason, TokenRequest, TokenResponse
from certauth.oauth.validator import validate_certificate

router = APIRouter()
logger = get_logger("oauth.routes_token")

HTTP_UNAUTHORIZED = 401
HTTP_INTERNAL_ERROR = 500

_ERROR_MESSAGES = {
    RejectReason.CERTIFICATE_REQUIRED: (
        "Client certificate required. Send certificate in request body "
        "as base64-encoded DER format."
    ),
    RejectReason.MALFORMED_ENCODING: "Invalid certificate format",
    RejectReason.NOT_YET_VALID: "Invalid client certificate",
    RejectReason.EXPIRED: "Invalid client certificate",
    RejectReason.THUMBPRINT_MISMATCH: "Invalid client certificate",
}


def _unauthorized(reason: RejectReason) -> JSONResponse:
    return JSONResponse(
        {"error": _ERROR_MESSAGES[reason], "reason": reason.value},
        status_code=HTTP_UNAUTHORIZED,
    )


def _transport_certificate(request: Request) -> Certificate | CertLoadError | None:
    """First client certificate from the ASGI TLS extension, if the server sets it."""
    tls = request.scope.get("extensions", {}).get("tls", {})
    chain = tls.get("client_cert_chain") or []
    if not chain:
        return None
    return load_certificate_pem(chain[0])


def _resolve_certificate(request: Request, body: Any) -> Certificate | CertLoadError | None:
    if body is not None:
        try:
            token_request = TokenRequest.model_validate(body)
        except ValidationError:
            return CertLoadError(
                kind=CertLoadErrorKind.MALFORMED_ENCODING,
                message="request body is not a certificate payload",
            )
        if token_request.certificate_base64:
            return load_certificate_base64(token_request.certificate_base64)
    return _transport_certificate(request)


@router.post("/Auth/token", response_model=None)
async def token_endpoint(
    request: Request,
    policy: Annotated[TrustPolicy, Depends(get_policy)],
    clock: Annotated[Clock, Depends(get_clock)],
    body: Annotated[Any, Body()] = None,
) -> TokenResponse | JSONResponse:
    """POST /Auth/token -- exchange a client certificate for a bearer token."""
    try:
        return _exchange(request, policy, clock, body)
    except Exception:
        logger.exception("Error generating token")
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=HTTP_INTERNAL_ERROR,
        )


def _exchange(
    request: Request,
    policy: TrustPolicy,
    clock: Clock,
    body: Any,
) -> TokenResponse | JSONResponse:
    cert = _resolve_certificate(request, body)
    if cert is None:
        logger.warning("Token request without client certificate")
        return _unauthorized(RejectReason.CERTIFICATE_REQUIRED)
    if isinstance(cert, CertLoadError):
        logger.warning("Failed to parse client certificate", kind=cert.kind)
        return _unauthorized(RejectReason.MALFORMED_ENCODING)

    now = clock()
    verdict = validate_certificate(cert, policy, now)
    if verdict.reason is not None:
        return _unauthorized(verdict.reason)

    logger.info(
        "Valid certificate presented",
        subject=cert.subject,
        thumbprint=cert.thumbprint,
    )
    token = issue_token(cert, policy, now)
    return TokenResponse(
        access_token=token.access_token,
        expires_in=token.expires_in,
        client_id=token.subject,
    )
