"""FastAPI dependency injection for the trust policy and bearer authentication."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from certauth.core.clock import Clock, get_clock
from certauth.oauth.guard import authorize
from certauth.oauth.policy import TrustPolicy
from certauth.oauth.types import AuthenticatedIdentity

_security = HTTPBearer(auto_error=False)


def get_policy(request: Request) -> TrustPolicy:
    """Trust policy built once at application startup."""
    policy: TrustPolicy = request.app.state.trust_policy
    return policy


async def require_bearer_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_security)],
    policy: Annotated[TrustPolicy, Depends(get_policy)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AuthenticatedIdentity:
    """Verify the Bearer token against the issuer's policy."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing_token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    verdict = authorize(credentials.credentials, policy, clock())
    if not verdict.accepted or verdict.identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=verdict.reason or "invalid_token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return verdict.identity
