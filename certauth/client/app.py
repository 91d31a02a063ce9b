"""FastAPI application exposing the client-side OAuth demo checks."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Depends, FastAPI, Request
from starlette.responses import JSONResponse

from certauth.client.service import OAuthService
from certauth.client.types import OAuthTestResult, ResourceResult
from certauth.core.logging import setup_logging
from certauth.core.settings import ClientSettings

router = APIRouter(prefix="/Client", tags=["client"])


def get_service(request: Request) -> OAuthService:
    service: OAuthService = request.app.state.oauth_service
    return service


def _respond(source: str, resource: ResourceResult, **extra: Any) -> JSONResponse:
    if resource.ok:
        return JSONResponse({"source": source, **extra, "data": resource.data})
    return JSONResponse(
        {"error": f"Failed to call {source}", "details": resource.details},
        status_code=resource.status_code,
    )


@router.get("/test-public", response_model=None)
async def test_public(
    service: Annotated[OAuthService, Depends(get_service)],
) -> JSONResponse:
    """GET /Client/test-public -- call the issuer's public forecast."""
    return _respond("OAuthApi Public", await service.call_public())


@router.get("/test-secured", response_model=None)
async def test_secured(
    service: Annotated[OAuthService, Depends(get_service)],
) -> JSONResponse:
    """GET /Client/test-secured -- acquire a token and call the secured forecast."""
    return _respond("OAuthApi Secured", await service.call_secured())


@router.get("/prove-oauth-works")
async def prove_oauth_works(
    service: Annotated[OAuthService, Depends(get_service)],
) -> OAuthTestResult:
    """GET /Client/prove-oauth-works -- run the three-step validation check."""
    return await service.prove_oauth_works()


def create_client_app(service: OAuthService | None = None) -> FastAPI:
    """Build the client app; raises ConfigError if the client certificate is unusable."""
    setup_logging()
    oauth_service = service or OAuthService.from_settings(ClientSettings())

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield

    app = FastAPI(
        title="certauth demo client",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.oauth_service = oauth_service
    app.include_router(router)
    return app
