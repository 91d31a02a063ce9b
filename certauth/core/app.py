"""FastAPI application factory for the certificate token issuer."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from certauth.api.router_weather import router as weather_router
from certauth.core.logging import setup_logging
from certauth.core.settings import AuthSettings
from certauth.oauth.policy import TrustPolicy, build_trust_policy
from certauth.oauth.routes_jwks import router as jwks_router
from certauth.oauth.routes_token import router as token_router


def create_app(policy: TrustPolicy | None = None) -> FastAPI:
    """Build the issuer app; raises ConfigError if no usable signing key exists."""
    setup_logging()
    settings = AuthSettings()
    trust_policy = policy or build_trust_policy(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield

    app = FastAPI(
        title="certauth token issuer",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.trust_policy = trust_policy

    origins = settings.get_cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.include_router(token_router)
    app.include_router(jwks_router)
    app.include_router(weather_router)

    return app
