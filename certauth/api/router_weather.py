"""Weather forecast resources: one public, one behind bearer authentication."""

import random
from datetime import date, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends

from certauth.api.deps import require_bearer_identity
from certauth.api.schemas import WeatherForecast
from certauth.core.logging import get_logger
from certauth.oauth.types import AuthenticatedIdentity

router = APIRouter(prefix="/WeatherForecast", tags=["weather"])
logger = get_logger("api.weather")

SUMMARIES = [
    "Freezing",
    "Bracing",
    "Chilly",
    "Cool",
    "Mild",
    "Warm",
    "Balmy",
    "Hot",
    "Sweltering",
    "Scorching",
]
PUBLIC_DAYS = 5
SECURED_DAYS = 10


def _forecasts(days: int) -> list[WeatherForecast]:
    today = date.today()
    return [
        WeatherForecast(
            date=today + timedelta(days=offset),
            temperature_c=random.randint(-20, 54),
            summary=random.choice(SUMMARIES),
        )
        for offset in range(1, days + 1)
    ]


@router.get("/public")
async def public_forecast() -> list[WeatherForecast]:
    """GET /WeatherForecast/public -- no authentication required."""
    return _forecasts(PUBLIC_DAYS)


@router.get("/secured")
async def secured_forecast(
    identity: Annotated[AuthenticatedIdentity, Depends(require_bearer_identity)],
) -> list[WeatherForecast]:
    """GET /WeatherForecast/secured -- requires a valid bearer token."""
    logger.info("Secured forecast requested", subject=identity.subject)
    return _forecasts(SECURED_DAYS)
