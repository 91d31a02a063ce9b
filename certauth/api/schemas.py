"""Pydantic schemas for the protected resource API."""

import datetime

from pydantic import BaseModel, ConfigDict, computed_field


def _to_camel(name: str) -> str:
    """Convert snake_case to camelCase for JSON serialization."""
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


class WeatherForecast(BaseModel):
    """One day of forecast data."""

    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )

    date: datetime.date
    temperature_c: int
    summary: str | None = None

    @computed_field
    @property
    def temperature_f(self) -> int:
        return 32 + int(self.temperature_c / 0.5556)
