"""Type definitions for the token-acquiring client."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class AcquiredToken(BaseModel):
    """Token endpoint response as seen by the client."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    client_id: str | None = None


class CachedToken(BaseModel):
    """The single cached token and the moment it expires."""

    access_token: str
    expires_at: datetime


class ResourceResult(BaseModel):
    """Outcome of a call to a forecast resource."""

    status_code: int
    data: list[dict[str, Any]] | None = None
    details: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class TestStep(BaseModel):
    """A single step of the OAuth validation check."""

    __test__ = False

    step: int
    action: str
    expected_result: str
    actual_result: str = ""
    success: bool = False


class OAuthTestResult(BaseModel):
    """Overall result of the OAuth validation check."""

    __test__ = False

    test: str
    description: str
    steps: list[TestStep] = Field(default_factory=list)
    conclusion: str = ""
