"""JWKS endpoint publishing the signing certificate's public key."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from certauth.api.deps import get_policy
from certauth.crypto.keys import public_key_to_jwk_entry
from certauth.crypto.types import JWKSResponse
from certauth.oauth.policy import TrustPolicy

router = APIRouter()

JWKS_CACHE_CONTROL = "public, max-age=3600"


@router.get("/oauth/jwks")
async def jwks(
    response: Response,
    policy: Annotated[TrustPolicy, Depends(get_policy)],
) -> JWKSResponse:
    """JSON Web Key Set endpoint; empty for shared-secret deployments."""
    key = policy.signing_key
    entries = []
    if not key.is_symmetric and key.kid is not None:
        entry = public_key_to_jwk_entry(key.verification_material, key.kid)
        if entry is not None:
            entries.append(entry)
    response.headers["Cache-Control"] = JWKS_CACHE_CONTROL
    return JWKSResponse(keys=entries)
