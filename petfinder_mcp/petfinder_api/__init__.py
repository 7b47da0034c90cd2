"""HTTP client wrappers and token cache for the Petfinder API."""

from .auth import CachedToken, PetfinderCredentials, TokenCache, mask_client_id
from .client import PetfinderApiClient, build_query_params, default_client
from .errors import (
    CredentialsMissingError,
    PetfinderApiError,
    UpstreamAPIError,
    UpstreamAuthError,
    UpstreamUnreachableError,
)

__all__ = [
    "PetfinderApiClient",
    "PetfinderCredentials",
    "CachedToken",
    "TokenCache",
    "PetfinderApiError",
    "UpstreamAuthError",
    "UpstreamAPIError",
    "UpstreamUnreachableError",
    "CredentialsMissingError",
    "build_query_params",
    "mask_client_id",
    "default_client",
]
