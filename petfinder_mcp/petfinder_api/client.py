"""
Thin HTTP client for the Petfinder v2 API.

Every call takes the caller's credentials explicitly, obtains a bearer token
from the token cache and issues an authenticated GET. Non-2xx responses become
``UpstreamAPIError`` with the upstream status, reason phrase and body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from petfinder_mcp.config import PetfinderConfig, default_config
from petfinder_mcp.petfinder_api.auth import PetfinderCredentials, TokenCache
from petfinder_mcp.petfinder_api.errors import (
    PetfinderApiError,
    UpstreamAPIError,
    UpstreamUnreachableError,
    read_error_body,
)

logger = logging.getLogger(__name__)


def _format_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_params(params: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    """
    Flatten a parameter mapping into query pairs.

    List values become repeated keys and ``None`` values are omitted, so
    ``{"age": ["baby", "young"], "name": None}`` yields
    ``[("age", "baby"), ("age", "young")]``.
    """
    pairs: List[Tuple[str, str]] = []
    if not params:
        return pairs
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _format_query_value(item)) for item in value if item is not None)
        else:
            pairs.append((key, _format_query_value(value)))
    return pairs


class PetfinderApiClient:
    """Async client for the read-only Petfinder API surface."""

    def __init__(
        self,
        config: PetfinderConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[TokenCache] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self.token_cache = token_cache or TokenCache(self.config, async_client=async_client)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url, timeout=self.config.timeout
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        await self.token_cache.aclose()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def call(
        self,
        endpoint: str,
        credentials: PetfinderCredentials,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Perform an authenticated GET against ``endpoint`` and return parsed JSON.

        Raises:
            CredentialsMissingError / UpstreamAuthError: from the token cache.
            UpstreamAPIError: Petfinder answered with a non-2xx status.
            UpstreamUnreachableError: Petfinder could not be reached.
        """
        token = await self.token_cache.get_token(credentials)
        client = await self._get_client()
        query = build_query_params(params)
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            response = await client.get(endpoint, params=query or None, headers=headers)
        except httpx.RequestError as exc:
            logger.warning("Petfinder unreachable for path %s", endpoint)
            raise UpstreamUnreachableError("Petfinder API unreachable") from exc
        return self._process_response(endpoint, response)

    def _process_response(self, endpoint: str, response: httpx.Response) -> Any:
        if not response.is_success:
            logger.warning("Petfinder error path=%s status=%s", endpoint, response.status_code)
            raise UpstreamAPIError(
                f"Petfinder API error ({response.status_code}): {response.text}",
                status_code=response.status_code,
                status_text=response.reason_phrase,
                body=read_error_body(response),
            )
        try:
            return response.json()
        except ValueError as exc:
            raise PetfinderApiError(
                "Unexpected response from Petfinder.", status_code=response.status_code
            ) from exc

    async def fetch_animals(
        self, credentials: PetfinderCredentials, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Search animals matching the given filters."""
        return await self.call("/animals", credentials, params)

    async def fetch_animal(self, credentials: PetfinderCredentials, animal_id: int) -> Dict[str, Any]:
        """Retrieve a single animal by id."""
        return await self.call(f"/animals/{animal_id}", credentials)

    async def fetch_organizations(
        self, credentials: PetfinderCredentials, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Search animal welfare organizations."""
        return await self.call("/organizations", credentials, params)

    async def fetch_organization(
        self, credentials: PetfinderCredentials, organization_id: str
    ) -> Dict[str, Any]:
        """Retrieve a single organization by id."""
        encoded = quote(organization_id, safe="")
        return await self.call(f"/organizations/{encoded}", credentials)

    async def fetch_types(self, credentials: PetfinderCredentials) -> Dict[str, Any]:
        """List all animal types."""
        return await self.call("/types", credentials)

    async def fetch_type(self, credentials: PetfinderCredentials, animal_type: str) -> Dict[str, Any]:
        """Retrieve details for one animal type."""
        encoded = quote(animal_type, safe="")
        return await self.call(f"/types/{encoded}", credentials)

    async def fetch_breeds(self, credentials: PetfinderCredentials, animal_type: str) -> Dict[str, Any]:
        """List breeds for one animal type."""
        encoded = quote(animal_type, safe="")
        return await self.call(f"/types/{encoded}/breeds", credentials)


default_client = PetfinderApiClient()
