"""
OAuth client-credentials token cache for the Petfinder API.

One bearer token is cached per Petfinder client id. Entries are replaced
wholesale on re-acquisition and swept lazily on every lookup; there is no lock
and no background timer. Two concurrent first-time lookups for the same client
id may both perform an exchange, and the last write wins.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import httpx

from petfinder_mcp.config import PetfinderConfig, default_config
from petfinder_mcp.metrics import MetricsRecorder, default_metrics
from petfinder_mcp.petfinder_api.errors import (
    CredentialsMissingError,
    PetfinderApiError,
    UpstreamAuthError,
    UpstreamUnreachableError,
    read_error_body,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PetfinderCredentials:
    """A caller's Petfinder client id and secret, scoped to one request."""

    client_id: str
    client_secret: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)


@dataclass(frozen=True, slots=True)
class CachedToken:
    access_token: str = field(repr=False)
    expires_at: int

    def is_usable(self, now: int, safety_margin: int) -> bool:
        return now < self.expires_at - safety_margin


def mask_client_id(client_id: Optional[str]) -> str:
    """Shorten a client id for log output."""
    if not client_id:
        return "<none>"
    if len(client_id) <= 6:
        return "***"
    return f"{client_id[:4]}***"


def _to_int(value: Any, *, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class TokenCache:
    """Process-wide mapping of client id to cached bearer token."""

    def __init__(
        self,
        config: PetfinderConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Callable[[], float]] = None,
        metrics: Optional[MetricsRecorder] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._clock = clock or time.time
        self._metrics = metrics or default_metrics
        self._tokens: Dict[str, CachedToken] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._tokens

    def peek(self, client_id: str) -> Optional[CachedToken]:
        """Return the cached entry for a client id without sweeping or fetching."""
        return self._tokens.get(client_id)

    def invalidate(self, client_id: str) -> None:
        self._tokens.pop(client_id, None)

    def clear(self) -> None:
        self._tokens.clear()

    def _now(self) -> int:
        return int(self._clock())

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url, timeout=self.config.timeout
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def sweep(self) -> int:
        """Evict every entry whose expiry has passed. Returns the eviction count."""
        now = self._now()
        expired = [client_id for client_id, token in self._tokens.items() if token.expires_at <= now]
        for client_id in expired:
            del self._tokens[client_id]
            logger.debug("evicted expired token client=%s", mask_client_id(client_id))
        if expired:
            self._metrics.record_token_evictions(len(expired))
            logger.info(
                "evicted %d expired tokens, %d still cached", len(expired), len(self._tokens)
            )
        return len(expired)

    async def get_token(self, credentials: Optional[PetfinderCredentials]) -> str:
        """
        Return a bearer token for the given credentials.

        A cached token is reused while it is valid beyond the safety margin;
        otherwise a client-credentials exchange is performed and its result
        replaces any previous entry for the same client id.

        Raises:
            CredentialsMissingError: client id or secret is empty.
            UpstreamAuthError: the token endpoint answered with a non-2xx status.
            UpstreamUnreachableError: the token endpoint could not be reached.
        """
        if credentials is None or not credentials.is_complete:
            raise CredentialsMissingError()

        self.sweep()

        now = self._now()
        cached = self._tokens.get(credentials.client_id)
        if cached is not None and cached.is_usable(now, self.config.token_safety_margin):
            self._metrics.record_token_lookup(hit=True)
            logger.debug("using cached token client=%s", mask_client_id(credentials.client_id))
            return cached.access_token

        self._metrics.record_token_lookup(hit=False)
        token = await self._acquire(credentials, now)
        self._tokens[credentials.client_id] = token
        logger.info(
            "obtained access token client=%s expires_in=%ds cached_tokens=%d",
            mask_client_id(credentials.client_id),
            token.expires_at - now,
            len(self._tokens),
            extra={"client": mask_client_id(credentials.client_id)},
        )
        return token.access_token

    async def _acquire(self, credentials: PetfinderCredentials, now: int) -> CachedToken:
        client = await self._get_client()
        try:
            response = await client.post(
                self.config.token_path,
                data={
                    "grant_type": "client_credentials",
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                },
            )
        except httpx.RequestError as exc:
            logger.warning("Petfinder token endpoint unreachable")
            raise UpstreamUnreachableError("Petfinder token endpoint unreachable") from exc

        if not response.is_success:
            logger.warning(
                "token request rejected client=%s status=%s",
                mask_client_id(credentials.client_id),
                response.status_code,
            )
            raise UpstreamAuthError(
                f"OAuth token request failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                status_text=response.reason_phrase,
                body=read_error_body(response),
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None
        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise PetfinderApiError(
                "Unexpected token response from Petfinder.", status_code=response.status_code
            )
        expires_in = _to_int(payload.get("expires_in"))
        return CachedToken(access_token=access_token, expires_at=now + expires_in)
