"""Pull a caller's Petfinder credentials out of inbound request metadata."""

from __future__ import annotations

from typing import Mapping, Optional

from petfinder_mcp.config import PetfinderConfig, default_config
from petfinder_mcp.petfinder_api import PetfinderCredentials


def _lookup_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def extract_credentials(
    headers: Mapping[str, str],
    query_params: Optional[Mapping[str, str]] = None,
    *,
    config: PetfinderConfig = default_config,
) -> Optional[PetfinderCredentials]:
    """
    Return the caller's credentials, or None when either half is missing.

    Headers are matched case-insensitively and take precedence; the query
    parameters are consulted per field when the header is absent.
    """
    query_params = query_params or {}
    client_id = _clean(_lookup_header(headers, config.client_id_header)) or _clean(
        query_params.get(config.client_id_query_param)
    )
    client_secret = _clean(_lookup_header(headers, config.client_secret_header)) or _clean(
        query_params.get(config.client_secret_query_param)
    )
    if not client_id or not client_secret:
        return None
    return PetfinderCredentials(client_id=client_id, client_secret=client_secret)
