"""
Configuration helpers for the Petfinder MCP server.

This module centralizes the upstream base URL, HTTP timeout, token cache safety
margin, credential transport names and logging settings. No credentials live
here; every caller supplies its own Petfinder client id and secret per request.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# Default connection settings
DEFAULT_BASE_URL = os.getenv("PETFINDER_BASE_URL", "https://api.petfinder.com/v2")
TOKEN_PATH = "/oauth2/token"


def _load_float(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value:
        try:
            return float(raw_value)
        except ValueError:
            return default
    return default


def _load_timeout() -> float:
    return _load_float("PETFINDER_HTTP_TIMEOUT", 10.0)


# Tokens are treated as expired this many seconds early to absorb clock skew.
MIN_TOKEN_SAFETY_MARGIN = 60


def _load_safety_margin() -> int:
    margin = int(_load_float("PETFINDER_TOKEN_SAFETY_MARGIN", MIN_TOKEN_SAFETY_MARGIN))
    return max(margin, MIN_TOKEN_SAFETY_MARGIN)


def _load_port() -> int:
    raw_port = os.getenv("PORT")
    if raw_port:
        try:
            return int(raw_port)
        except ValueError:
            return 3000
    return 3000


DEFAULT_TIMEOUT = _load_timeout()
DEFAULT_TOKEN_SAFETY_MARGIN = _load_safety_margin()

# Credential transport (header match is case-insensitive)
CLIENT_ID_HEADER = "x-petfinder-client-id"
CLIENT_SECRET_HEADER = "x-petfinder-client-secret"
CLIENT_ID_QUERY_PARAM = "petfinder_client_id"
CLIENT_SECRET_QUERY_PARAM = "petfinder_client_secret"

# Pagination bounds accepted by the Petfinder search endpoints
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

# MCP surface
SERVER_NAME = "petfinder-mcp"
SERVER_VERSION = "1.0.0"
PROTOCOL_VERSION = "2024-11-05"

LOG_LEVEL = os.getenv("PETFINDER_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("PETFINDER_MCP_LOG_FORMAT", "json")  # json or plain
HOST = os.getenv("PETFINDER_MCP_HOST", "0.0.0.0")
PORT = _load_port()


@dataclass(slots=True)
class PetfinderConfig:
    """Runtime configuration for Petfinder API access and the MCP listener."""

    base_url: str = DEFAULT_BASE_URL
    token_path: str = TOKEN_PATH
    timeout: float = DEFAULT_TIMEOUT
    token_safety_margin: int = DEFAULT_TOKEN_SAFETY_MARGIN
    client_id_header: str = CLIENT_ID_HEADER
    client_secret_header: str = CLIENT_SECRET_HEADER
    client_id_query_param: str = CLIENT_ID_QUERY_PARAM
    client_secret_query_param: str = CLIENT_SECRET_QUERY_PARAM
    default_page_limit: int = DEFAULT_PAGE_LIMIT
    max_page_limit: int = MAX_PAGE_LIMIT
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    protocol_version: str = PROTOCOL_VERSION
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    host: str = HOST
    port: int = PORT


default_config = PetfinderConfig()
