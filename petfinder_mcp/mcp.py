"""
Tool registry and dispatcher for the MCP JSON-RPC surface.

Tools are keyed by the ``ToolName`` enum in a read-only mapping. Each
``ToolDefinition`` validates its own arguments from a declarative field list
and invokes a handler with the caller's credentials passed explicitly; nothing
here holds per-request state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from petfinder_mcp.config import default_config
from petfinder_mcp.petfinder_api import (
    CredentialsMissingError,
    PetfinderApiClient,
    PetfinderApiError,
    PetfinderCredentials,
    default_client,
)
from petfinder_mcp.tools import (
    get_organization,
    get_pet,
    get_type,
    list_breeds,
    list_types,
    search_organizations,
    search_pets,
)
from petfinder_mcp.tools.validators import (
    ARRAY,
    INTEGER,
    STRING,
    FieldSpec,
    ValidationError,
    apply_defaults,
    input_schema,
    validate_arguments,
)

logger = logging.getLogger(__name__)

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
UNAUTHORIZED = -32001
FORBIDDEN = -32002
NOT_FOUND = -32003
RATE_LIMITED = -32004

_STATUS_CODES: Dict[int, int] = {
    400: INVALID_PARAMS,
    401: UNAUTHORIZED,
    403: FORBIDDEN,
    404: NOT_FOUND,
    429: RATE_LIMITED,
}

_STATUS_MESSAGES: Dict[int, str] = {
    400: "Invalid request parameters",
    401: "Authentication failed - invalid credentials",
    403: "Access denied - insufficient permissions",
    404: "Resource not found",
    429: "Rate limit exceeded",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service unavailable",
    504: "Gateway timeout",
}

# RFC 7807 problem-detail members surfaced from upstream error bodies.
PROBLEM_DETAIL_FIELDS = ("type", "status", "title", "detail", "invalid-params")


class ToolName(str, Enum):
    PETS_SEARCH = "pets.search"
    PETS_GET = "pets.get"
    ORGANIZATIONS_SEARCH = "organizations.search"
    ORGANIZATIONS_GET = "organizations.get"
    TYPES_LIST = "types.list"
    TYPES_GET = "types.get"
    BREEDS_LIST = "breeds.list"


class ToolNotFoundError(Exception):
    """Raised when a tool name is not in the registry."""

    def __init__(self, tool_name: Any) -> None:
        super().__init__(f"Tool {tool_name} not found")
        self.tool_name = tool_name


ToolHandler = Callable[..., Awaitable[Dict[str, Any]]]


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: ToolName
    title: str
    description: str
    fields: Tuple[FieldSpec, ...]
    handler: ToolHandler

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "title": self.title,
            "description": self.description,
            "inputSchema": input_schema(self.fields),
        }

    def validate(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply schema defaults, then validate. Raises ValidationError."""
        return validate_arguments(self.fields, apply_defaults(self.fields, raw))

    async def invoke(
        self,
        arguments: Dict[str, Any],
        credentials: PetfinderCredentials,
        *,
        client: PetfinderApiClient,
    ) -> Dict[str, Any]:
        return await self.handler(arguments, credentials, client=client)


def _page_fields() -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec("page", INTEGER, description="Page of results to return", minimum=1, default=1),
        FieldSpec(
            "limit",
            INTEGER,
            description="Maximum results per page",
            minimum=1,
            maximum=default_config.max_page_limit,
            default=default_config.default_page_limit,
        ),
    )


ANIMAL_TYPES = ("dog", "cat", "small-furry", "bird", "scales-fins-other", "barnyard", "rabbit", "horse")

PETS_SEARCH_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("type", STRING, description="Animal type", enum=ANIMAL_TYPES),
    FieldSpec("breed", ARRAY, description="Breed names"),
    FieldSpec("size", ARRAY, description="Sizes", enum=("small", "medium", "large", "extra-large")),
    FieldSpec("gender", ARRAY, description="Genders", enum=("male", "female", "unknown")),
    FieldSpec("age", ARRAY, description="Ages", enum=("baby", "young", "adult", "senior")),
    FieldSpec("color", ARRAY, description="Colors"),
    FieldSpec(
        "coat",
        ARRAY,
        description="Coat lengths",
        enum=("short", "medium", "long", "wire", "hairless", "curly"),
    ),
    FieldSpec(
        "status",
        STRING,
        description="Adoption status",
        enum=("adoptable", "adopted", "found"),
        default="adoptable",
    ),
    FieldSpec("name", STRING, description="Animal name (partial match)"),
    FieldSpec("organization", ARRAY, description="Organization ids"),
    FieldSpec("location", STRING, description="City, state; latitude,longitude; or postal code"),
    FieldSpec("distance", INTEGER, description="Distance in miles from location", minimum=1),
    FieldSpec(
        "sort",
        STRING,
        description="Sort order",
        enum=("recent", "-recent", "distance", "-distance", "random"),
        default="recent",
    ),
    *_page_fields(),
)

PETS_GET_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("id", INTEGER, required=True, description="Petfinder animal id", minimum=1),
)

ORGANIZATIONS_SEARCH_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("name", STRING, description="Organization name (partial match)"),
    FieldSpec("location", STRING, description="City, state; latitude,longitude; or postal code"),
    FieldSpec("distance", INTEGER, description="Distance in miles from location", minimum=1),
    FieldSpec("country", STRING, description="Two-letter country code"),
    FieldSpec("state", STRING, description="Two-letter state or province code"),
    FieldSpec("query", STRING, description="Free text search over name, city and state"),
    FieldSpec(
        "sort",
        STRING,
        description="Sort order",
        enum=("distance", "-distance", "name", "-name", "country", "-country", "state", "-state"),
    ),
    *_page_fields(),
)

ORGANIZATIONS_GET_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("id", STRING, required=True, description="Petfinder organization id"),
)

TYPE_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("type", STRING, required=True, description="Animal type name, e.g. dog"),
)


TOOL_REGISTRY: Mapping[ToolName, ToolDefinition] = MappingProxyType(
    {
        ToolName.PETS_SEARCH: ToolDefinition(
            name=ToolName.PETS_SEARCH,
            title="Search for adoptable pets",
            description=(
                "Search for adoptable pets by type, breed, size, location, and other criteria. "
                'Optional parameters: status (default: "adoptable"), sort (default: "recent"), '
                "page (default: 1), limit (default: 20)."
            ),
            fields=PETS_SEARCH_FIELDS,
            handler=search_pets,
        ),
        ToolName.PETS_GET: ToolDefinition(
            name=ToolName.PETS_GET,
            title="Get pet details",
            description="Get detailed information about a specific pet by ID.",
            fields=PETS_GET_FIELDS,
            handler=get_pet,
        ),
        ToolName.ORGANIZATIONS_SEARCH: ToolDefinition(
            name=ToolName.ORGANIZATIONS_SEARCH,
            title="Search for animal welfare organizations",
            description=(
                "Search for animal welfare organizations by name, location, and other criteria. "
                "Optional parameters: sort, page (default: 1), limit (default: 20)."
            ),
            fields=ORGANIZATIONS_SEARCH_FIELDS,
            handler=search_organizations,
        ),
        ToolName.ORGANIZATIONS_GET: ToolDefinition(
            name=ToolName.ORGANIZATIONS_GET,
            title="Get organization details",
            description="Get detailed information about a specific organization by ID.",
            fields=ORGANIZATIONS_GET_FIELDS,
            handler=get_organization,
        ),
        ToolName.TYPES_LIST: ToolDefinition(
            name=ToolName.TYPES_LIST,
            title="List animal types",
            description="Get a list of all available animal types.",
            fields=(),
            handler=list_types,
        ),
        ToolName.TYPES_GET: ToolDefinition(
            name=ToolName.TYPES_GET,
            title="Get animal type details",
            description="Get detailed information about a specific animal type.",
            fields=TYPE_FIELDS,
            handler=get_type,
        ),
        ToolName.BREEDS_LIST: ToolDefinition(
            name=ToolName.BREEDS_LIST,
            title="List animal breeds",
            description="Get a list of breeds for a specific animal type.",
            fields=TYPE_FIELDS,
            handler=list_breeds,
        ),
    }
)


def list_tools() -> List[Dict[str, Any]]:
    """Return the tool catalogue in registry order."""
    return [tool.describe() for tool in TOOL_REGISTRY.values()]


def resolve_tool(tool_name: Any) -> ToolDefinition:
    """Look up a tool by name. Raises ToolNotFoundError for unknown names."""
    try:
        key = ToolName(tool_name)
    except ValueError:
        raise ToolNotFoundError(tool_name) from None
    return TOOL_REGISTRY[key]


async def dispatch(
    tool_name: Any,
    raw_input: Optional[Mapping[str, Any]],
    credentials: PetfinderCredentials,
    *,
    client: Optional[PetfinderApiClient] = None,
) -> Dict[str, Any]:
    """
    Resolve, validate and invoke a tool.

    Upstream errors propagate unchanged; the caller turns them into JSON-RPC
    error envelopes with ``error_for_exception``.
    """
    tool = resolve_tool(tool_name)
    arguments = tool.validate(raw_input or {})
    return await tool.invoke(arguments, credentials, client=client or default_client)


@dataclass(frozen=True, slots=True)
class RpcError:
    code: int
    message: str
    data: Optional[Dict[str, Any]] = None


def jsonrpc_code_for_status(status_code: Optional[int]) -> int:
    if status_code is None:
        return INTERNAL_ERROR
    return _STATUS_CODES.get(status_code, INTERNAL_ERROR)


def message_for_status(status_code: Optional[int]) -> str:
    if status_code is None:
        return "Unknown error"
    return _STATUS_MESSAGES.get(status_code, "Unknown error")


def _parse_problem_body(body: Any) -> Optional[Dict[str, Any]]:
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return None
    return body if isinstance(body, dict) else None


def upstream_error_data(error: PetfinderApiError) -> Dict[str, Any]:
    """Build the ``data`` member for an upstream failure."""
    data: Dict[str, Any] = {"detail": str(error)}
    if error.status_code is not None:
        data["status"] = error.status_code
        data["title"] = error.status_text or message_for_status(error.status_code)
    problem = _parse_problem_body(error.body)
    if problem:
        for key in PROBLEM_DETAIL_FIELDS:
            if problem.get(key) is not None:
                data[key] = problem[key]
    return data


def authentication_required_message() -> str:
    return (
        "Authentication required - you need to pass both "
        f"{default_config.client_id_header} and {default_config.client_secret_header} headers"
    )


def error_for_exception(exc: Exception) -> RpcError:
    """Classify any exception raised while serving ``tools/call``."""
    if isinstance(exc, PetfinderApiError):
        if exc.status_code is None:
            return RpcError(INTERNAL_ERROR, str(exc), upstream_error_data(exc))
        return RpcError(
            jsonrpc_code_for_status(exc.status_code),
            message_for_status(exc.status_code),
            upstream_error_data(exc),
        )
    if isinstance(exc, CredentialsMissingError):
        return RpcError(UNAUTHORIZED, authentication_required_message())
    if isinstance(exc, ValidationError):
        return RpcError(INVALID_PARAMS, "Invalid params", {"errors": exc.errors})
    if isinstance(exc, ToolNotFoundError):
        return RpcError(METHOD_NOT_FOUND, str(exc))
    logger.error("Unexpected error while calling tool", exc_info=exc)
    return RpcError(INTERNAL_ERROR, "Internal error")
