"""Organization tools."""

from __future__ import annotations

from typing import Any, Dict

from petfinder_mcp.petfinder_api import PetfinderCredentials, default_client
from petfinder_mcp.tools.content import build_tool_result, count_items


async def search_organizations(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    """Search animal welfare organizations."""
    result = await client.fetch_organizations(credentials, arguments)
    found = count_items(result, "organizations")
    return build_tool_result(
        f"Found {found} organizations matching your search criteria.", result
    )


async def get_organization(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    organization_id = arguments["id"]
    result = await client.fetch_organization(credentials, organization_id)
    return build_tool_result(f"Organization details for ID {organization_id}:", result)
