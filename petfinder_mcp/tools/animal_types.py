"""Animal type and breed tools."""

from __future__ import annotations

from typing import Any, Dict

from petfinder_mcp.petfinder_api import PetfinderCredentials, default_client
from petfinder_mcp.tools.content import build_tool_result


async def list_types(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    result = await client.fetch_types(credentials)
    return build_tool_result("Available animal types:", result)


async def get_type(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    animal_type = arguments["type"]
    result = await client.fetch_type(credentials, animal_type)
    return build_tool_result(f"Animal type details for {animal_type}:", result)


async def list_breeds(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    """List breeds for a single animal type."""
    animal_type = arguments["type"]
    result = await client.fetch_breeds(credentials, animal_type)
    return build_tool_result(f"Available breeds for {animal_type}:", result)
