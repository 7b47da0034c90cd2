"""Animal (pet) tools."""

from __future__ import annotations

from typing import Any, Dict

from petfinder_mcp.petfinder_api import PetfinderCredentials, default_client
from petfinder_mcp.tools.content import build_tool_result, count_items


async def search_pets(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    """
    Search adoptable pets.

    Args:
        arguments: Validated search filters (defaults already applied).
        credentials: Caller's Petfinder credentials.
        client: Petfinder API client (override for testing).
    """
    result = await client.fetch_animals(credentials, arguments)
    found = count_items(result, "animals")
    return build_tool_result(f"Found {found} pets matching your search criteria.", result)


async def get_pet(
    arguments: Dict[str, Any],
    credentials: PetfinderCredentials,
    *,
    client=default_client,
) -> Dict[str, Any]:
    """Retrieve one pet by id."""
    animal_id = arguments["id"]
    result = await client.fetch_animal(credentials, animal_id)
    return build_tool_result(f"Pet details for ID {animal_id}:", result)
