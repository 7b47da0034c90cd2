"""Minimal live sanity checks for the Petfinder MCP tools."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from petfinder_mcp import mcp  # noqa: E402
from petfinder_mcp.petfinder_api import PetfinderApiError, PetfinderCredentials, default_client  # noqa: E402

CLIENT_ID = os.getenv("PETFINDER_CLIENT_ID", "")
CLIENT_SECRET = os.getenv("PETFINDER_CLIENT_SECRET", "")
# Optional location for the search checks, e.g. "Seattle, WA".
SAMPLE_LOCATION = os.getenv("PETFINDER_SAMPLE_LOCATION")


def _summary(result) -> str:
    return result["content"][0]["text"]


async def main() -> int:
    if not CLIENT_ID or not CLIENT_SECRET:
        print("Set PETFINDER_CLIENT_ID and PETFINDER_CLIENT_SECRET to run the sanity check.")
        return 2

    credentials = PetfinderCredentials(client_id=CLIENT_ID, client_secret=CLIENT_SECRET)
    search = {"type": "dog", "limit": 3}
    if SAMPLE_LOCATION:
        search["location"] = SAMPLE_LOCATION
    try:
        print("Types:", _summary(await mcp.dispatch("types.list", {}, credentials)))
        print("Dog breeds:", _summary(await mcp.dispatch("breeds.list", {"type": "dog"}, credentials)))
        print("Pet search:", _summary(await mcp.dispatch("pets.search", search, credentials)))
        orgs = {"limit": 3, **({"location": SAMPLE_LOCATION} if SAMPLE_LOCATION else {})}
        print("Org search:", _summary(await mcp.dispatch("organizations.search", orgs, credentials)))
    except PetfinderApiError as exc:
        print(f"Petfinder error status={exc.status_code}: {exc}")
        return 1
    finally:
        await default_client.aclose()
    print("Cached tokens:", len(default_client.token_cache))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
