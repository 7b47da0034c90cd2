"""
Petfinder MCP server package.

This package exposes the Petfinder pet-adoption API as MCP tools behind a
JSON-RPC gateway. See DESIGN.md for full details.
"""

__all__ = ["config"]
