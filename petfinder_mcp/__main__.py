"""Run the Petfinder MCP server under uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from petfinder_mcp.config import default_config

logger = logging.getLogger(__name__)

UVICORN_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def main() -> None:
    log_level = default_config.log_level.lower()
    if log_level not in UVICORN_LOG_LEVELS:
        log_level = "info"
    logger.info("Starting Petfinder MCP server on %s:%s", default_config.host, default_config.port)
    uvicorn.run(
        "petfinder_mcp.server:app",
        host=default_config.host,
        port=default_config.port,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
