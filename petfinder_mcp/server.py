"""FastAPI application exposing the Petfinder tools over MCP JSON-RPC."""

from __future__ import annotations

import json
import logging
import math
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from petfinder_mcp import mcp
from petfinder_mcp.config import PetfinderConfig, default_config
from petfinder_mcp.credentials import extract_credentials
from petfinder_mcp.metrics import default_metrics
from petfinder_mcp.petfinder_api import default_client, mask_client_id

logger = logging.getLogger(__name__)

_LOG_EXTRAS = ("tool", "request_id", "error", "client")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in _LOG_EXTRAS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: PetfinderConfig = default_config) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.log_format.lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=level, handlers=[handler])
    else:
        logging.basicConfig(level=level)


configure_logging()

HEALTH_TEXT = "OK"
UNKNOWN_TOOL_LABEL = "unknown"
_KNOWN_TOOLS = frozenset(tool.value for tool in mcp.ToolName)
MCP_SERVER_NAME = default_config.server_name
MCP_SERVER_VERSION = default_config.server_version
MCP_PROTOCOL_VERSION = default_config.protocol_version


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "Petfinder MCP server starting; credentials are read from %s / %s",
        default_config.client_id_header,
        default_config.client_secret_header,
    )
    yield
    await default_client.aclose()


app = FastAPI(
    title="Petfinder MCP Server",
    description="Petfinder pet-adoption tools for MCP clients.",
    version=MCP_SERVER_VERSION,
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    default_metrics.record_duration((time.time() - start) * 1000)
    response.headers["X-Request-ID"] = request_id
    return response


def _log_tool_outcome(
    tool_name: str,
    request_id: Optional[str],
    *,
    client_id: Optional[str] = None,
    error_code: Optional[int] = None,
) -> None:
    client_label = mask_client_id(client_id)
    metric_label = tool_name if tool_name in _KNOWN_TOOLS else UNKNOWN_TOOL_LABEL
    if error_code is not None:
        logger.warning(
            "tool=%s outcome=error error=%s client=%s request_id=%s",
            tool_name,
            error_code,
            client_label,
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": error_code, "client": client_label},
        )
        default_metrics.record_tool(metric_label, success=False)
    else:
        logger.info(
            "tool=%s outcome=success client=%s request_id=%s",
            tool_name,
            client_label,
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "client": client_label},
        )
        default_metrics.record_tool(metric_label, success=True)


@app.get("/healthz", response_class=PlainTextResponse)
async def healthz() -> PlainTextResponse:
    """Liveness probe."""
    return PlainTextResponse(HEALTH_TEXT)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """
    JSON-RPC gateway for MCP clients.

    Supported methods:
      - initialize
      - tools/list
      - tools/call
      - notifications/initialized (acknowledged with 204)
    """
    request_id = getattr(request.state, "request_id", None)
    start_time = time.time()

    def _respond(
        payload: Dict[str, Any],
        status_code: int = 200,
        *,
        outcome: str,
        method_label: Optional[str] = None,
        tool_label: Optional[str] = None,
        error_code: Optional[int] = None,
    ) -> JSONResponse:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
            outcome,
            method_label,
            tool_label,
            payload.get("id"),
            status_code,
            duration_ms,
            error_code,
            extra={"request_id": request_id, "tool": tool_label, "error": error_code},
        )
        return JSONResponse(status_code=status_code, content=payload)

    def _error(
        rpc_id: Any,
        code: int,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        *,
        status_code: int = 200,
        method_label: Optional[str] = None,
        tool_label: Optional[str] = None,
    ) -> JSONResponse:
        return _respond(
            _jsonrpc_error_payload(rpc_id, code, message, data),
            status_code,
            outcome="error",
            method_label=method_label,
            tool_label=tool_label,
            error_code=code,
        )

    try:
        body = json.loads(
            await request.body(), parse_constant=_reject_constant, parse_float=_finite_float
        )
    except Exception:
        return _error("unknown", mcp.PARSE_ERROR, "Parse error", status_code=400)

    if not isinstance(body, dict):
        return _error(None, mcp.INVALID_REQUEST, "Invalid request", status_code=400)

    method = body.get("method")
    rpc_id = body.get("id")
    raw_params = body.get("params")
    if raw_params is None:
        params: Dict[str, Any] = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        return _error(rpc_id, mcp.INVALID_PARAMS, "Invalid params", method_label=method)

    if not isinstance(method, str) or not method:
        return _error(rpc_id, mcp.INVALID_REQUEST, "Invalid request")

    if method == "initialize":
        logger.debug(
            "mcp initialize requested client_protocol=%s request_id=%s",
            params.get("protocolVersion"),
            request_id,
            extra={"request_id": request_id},
        )
        result = {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": True}},
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
        }
        return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method == "tools/list":
        result = {"tools": mcp.list_tools()}
        return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method == "tools/call":
        tool_name = params.get("name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            return _error(rpc_id, mcp.INVALID_PARAMS, "Invalid params", method_label=method)
        if not isinstance(arguments, dict):
            return _error(
                rpc_id, mcp.INVALID_PARAMS, "Invalid params", method_label=method, tool_label=tool_name
            )

        credentials = extract_credentials(request.headers, request.query_params)
        if credentials is None:
            _log_tool_outcome(tool_name, request_id, error_code=mcp.UNAUTHORIZED)
            return _error(
                rpc_id,
                mcp.UNAUTHORIZED,
                mcp.authentication_required_message(),
                method_label=method,
                tool_label=tool_name,
            )

        try:
            result = await mcp.dispatch(tool_name, arguments, credentials, client=default_client)
        except Exception as exc:
            rpc_error = mcp.error_for_exception(exc)
            _log_tool_outcome(
                tool_name, request_id, client_id=credentials.client_id, error_code=rpc_error.code
            )
            return _error(
                rpc_id,
                rpc_error.code,
                rpc_error.message,
                rpc_error.data,
                method_label=method,
                tool_label=tool_name,
            )

        _log_tool_outcome(tool_name, request_id, client_id=credentials.client_id)
        return _respond(
            _jsonrpc_success_payload(rpc_id, result),
            outcome="success",
            method_label=method,
            tool_label=tool_name,
        )

    if method in ("notifications/initialized", "initialized"):
        # Notifications do not get a JSON-RPC response body.
        logger.debug(
            "mcp initialized notification received request_id=%s",
            request_id,
            extra={"request_id": request_id},
        )
        return Response(status_code=204)

    return _error(
        rpc_id if rpc_id is not None else "unknown",
        mcp.METHOD_NOT_FOUND,
        f"Method {method} not found",
        method_label=method,
    )


# Run with: python -m petfinder_mcp  (or uvicorn petfinder_mcp.server:app)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Unsupported JSON constant {token}")


def _finite_float(token: str) -> float:
    value = float(token)
    if math.isinf(value):
        raise ValueError(f"Number out of range: {token}")
    return value


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _jsonrpc_error_payload(
    rpc_id: Any, code: int, message: str, data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": rpc_id, "error": error}
