import json

import httpx
import pytest
from fastapi.testclient import TestClient

from helpers import MockAsyncClient, token_response
from petfinder_mcp import server
from petfinder_mcp.petfinder_api import PetfinderApiClient
from petfinder_mcp.server import MCP_PROTOCOL_VERSION, MCP_SERVER_NAME, MCP_SERVER_VERSION, app

AUTH_HEADERS = {"x-petfinder-client-id": "client-a", "x-petfinder-client-secret": "secret-a"}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def upstream(monkeypatch):
    """Swap the shared Petfinder client for one backed by queued mock responses."""

    def _install(*, posts=None, gets=None):
        mock = MockAsyncClient(posts=posts, gets=gets)
        monkeypatch.setattr(server, "default_client", PetfinderApiClient(async_client=mock))
        return mock

    return _install


def _call(client, name, arguments=None, headers=None, rpc_id=1):
    payload = {"jsonrpc": "2.0", "id": rpc_id, "method": "tools/call", "params": {"name": name}}
    if arguments is not None:
        payload["params"]["arguments"] = arguments
    return client.post("/mcp", json=payload, headers=headers or {})


def test_initialize_returns_static_metadata(client, upstream):
    mock = upstream()
    resp = client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 10, "method": "initialize", "params": {"protocolVersion": "2025-03-26"}},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 10
    result = data["result"]
    assert result["protocolVersion"] == MCP_PROTOCOL_VERSION
    assert result["serverInfo"] == {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION}
    assert result["capabilities"]["tools"]["listChanged"] is True
    assert mock.post_calls == [] and mock.get_calls == []


@pytest.mark.parametrize("headers", [{}, AUTH_HEADERS])
def test_tools_list_returns_seven_tools_regardless_of_credentials(client, headers):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 3, "method": "tools/list"}, headers=headers)
    assert resp.status_code == 200
    tools = resp.json()["result"]["tools"]
    assert len(tools) == 7
    for tool in tools:
        assert set(tool) == {"name", "title", "description", "inputSchema"}


def test_pets_get_scenario(client, upstream):
    mock = upstream(posts=[token_response("tok-1")], gets=[httpx.Response(200, json={"id": 123, "name": "Fido"})])
    resp = _call(client, "pets.get", {"id": 123}, AUTH_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert "error" not in data
    content = data["result"]["content"]
    assert content[0] == {"type": "text", "text": "Pet details for ID 123:"}
    assert json.loads(content[1]["text"]) == {"id": 123, "name": "Fido"}
    assert mock.get_calls[0]["path"] == "/animals/123"


def test_second_call_reuses_cached_token(client, upstream):
    mock = upstream(
        posts=[token_response("tok-1")],
        gets=[httpx.Response(200, json={"types": []}), httpx.Response(200, json={"types": []})],
    )
    _call(client, "types.list", {}, AUTH_HEADERS)
    _call(client, "types.list", {}, AUTH_HEADERS)
    assert len(mock.post_calls) == 1
    assert len(mock.get_calls) == 2


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"x-petfinder-client-id": "client-a"},
        {"x-petfinder-client-secret": "secret-a"},
    ],
)
def test_missing_credentials_is_auth_error_without_upstream(client, upstream, headers):
    mock = upstream()
    resp = _call(client, "types.list", {}, headers)
    data = resp.json()
    assert data["error"]["code"] == -32001
    assert "Authentication required" in data["error"]["message"]
    assert "result" not in data
    assert mock.post_calls == [] and mock.get_calls == []


def test_credentials_accepted_from_query_parameters(client, upstream):
    upstream(posts=[token_response()], gets=[httpx.Response(200, json={"types": []})])
    resp = client.post(
        "/mcp?petfinder_client_id=client-a&petfinder_client_secret=secret-a",
        json={"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "types.list"}},
    )
    assert "result" in resp.json()


def test_token_endpoint_401_maps_to_unauthorized(client, upstream):
    problem = {"type": "https://httpstatus.es/401", "status": 401, "title": "Unauthorized", "detail": "Invalid client"}
    mock = upstream(posts=[httpx.Response(401, json=problem)])
    data = _call(client, "pets.get", {"id": 1}, AUTH_HEADERS).json()
    assert data["error"]["code"] == -32001
    assert data["error"]["message"] == "Authentication failed - invalid credentials"
    assert data["error"]["data"]["detail"] == "Invalid client"
    assert mock.get_calls == []


def test_animal_search_429_maps_to_rate_limited(client, upstream):
    upstream(posts=[token_response()], gets=[httpx.Response(429, json={"title": "Too Many Requests"})])
    data = _call(client, "pets.search", {"type": "dog"}, AUTH_HEADERS).json()
    assert data["error"]["code"] == -32004
    assert data["error"]["message"] == "Rate limit exceeded"
    assert "result" not in data


def test_upstream_400_surfaces_invalid_params(client, upstream):
    problem = {
        "type": "https://httpstatus.es/400",
        "status": 400,
        "title": "Bad Request",
        "detail": "Invalid request parameters",
        "invalid-params": [{"in": "query", "path": "location", "message": "could not determine location"}],
    }
    upstream(posts=[token_response()], gets=[httpx.Response(400, json=problem)])
    data = _call(client, "organizations.search", {"location": "nowhere"}, AUTH_HEADERS).json()
    assert data["error"]["code"] == -32602
    assert data["error"]["data"]["invalid-params"] == problem["invalid-params"]


def test_upstream_5xx_maps_to_internal_error(client, upstream):
    upstream(posts=[token_response()], gets=[httpx.Response(503, text="maintenance")])
    data = _call(client, "types.list", {}, AUTH_HEADERS).json()
    assert data["error"]["code"] == -32603
    assert data["error"]["message"] == "Service unavailable"


def test_unknown_tool_with_credentials(client, upstream):
    mock = upstream()
    data = _call(client, "pets.adopt", {}, AUTH_HEADERS).json()
    assert data["error"]["code"] == -32601
    assert data["error"]["message"] == "Tool pets.adopt not found"
    assert mock.post_calls == []


def test_invalid_arguments_map_to_invalid_params(client, upstream):
    mock = upstream()
    data = _call(client, "pets.get", {"id": "abc"}, AUTH_HEADERS).json()
    assert data["error"]["code"] == -32602
    assert data["error"]["data"]["errors"] == [{"field": "id", "message": "Expected integer."}]
    assert mock.post_calls == []


def test_tools_call_missing_name_is_invalid_params(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 13, "method": "tools/call", "params": {"arguments": {}}})
    data = resp.json()
    assert data["id"] == 13
    assert data["error"]["code"] == -32602


def test_tools_call_non_object_arguments(client):
    data = _call(client, "types.list", ["dog"], AUTH_HEADERS).json()
    assert data["error"]["code"] == -32602


def test_invalid_params_type(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 11, "method": "tools/call", "params": []})
    assert resp.json()["error"]["code"] == -32602


def test_unknown_method_returns_error(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 7, "method": "resources/list"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 7
    assert data["error"]["code"] == -32601
    assert "resources/list" in data["error"]["message"]


def test_unknown_method_without_id_gets_synthetic_id(client):
    data = client.post("/mcp", json={"jsonrpc": "2.0", "method": "nope"}).json()
    assert data["id"] == "unknown"


def test_parse_error_invalid_json(client):
    resp = client.post("/mcp", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"]["code"] == -32700
    assert data["id"] == "unknown"
    assert "result" not in data


def test_missing_method_invalid_request(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 12})
    assert resp.json()["error"]["code"] == -32600


def test_initialized_notification_ignored(client):
    resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert resp.status_code == 204
    assert resp.text == ""


def test_result_and_error_are_mutually_exclusive(client, upstream):
    upstream(posts=[token_response()], gets=[httpx.Response(200, json={"types": [{"name": "Dog"}]})])
    ok = _call(client, "types.list", {}, AUTH_HEADERS).json()
    failed = _call(client, "types.list", {}, {}).json()
    assert ("result" in ok) != ("error" in ok)
    assert ("result" in failed) != ("error" in failed)
    assert ok["result"]["content"][0]["type"] == "text"


def test_tool_outcomes_recorded_in_metrics(client, upstream):
    upstream(posts=[token_response()], gets=[httpx.Response(200, json={})])
    _call(client, "types.list", {}, AUTH_HEADERS)
    _call(client, "types.list", {}, {})
    data = client.get("/metrics").json()
    assert data["tool_success"] == {"types.list": 1}
    assert data["tool_error"] == {"types.list": 1}
    assert data["token_cache"]["misses"] == 1


@pytest.mark.parametrize(
    "raw",
    [
        '{"jsonrpc": "2.0", "id": NaN, "method": "initialize"}',
        '{"jsonrpc": "2.0", "id": -Infinity, "method": "initialize"}',
        '{"jsonrpc": "2.0", "id": 1e999, "method": "initialize"}',
        "[" * 100000 + "]" * 100000,
    ],
)
def test_unrenderable_or_too_deep_body_is_parse_error(client, raw):
    resp = client.post("/mcp", content=raw, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"]["code"] == -32700
    assert data["id"] == "unknown"


def test_unknown_tool_names_share_one_metrics_label(client, upstream):
    upstream()
    for name in ("pets.adopt", "zzz-1", "zzz-2"):
        _call(client, name, {}, AUTH_HEADERS)
    _call(client, "types.list", {}, {})
    data = client.get("/metrics").json()
    assert data["tool_error"] == {"unknown": 3, "types.list": 1}
