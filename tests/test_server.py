"""HTTP behavior of the /mcp endpoint: methods, error envelopes and framing."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from shared.config import RequiredArgsPolicy, ResponseMode
from shared.framing import parse_envelope


def test_initialize_handshake(rpc):
    response = rpc("initialize", {"anything": "ignored"}, request_id=7)

    assert response.status_code == 200
    body = response.json()
    assert body["jsonrpc"] == "2.0"
    assert body["id"] == 7
    assert body["result"] == {
        "protocolVersion": "2024-11-05",
        "serverInfo": {"name": "risk-scorer-mcp", "version": "1.0.0"},
        "capabilities": {"tools": {}},
    }


def test_tools_list_matches_registry_order(rpc, registry):
    body = rpc("tools/list").json()

    tools = body["result"]["tools"]
    assert [t["name"] for t in tools] == registry.names()
    assert [t["name"] for t in tools] == [
        "calculate_risk_score",
        "get_patient_health_conditions",
        "get_patient_summary",
    ]
    for tool in tools:
        assert set(tool) == {"name", "description", "inputSchema"}


def test_tools_call_success(rpc):
    body = rpc("tools/call", {"name": "calculate_risk_score", "arguments": {"age": 72, "comorbidityCount": 5}}).json()

    content = body["result"]["content"]
    assert len(content) == 1
    assert content[0]["type"] == "text"
    payload = json.loads(content[0]["text"])
    assert payload["score"] == pytest.approx(39.4)
    assert payload["category"] == "medium"
    assert "error" not in body


def test_unknown_patient_returns_message_not_error(rpc):
    body = rpc("tools/call", {"name": "get_patient_health_conditions", "arguments": {"patientId": "P999"}}).json()

    assert "error" not in body
    assert json.loads(body["result"]["content"][0]["text"])["message"] == "No conditions found."


def test_unknown_tool_is_rpc_error_with_http_200(rpc):
    response = rpc("tools/call", {"name": "nope", "arguments": {}}, request_id=3)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 3
    assert body["error"] == {"code": -32601, "message": "Unknown tool: nope"}
    assert "result" not in body


def test_unknown_method(rpc):
    response = rpc("resources/list")

    assert response.status_code == 200
    assert response.json()["error"] == {"code": -32601, "message": "Method not found"}


def test_handler_failure_is_internal_error(rpc):
    response = rpc("tools/call", {"name": "calculate_risk_score", "arguments": {"age": 50}})

    assert response.status_code == 200
    assert response.json()["error"] == {
        "code": -32603,
        "message": "age and comorbidityCount are required",
    }


def test_handler_failure_as_content(make_app):
    http = TestClient(make_app(tool_errors_as_content=True))

    body = http.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 1, "method": "tools/call",
              "params": {"name": "calculate_risk_score", "arguments": {}}},
    ).json()

    assert body["result"]["isError"] is True
    assert body["result"]["content"] == [
        {"type": "text", "text": "Error: age and comorbidityCount are required"}
    ]


def test_argument_type_error_is_invalid_params(rpc):
    body = rpc("tools/call", {"name": "calculate_risk_score", "arguments": {"age": "old", "comorbidityCount": 1}}).json()

    assert body["error"]["code"] == -32602
    assert "age" in body["error"]["message"]


def test_non_object_arguments_are_invalid_params(rpc):
    body = rpc("tools/call", {"name": "calculate_risk_score", "arguments": [72, 5]}).json()

    assert body["error"]["code"] == -32602


def test_strict_policy_reports_missing_arguments(make_app):
    http = TestClient(make_app(required_args=RequiredArgsPolicy.STRICT))

    body = http.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 1, "method": "tools/call",
              "params": {"name": "get_patient_summary", "arguments": {}}},
    ).json()

    assert body["error"]["code"] == -32602
    assert "patientId" in body["error"]["message"]


def test_missing_arguments_default_to_empty(rpc):
    body = rpc("tools/call", {"name": "get_patient_summary"}).json()

    assert body["result"]["content"][0]["text"] == "No patient found with ID "


def test_malformed_json_is_http_400_parse_error(http):
    response = http.post("/mcp", content="{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}


def test_invalid_envelope_is_http_400_invalid_request(http):
    response = http.post("/mcp", json={"jsonrpc": "2.0", "id": 1})

    assert response.status_code == 400
    assert response.json()["error"] == {"code": -32600, "message": "Invalid Request"}


@pytest.mark.parametrize("request_id", ["5", 5.5, True])
def test_non_integer_id_is_invalid_request(http, request_id):
    response = http.post("/mcp", json={"jsonrpc": "2.0", "id": request_id, "method": "initialize", "params": {}})

    assert response.status_code == 400
    assert response.json() == {"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}}


def test_non_finite_number_is_invalid_params(rpc):
    body = rpc("tools/call", {"name": "calculate_risk_score", "arguments": {"age": "nan", "comorbidityCount": 1}}).json()

    assert "result" not in body
    assert body["error"]["code"] == -32602


def test_notification_is_accepted_without_body(http):
    response = http.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert response.status_code == 202
    assert response.content == b""


def test_sse_mode_frames_envelope(make_app):
    http = TestClient(make_app(response_mode=ResponseMode.SSE))

    response = http.post("/mcp", json={"jsonrpc": "2.0", "id": 4, "method": "tools/list", "params": {}})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    lines = response.text.split("\n")
    assert lines[0] == "event: message"
    assert lines[1].startswith("data: ")
    assert json.loads(lines[1][len("data: "):])["id"] == 4


@pytest.mark.parametrize(
    "accept, expected_sse",
    [
        ("application/json, text/event-stream", True),
        ("text/event-stream", True),
        ("application/json", False),
        (None, False),
    ],
)
def test_auto_mode_negotiates_on_accept(make_app, accept, expected_sse):
    http = TestClient(make_app(response_mode=ResponseMode.AUTO))
    headers = {"Accept": accept} if accept else {}

    response = http.post(
        "/mcp",
        json={"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
        headers=headers,
    )

    assert response.text.startswith("event: message") is expected_sse


def test_sse_and_json_framing_decode_identically(make_app):
    request = {"jsonrpc": "2.0", "id": 11, "method": "tools/call",
               "params": {"name": "get_patient_summary", "arguments": {"patientId": "P001"}}}
    json_body = TestClient(make_app(response_mode=ResponseMode.JSON)).post("/mcp", json=request).text
    sse_body = TestClient(make_app(response_mode=ResponseMode.SSE)).post("/mcp", json=request).text

    assert json_body != sse_body
    assert parse_envelope(json_body) == parse_envelope(sse_body)


def test_sse_and_json_error_envelopes_decode_identically(make_app):
    request = {"jsonrpc": "2.0", "id": 12, "method": "tools/call", "params": {"name": "nope"}}
    json_body = TestClient(make_app(response_mode=ResponseMode.JSON)).post("/mcp", json=request).text
    sse_body = TestClient(make_app(response_mode=ResponseMode.SSE)).post("/mcp", json=request).text

    assert parse_envelope(json_body) == parse_envelope(sse_body)
    assert parse_envelope(sse_body).error.code == -32601


def test_health(http):
    response = http.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "name": "risk-scorer-mcp", "version": "1.0.0"}


def test_cors_preflight(http):
    response = http.options(
        "/mcp",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
