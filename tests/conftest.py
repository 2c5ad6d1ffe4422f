"""
Shared fixtures: the risk scorer registry, FastAPI apps built from it and
MCP clients that talk to those apps in-process through TestClient.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Ensure project root is importable
# ---------------------------------------------------------------------------
_project_root = Path(__file__).resolve().parents[1]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from mcp_server.app import create_app  # noqa: E402
from mcp_server.registry import ToolRegistry  # noqa: E402
from orchestrator_host.client import MCPClient  # noqa: E402
from risk_scorer.tools import SERVER_NAME, SERVER_VERSION, build_registry  # noqa: E402
from shared.config import ServerSettings  # noqa: E402

MCP_URL = "http://testserver/mcp"


@pytest.fixture
def registry() -> ToolRegistry:
    return build_registry()


@pytest.fixture
def make_app() -> Callable[..., FastAPI]:
    """Factory for risk scorer apps with ServerSettings overrides."""

    def _make(**overrides: Any) -> FastAPI:
        return create_app(
            build_registry(),
            ServerSettings(**overrides),
            server_name=SERVER_NAME,
            server_version=SERVER_VERSION,
        )

    return _make


@pytest.fixture
def http(make_app) -> TestClient:
    return TestClient(make_app())


@pytest.fixture
def mcp_client(http) -> MCPClient:
    return MCPClient(MCP_URL, session=http)


@pytest.fixture
def rpc(http) -> Callable[..., Any]:
    """POST a JSON-RPC request to /mcp and return the HTTP response."""

    def _rpc(method: str, params: dict[str, Any] | None = None, request_id: int = 1):
        return http.post(
            "/mcp",
            json={"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}},
        )

    return _rpc


class RecordingSession:
    """Stand-in for requests.Session that records posts and echoes the id back."""

    def __init__(self, result: dict[str, Any] | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.result = result if result is not None else {}

    def post(self, url: str, json: dict[str, Any], headers: dict[str, str], timeout: float):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        body = {"jsonrpc": "2.0", "id": json["id"], "result": self.result}
        return SimpleNamespace(status_code=200, content=_dumps(body).encode("utf-8"))

    def close(self) -> None:
        pass


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload)


@pytest.fixture
def recording_session() -> RecordingSession:
    return RecordingSession()
