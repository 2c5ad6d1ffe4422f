"""
Transporte RPC — Servidor MCP sobre HTTP
==========================================
Aplicação FastAPI que expõe um único endpoint /mcp seguindo a convenção
JSON-RPC 2.0 / Model Context Protocol (MCP), além de um /health simples.

Notas de arquitetura:
    Sem estado — cada requisição HTTP é tratada de forma independente; o
    registro é somente leitura depois da inicialização. A rota é síncrona,
    então o FastAPI a executa no threadpool e chamadas independentes não
    se serializam.

    Erros de RPC não são erros HTTP — toda requisição bem formada recebe
    HTTP 200 com um envelope JSON-RPC, mesmo quando o resultado é um erro.
    Só corpos que nem chegam a ser um envelope válido recebem HTTP 400.

    Enquadramento — conforme ``ResponseMode`` o envelope vai direto no
    corpo (``application/json``) ou embrulhado como uma mensagem SSE
    (``text/event-stream``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from mcp_server.dispatcher import ToolDispatcher
from mcp_server.registry import ToolRegistry
from shared.config import ResponseMode, ServerSettings
from shared.errors import (
    ArgumentTypeError,
    MissingArgumentError,
    ToolExecutionError,
    UnknownToolError,
)
from shared.framing import JSON_MEDIA_TYPE, SSE_MEDIA_TYPE, encode_json, encode_sse
from shared.mcp_types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PROTOCOL_VERSION,
    MCPRequest,
    MCPResponse,
)

logger = logging.getLogger(__name__)


class RpcHandler:
    """Roteia métodos JSON-RPC para o registro e o despachante."""

    def __init__(
        self,
        registry: ToolRegistry,
        settings: ServerSettings,
        server_name: str,
        server_version: str,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self.server_info = {"name": server_name, "version": server_version}
        self.dispatcher = ToolDispatcher(registry, required_args=settings.required_args)
        self._methods: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    def handle(self, request: MCPRequest) -> MCPResponse:
        method = self._methods.get(request.method)
        if method is None:
            logger.info("Método desconhecido: %s", request.method)
            return MCPResponse.failure(request.id, METHOD_NOT_FOUND, "Method not found")

        try:
            result = method(request.params)
        except UnknownToolError as exc:
            return MCPResponse.failure(request.id, METHOD_NOT_FOUND, str(exc))
        except (ArgumentTypeError, MissingArgumentError) as exc:
            return MCPResponse.failure(request.id, INVALID_PARAMS, str(exc))
        except ToolExecutionError as exc:
            if self.settings.tool_errors_as_content:
                return MCPResponse.success(
                    request.id,
                    {
                        "content": [{"type": "text", "text": f"Error: {exc.message}"}],
                        "isError": True,
                    },
                )
            return MCPResponse.failure(request.id, INTERNAL_ERROR, exc.message)
        return MCPResponse.success(request.id, result)

    def _initialize(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": dict(self.server_info),
            "capabilities": {"tools": {}},
        }

    def _tools_list(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [descriptor.to_wire() for descriptor in self.registry.list()]}

    def _tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name", "")
        arguments = params.get("arguments") or {}
        if not isinstance(name, str):
            raise UnknownToolError(str(name))
        if not isinstance(arguments, dict):
            raise ArgumentTypeError(name, "arguments", "object", arguments)

        content = self.dispatcher.dispatch(name, arguments)
        return {"content": [item.model_dump() for item in content]}


def _wants_sse(mode: ResponseMode, accept: Optional[str]) -> bool:
    if mode is ResponseMode.SSE:
        return True
    if mode is ResponseMode.AUTO:
        return SSE_MEDIA_TYPE in (accept or "")
    return False


def _render(envelope: MCPResponse, sse: bool, status_code: int = 200) -> Response:
    if sse:
        return Response(encode_sse(envelope), status_code=status_code, media_type=SSE_MEDIA_TYPE)
    return Response(encode_json(envelope), status_code=status_code, media_type=JSON_MEDIA_TYPE)


def create_app(
    registry: ToolRegistry,
    settings: ServerSettings | None = None,
    server_name: str = "mcp-server",
    server_version: str = "1.0.0",
) -> FastAPI:
    """Monta a aplicação FastAPI do servidor MCP sobre um registro já populado."""
    settings = settings or ServerSettings()
    handler = RpcHandler(registry, settings, server_name, server_version)

    app = FastAPI(
        title=f"{server_name} (Servidor MCP)",
        description="Servidor MCP expondo ferramentas via JSON-RPC 2.0 sobre HTTP.",
        version=server_version,
    )
    app.state.rpc_handler = handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_envelope(request: Request, exc: RequestValidationError) -> Response:
        # Corpo que não é JSON ou não é um envelope JSON-RPC: erro de transporte.
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            envelope = MCPResponse.failure(None, PARSE_ERROR, "Parse error")
        else:
            envelope = MCPResponse.failure(None, INVALID_REQUEST, "Invalid Request")
        logger.warning("Requisição malformada em %s: %s", request.url.path, exc.errors())
        return _render(
            envelope,
            _wants_sse(settings.response_mode, request.headers.get("accept")),
            status_code=400,
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", **handler.server_info}

    @app.post("/mcp")
    def mcp_endpoint(
        rpc_request: MCPRequest,
        accept: Optional[str] = Header(default=None),
    ) -> Response:
        """
        Ponto de entrada JSON-RPC 2.0 / MCP.

        Notificações (sem ``id``, método ``notifications/*``) são aceitas com
        HTTP 202 e corpo vazio.
        """
        if rpc_request.id is None and rpc_request.method.startswith("notifications/"):
            logger.debug("Notificação recebida: %s", rpc_request.method)
            return Response(status_code=202)

        envelope = handler.handle(rpc_request)
        return _render(envelope, _wants_sse(settings.response_mode, accept))

    return app
