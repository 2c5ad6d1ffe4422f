"""
Cliente MCP — Transporte JSON-RPC sobre HTTP
==============================================
Emite requisições JSON-RPC 2.0 para o endpoint /mcp de um servidor de
ferramentas e decodifica a resposta, seja ela JSON puro ou uma mensagem
Server-Sent-Events.

Notas de arquitetura:
    Correlação — cada instância tem seu próprio contador de ids (começa em
    0, pré-incremento, primeiro id enviado = 1), protegido por lock para
    uso concorrente. As chamadas não são enfileiradas em pipeline: cada
    chamada espera a própria resposta, então não há tabela id → pendente.

    Sem retentativas — ``TransportError`` e ``RpcError`` sobem para quem
    chamou sem alteração.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import requests
from pydantic import ValidationError

from shared.errors import RpcError, TransportError, TransportTimeoutError
from shared.framing import JSON_MEDIA_TYPE, SSE_MEDIA_TYPE, parse_envelope
from shared.mcp_types import PROTOCOL_VERSION, ContentItem, MCPRequest, ToolDescriptor

logger = logging.getLogger(__name__)

ACCEPT_HEADER = f"{JSON_MEDIA_TYPE}, {SSE_MEDIA_TYPE}"

CLIENT_INFO = {"name": "orchestrator-host", "version": "1.0.0"}


class MCPClient:
    """Cliente HTTP JSON-RPC para um único servidor MCP."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.server_info: dict[str, Any] | None = None
        self.capabilities: dict[str, Any] | None = None
        self._message_id = 0
        self._id_lock = threading.Lock()

    def __enter__(self) -> "MCPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def next_id(self) -> int:
        with self._id_lock:
            self._message_id += 1
            return self._message_id

    def call(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Envia uma requisição e retorna o ``result`` da resposta.

        Args:
            method:  Método MCP (ex.: 'tools/list').
            params:  Parâmetros do método.
            timeout: Prazo desta chamada em segundos; padrão é o da instância.

        Raises:
            TransportTimeoutError: O prazo expirou.
            TransportError: Falha de rede, status não-2xx ou corpo malformado.
            RpcError: O servidor respondeu com um envelope de erro.
        """
        request = MCPRequest(id=self.next_id(), method=method, params=params or {})
        logger.debug("→ %s (id=%s)", method, request.id)

        try:
            http_response = self.session.post(
                self.url,
                json=request.model_dump(),
                headers={"Accept": ACCEPT_HEADER, "Content-Type": JSON_MEDIA_TYPE},
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.Timeout as exc:
            raise TransportTimeoutError(f"MCP {method} timed out: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Network error calling {self.url}: {exc}") from exc

        # JSON-RPC é sempre UTF-8; `.text` usaria ISO-8859-1 para text/event-stream sem charset.
        body = http_response.content.decode("utf-8", errors="replace")
        if not 200 <= http_response.status_code < 300:
            raise TransportError(
                f"HTTP {http_response.status_code}: {body}",
                status_code=http_response.status_code,
                body=body,
            )

        envelope = parse_envelope(body)
        if envelope.id != request.id:
            raise TransportError(
                f"Response id {envelope.id} does not match request id {request.id}",
                status_code=http_response.status_code,
                body=body,
            )
        if envelope.error is not None:
            raise RpcError(envelope.error.code, envelope.error.message)

        logger.debug("← %s (id=%s)", method, request.id)
        return envelope.result

    # ------------------------------------------------------------------
    # Operações MCP
    # ------------------------------------------------------------------

    def initialize(self) -> dict[str, Any]:
        result = self.call(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "clientInfo": dict(CLIENT_INFO),
                "capabilities": {},
            },
        )
        self.server_info = result.get("serverInfo")
        self.capabilities = result.get("capabilities")
        return result

    def list_tools(self) -> list[ToolDescriptor]:
        result = self.call("tools/list", {})
        try:
            return [ToolDescriptor.model_validate(tool) for tool in result.get("tools", [])]
        except ValidationError as exc:
            raise TransportError(f"Malformed tool descriptor: {exc}") from exc

    def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> list[ContentItem]:
        result = self.call(
            "tools/call",
            {"name": name, "arguments": arguments or {}},
            timeout=timeout,
        )
        try:
            return [ContentItem.model_validate(item) for item in result.get("content", [])]
        except ValidationError as exc:
            raise TransportError(f"Malformed tool result: {exc}") from exc
