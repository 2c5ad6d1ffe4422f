"""
Transporte stdio — JSON-RPC delimitado por linha
==================================================
Alternativa ao HTTP para hosts que iniciam o servidor como subprocesso:
cada linha recebida em stdin é um envelope JSON-RPC e cada resposta sai
como uma linha JSON em stdout. Logs vão para stderr (padrão do
``logging.basicConfig``), então stdout carrega apenas envelopes.

Usa o mesmo ``RpcHandler`` do transporte HTTP: métodos, códigos de erro e
o formato das respostas são idênticos nos dois transportes.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import IO, Optional

from pydantic import ValidationError

from mcp_server.app import RpcHandler
from shared.framing import encode_json
from shared.mcp_types import INVALID_REQUEST, PARSE_ERROR, MCPRequest, MCPResponse

logger = logging.getLogger(__name__)


def handle_line(handler: RpcHandler, line: str) -> Optional[MCPResponse]:
    """
    Processa uma linha de entrada.

    Returns:
        O envelope de resposta, ou ``None`` para linhas vazias e notificações.
    """
    line = line.strip()
    if not line:
        return None

    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        logger.warning("Linha stdio não é JSON: %r", line[:200])
        return MCPResponse.failure(None, PARSE_ERROR, "Parse error")

    try:
        request = MCPRequest.model_validate(data)
    except ValidationError as exc:
        logger.warning("Envelope stdio inválido: %s", exc.errors())
        return MCPResponse.failure(None, INVALID_REQUEST, "Invalid Request")

    if request.id is None and request.method.startswith("notifications/"):
        logger.debug("Notificação recebida: %s", request.method)
        return None

    return handler.handle(request)


def serve_stdio(
    handler: RpcHandler,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> None:
    """Lê requisições até EOF em ``stdin`` e escreve uma resposta por linha."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    logger.info("Servidor MCP em modo stdio (%d ferramentas)", len(handler.registry))
    for line in stdin:
        envelope = handle_line(handler, line)
        if envelope is None:
            continue
        stdout.write(encode_json(envelope) + "\n")
        stdout.flush()
    logger.info("stdin encerrado; servidor stdio finalizado")
