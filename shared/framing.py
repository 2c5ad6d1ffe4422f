"""
Enquadramento das respostas MCP sobre HTTP.

O corpo de uma resposta pode chegar de duas formas: o envelope JSON-RPC
direto ou uma única mensagem Server-Sent-Events (``event: message`` seguida
de ``data: <json>``). Os dois lados usam estas funções para que a mesma
resposta lógica decodifique para o mesmo ``MCPResponse``.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from shared.errors import TransportError
from shared.mcp_types import MCPResponse

SSE_MEDIA_TYPE = "text/event-stream"
JSON_MEDIA_TYPE = "application/json"

_SSE_MARKERS = ("event:", "data:")
_DATA_PREFIX = "data: "


def encode_json(envelope: MCPResponse) -> str:
    return json.dumps(envelope.to_wire(), ensure_ascii=False)


def encode_sse(envelope: MCPResponse) -> str:
    """Empacota o envelope como uma única mensagem SSE."""
    return f"event: message\n{_DATA_PREFIX}{encode_json(envelope)}\n\n"


def is_sse_body(body: str) -> bool:
    return body.lstrip().startswith(_SSE_MARKERS)


def extract_payload(body: str) -> str:
    """
    Retorna o texto JSON contido no corpo, desembrulhando SSE se necessário.

    Raises:
        TransportError: corpo SSE sem nenhuma linha ``data: ``.
    """
    if not is_sse_body(body):
        return body
    for line in body.splitlines():
        if line.startswith(_DATA_PREFIX):
            return line[len(_DATA_PREFIX):]
    raise TransportError("SSE response carried no 'data: ' line", body=body)


def parse_envelope(body: str) -> MCPResponse:
    """
    Decodifica um corpo de resposta (JSON puro ou SSE) em ``MCPResponse``.

    Raises:
        TransportError: JSON inválido ou envelope fora do formato JSON-RPC.
    """
    payload = extract_payload(body)
    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise TransportError(f"Invalid JSON in MCP response: {exc}", body=body) from exc

    if not isinstance(data, dict):
        raise TransportError("Unexpected MCP response shape", body=body)

    try:
        return MCPResponse.model_validate(data)
    except ValidationError as exc:
        raise TransportError(f"Malformed JSON-RPC envelope: {exc}", body=body) from exc
