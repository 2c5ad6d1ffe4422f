"""
Definições de Tipos MCP JSON-RPC
=================================
Tipos de mensagem padronizados para a camada de comunicação do Model Context
Protocol (MCP) entre o Orchestrator Host (cliente) e o servidor de
ferramentas Risk Scorer.

Nota de arquitetura — Fonte Única da Verdade:
    Servidor e cliente importam estes mesmos modelos, então o envelope
    JSON-RPC e os descritores de ferramenta têm uma única definição. Os nomes
    de campo (``inputSchema``, ``protocolVersion``...) seguem exatamente o
    formato do protocolo, incluindo maiúsculas/minúsculas.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator

PROTOCOL_VERSION = "2024-11-05"

# Códigos de erro JSON-RPC 2.0 usados pelo servidor.
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


# ---------------------------------------------------------------------------
# Descritores de ferramentas
# ---------------------------------------------------------------------------

class PropertySchema(BaseModel):
    """Esquema de um único parâmetro de ferramenta."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Tipo do parâmetro: 'number' ou 'string'")
    description: str = Field(default="", description="Descrição legível do parâmetro")


class InputSchema(BaseModel):
    """
    Esquema de entrada de uma ferramenta (subconjunto de JSON Schema).

    Todo nome listado em ``required`` precisa existir em ``properties``.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["object"] = "object"
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_must_be_declared(self) -> "InputSchema":
        undeclared = [name for name in self.required if name not in self.properties]
        if undeclared:
            raise ValueError(f"Campos obrigatórios sem propriedade declarada: {undeclared}")
        return self


class ToolDescriptor(BaseModel):
    """Nome, descrição e esquema de entrada de uma ferramenta registrada."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Identificador único e estável")
    description: str = Field(default="", description="Descrição para humanos e LLMs")
    input_schema: InputSchema = Field(default_factory=InputSchema, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        """Serializa com exatamente os campos ``name, description, inputSchema``."""
        return self.model_dump(by_alias=True)


class ContentItem(BaseModel):
    """Unidade tipada de saída de uma ferramenta — sempre texto neste sistema."""

    type: str = "text"
    text: str = ""


# ---------------------------------------------------------------------------
# Envelope JSON-RPC
# ---------------------------------------------------------------------------

class MCPRequest(BaseModel):
    """
    Envelope de requisição JSON-RPC 2.0 usado pelo cliente para invocar um
    método no servidor MCP.

    O ``id`` é opcional apenas para notificações (ex.:
    ``notifications/initialized``).
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="Versão do protocolo JSON-RPC")
    # Sem coerção: o id volta na resposta exatamente como foi enviado.
    id: Optional[StrictInt] = Field(default=None, description="Id de correlação atribuído pelo cliente")
    method: str = Field(
        ...,
        description="Método MCP a invocar (ex.: 'initialize', 'tools/list', 'tools/call')",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Parâmetros específicos do método",
    )


class RpcErrorObject(BaseModel):
    """Objeto ``error`` de uma resposta JSON-RPC."""

    code: int
    message: str


class MCPResponse(BaseModel):
    """
    Envelope de resposta JSON-RPC 2.0 retornado pelo servidor MCP.
    Exatamente um entre `result` ou `error` estará presente.
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="Versão do protocolo JSON-RPC")
    id: Optional[StrictInt] = Field(default=None, description="Deve corresponder ao id da requisição")
    result: Optional[dict[str, Any]] = Field(
        default=None,
        description="Payload do resultado bem-sucedido",
    )
    error: Optional[RpcErrorObject] = Field(
        default=None,
        description="Objeto de erro com código e mensagem",
    )

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "MCPResponse":
        if (self.result is None) == (self.error is None):
            raise ValueError("A resposta deve conter exatamente um entre 'result' e 'error'")
        return self

    @classmethod
    def success(cls, request_id: Optional[int], result: dict[str, Any]) -> "MCPResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Optional[int], code: int, message: str) -> "MCPResponse":
        return cls(id=request_id, error=RpcErrorObject(code=code, message=message))

    def to_wire(self) -> dict[str, Any]:
        """Dict pronto para ``json.dumps``; ``id`` é sempre emitido (``null`` se ausente)."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump()
        else:
            payload["result"] = self.result
        return payload
