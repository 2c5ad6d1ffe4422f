"""
Proxy de Ferramentas — adaptador do lado do cliente
=====================================================
Envolve cada ferramenta descoberta via ``tools/list`` como uma unidade
chamável localmente. A invocação encaminha para ``tools/call`` e desembrulha
o array de conteúdo em uma única string, pronta para virar a mensagem de
resultado de ferramenta de uma conversa com o LLM.

Os argumentos são validados no cliente com um modelo pydantic gerado a
partir do esquema da ferramenta (``number`` → float, ``string`` → str), antes
de qualquer requisição sair pela rede.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from orchestrator_host.client import MCPClient
from shared.errors import ArgumentTypeError
from shared.mcp_types import ContentItem, ToolDescriptor

_PYTHON_TYPES: dict[str, type] = {
    "number": float,
    "string": str,
}


class _ToolArguments(BaseModel):
    # Argumentos extras seguem para o servidor, que decide o que fazer com eles.
    model_config = ConfigDict(extra="allow")


def build_arguments_model(descriptor: ToolDescriptor) -> type[BaseModel]:
    """
    Gera um modelo pydantic equivalente ao ``inputSchema`` da ferramenta.

    Os campos internos têm nomes sintéticos (``arg_0``, ``arg_1``...) com o
    nome anunciado pelo servidor como alias, então propriedades como
    ``model_config`` ou ``patient-id`` não colidem com o próprio pydantic.
    """
    schema = descriptor.input_schema
    fields: dict[str, Any] = {}
    for index, (name, prop) in enumerate(schema.properties.items()):
        annotation = _PYTHON_TYPES.get(prop.type, Any)
        if name in schema.required:
            fields[f"arg_{index}"] = (annotation, Field(..., alias=name))
        else:
            fields[f"arg_{index}"] = (Optional[annotation], Field(None, alias=name))
    return create_model("ToolArguments", __base__=_ToolArguments, **fields)


def content_to_text(content: list[ContentItem]) -> str:
    """Texto do primeiro item ``text``; sem nenhum, o JSON da sequência inteira."""
    for item in content:
        if item.type == "text":
            return item.text
    return json.dumps([item.model_dump() for item in content])


class ToolProxy:
    """Ferramenta MCP remota exposta como chamável local, sem estado."""

    def __init__(self, client: MCPClient, descriptor: ToolDescriptor) -> None:
        self.client = client
        self.descriptor = descriptor
        self.arguments_model = build_arguments_model(descriptor)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def description(self) -> str:
        return self.descriptor.description

    def validate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """
        Raises:
            ArgumentTypeError: Argumento ausente ou incompatível com o esquema.
        """
        try:
            parsed = self.arguments_model.model_validate(arguments)
        except ValidationError as exc:
            first = exc.errors()[0]
            argument = ".".join(str(part) for part in first["loc"]) or "arguments"
            prop = self.descriptor.input_schema.properties.get(argument)
            raise ArgumentTypeError(
                self.name,
                argument,
                prop.type if prop is not None else "object",
                first.get("input"),
            ) from exc
        return parsed.model_dump(by_alias=True, exclude_none=True)

    def invoke(self, arguments: dict[str, Any] | None = None) -> str:
        """Valida, encaminha para ``tools/call`` e devolve o resultado como texto."""
        validated = self.validate(arguments or {})
        content = self.client.call_tool(self.name, validated)
        return content_to_text(content)

    def __call__(self, **kwargs: Any) -> str:
        return self.invoke(kwargs)

    def to_openai_tool(self) -> dict[str, Any]:
        """Definição de ferramenta no formato de function calling da OpenAI."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.descriptor.input_schema.model_dump(),
            },
        }

    def __repr__(self) -> str:
        return f"ToolProxy(name={self.name!r})"


def build_tool_proxies(client: MCPClient) -> dict[str, ToolProxy]:
    """Descobre as ferramentas do servidor e cria um proxy para cada uma, em ordem."""
    return {descriptor.name: ToolProxy(client, descriptor) for descriptor in client.list_tools()}
