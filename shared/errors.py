"""
Taxonomia de erros MCP
======================
Exceções compartilhadas pelo servidor (registro/despachante) e pelo cliente
(transporte HTTP). Todas derivam de ``MCPError`` para que o loop de
orquestração possa capturar qualquer falha de ferramenta com um único
``except``.
"""

from __future__ import annotations

from typing import Optional


class MCPError(Exception):
    """Base de todos os erros da camada MCP."""


# ---------------------------------------------------------------------------
# Lado do servidor
# ---------------------------------------------------------------------------

class DuplicateToolError(MCPError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Tool already registered: {name}")
        self.name = name


class UnknownToolError(MCPError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ArgumentTypeError(MCPError):
    """Um argumento não pôde ser convertido para o tipo declarado no esquema."""

    def __init__(self, tool: str, argument: str, expected: str, value: object) -> None:
        super().__init__(
            f"Invalid argument '{argument}' for tool '{tool}': "
            f"expected {expected}, got {value!r}"
        )
        self.tool = tool
        self.argument = argument
        self.expected = expected
        self.value = value


class MissingArgumentError(MCPError):
    """Argumentos obrigatórios ausentes (apenas com a política ``strict``)."""

    def __init__(self, tool: str, missing: list[str]) -> None:
        super().__init__(f"Missing required arguments for tool '{tool}': {', '.join(missing)}")
        self.tool = tool
        self.missing = missing


class ToolExecutionError(MCPError):
    """O handler da ferramenta lançou uma exceção; carrega a mensagem original."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(message)
        self.tool = tool
        self.message = message


# ---------------------------------------------------------------------------
# Lado do cliente
# ---------------------------------------------------------------------------

class TransportError(MCPError):
    """Falha de rede, status HTTP não-2xx ou corpo de resposta malformado."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransportTimeoutError(TransportError):
    """O prazo da chamada expirou antes de uma resposta chegar."""


class RpcError(MCPError):
    """O servidor respondeu com um envelope de erro JSON-RPC bem formado."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"JSON-RPC Error {code}: {message}")
        self.code = code
        self.message = message
