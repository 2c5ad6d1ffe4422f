"""
Registro de Ferramentas
========================
Guarda o conjunto de ferramentas invocáveis: descritor (nome, descrição,
esquema de entrada) e handler de cada uma. É montado uma vez na
inicialização do processo e apenas lido depois disso, por isso leituras
concorrentes não precisam de lock.

A ordem de registro é preservada e é a mesma anunciada em ``tools/list``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from shared.errors import DuplicateToolError, UnknownToolError
from shared.mcp_types import ToolDescriptor

logger = logging.getLogger(__name__)

# Handler de ferramenta: função pura (argumentos) -> texto.
ToolHandler = Callable[[dict[str, Any]], str]


@dataclass(frozen=True)
class RegisteredTool:
    descriptor: ToolDescriptor
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.descriptor.name


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """
        Adiciona uma ferramenta ao registro.

        Raises:
            DuplicateToolError: Se já existir uma ferramenta com o mesmo nome.
        """
        if descriptor.name in self._tools:
            raise DuplicateToolError(descriptor.name)
        self._tools[descriptor.name] = RegisteredTool(descriptor=descriptor, handler=handler)
        logger.info("Ferramenta registrada: %s", descriptor.name)

    def list(self) -> list[ToolDescriptor]:
        """Descritores em ordem de registro."""
        return [tool.descriptor for tool in self._tools.values()]

    def resolve(self, name: str) -> RegisteredTool:
        """
        Raises:
            UnknownToolError: Se nenhuma ferramenta tiver esse nome.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
