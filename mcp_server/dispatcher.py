"""
Despachante de Ferramentas
===========================
Dado o nome de uma ferramenta e um dicionário de argumentos, valida e
converte os argumentos conforme o esquema registrado e invoca o handler,
produzindo uma lista de itens de conteúdo ou uma falha tipada.

Notas:
    Política de obrigatórios — por padrão (``lenient``) argumentos
    obrigatórios ausentes são tolerados e o handler degrada sozinho (ex.:
    busca vazia). Com ``strict`` a chamada falha com
    ``MissingArgumentError`` antes de chegar ao handler.

    Isolamento de falhas — qualquer exceção do handler vira
    ``ToolExecutionError``; uma chamada ruim nunca derruba o servidor.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from mcp_server.registry import ToolRegistry
from shared.config import RequiredArgsPolicy
from shared.errors import ArgumentTypeError, MissingArgumentError, ToolExecutionError
from shared.mcp_types import ContentItem, ToolDescriptor

logger = logging.getLogger(__name__)


def _finite(tool: str, key: str, raw: Any, number: int | float) -> int | float:
    # NaN/Infinity não cabem em JSON; inteiros enormes estouram como float.
    try:
        finite = math.isfinite(number)
    except OverflowError:
        finite = False
    if not finite:
        raise ArgumentTypeError(tool, key, "number", raw)
    return number


def _coerce_number(tool: str, key: str, value: Any) -> int | float:
    # bool é subclasse de int, mas não é um número no esquema.
    if isinstance(value, bool):
        raise ArgumentTypeError(tool, key, "number", value)
    if isinstance(value, (int, float)):
        return _finite(tool, key, value, value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return _finite(tool, key, value, int(text))
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            raise ArgumentTypeError(tool, key, "number", value) from None
        return _finite(tool, key, value, number)
    raise ArgumentTypeError(tool, key, "number", value)


def _coerce_string(tool: str, key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ArgumentTypeError(tool, key, "string", value)


_COERCERS = {
    "number": _coerce_number,
    "string": _coerce_string,
}


def coerce_arguments(descriptor: ToolDescriptor, arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Converte cada argumento declarado para o tipo do esquema.

    Argumentos não declarados passam intactos; propriedades sem conversor
    conhecido também.
    """
    properties = descriptor.input_schema.properties
    coerced: dict[str, Any] = {}
    for key, value in arguments.items():
        prop = properties.get(key)
        coercer = _COERCERS.get(prop.type) if prop is not None else None
        coerced[key] = coercer(descriptor.name, key, value) if coercer else value
    return coerced


class ToolDispatcher:
    def __init__(
        self,
        registry: ToolRegistry,
        required_args: RequiredArgsPolicy = RequiredArgsPolicy.LENIENT,
    ) -> None:
        self.registry = registry
        self.required_args = required_args

    def dispatch(self, name: str, arguments: dict[str, Any] | None = None) -> list[ContentItem]:
        """
        Executa a ferramenta ``name`` com ``arguments``.

        Returns:
            Uma lista com um único ``ContentItem`` de texto.

        Raises:
            UnknownToolError: Ferramenta não registrada (propagado sem alteração).
            MissingArgumentError: Obrigatórios ausentes com a política ``strict``.
            ArgumentTypeError: Argumento incompatível com o tipo declarado.
            ToolExecutionError: O handler falhou.
        """
        tool = self.registry.resolve(name)
        arguments = arguments or {}

        missing = [key for key in tool.descriptor.input_schema.required if key not in arguments]
        if missing:
            if self.required_args is RequiredArgsPolicy.STRICT:
                raise MissingArgumentError(name, missing)
            logger.warning("Ferramenta %s chamada sem argumentos obrigatórios: %s", name, missing)

        coerced = coerce_arguments(tool.descriptor, arguments)

        logger.info("Ferramenta chamada: %s", name)
        logger.info("Parâmetros: %s", coerced)
        try:
            text = tool.handler(coerced)
        except Exception as exc:
            logger.warning("Falha na execução de %s: %s", name, exc)
            raise ToolExecutionError(name, str(exc) or exc.__class__.__name__) from exc

        if not isinstance(text, str):
            logger.warning("Handler de %s retornou %s em vez de texto", name, type(text).__name__)
            raise ToolExecutionError(name, f"Tool '{name}' returned a non-text result")

        logger.info("Ferramenta %s executada com sucesso", name)
        return [ContentItem(type="text", text=text)]
