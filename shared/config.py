"""
Configuração via variáveis de ambiente
=======================================
Lê ``<raiz do projeto>/.env`` com python-dotenv e monta objetos de
configuração simples para o servidor MCP, o cliente MCP e o LLM do
orquestrador. Valores inválidos falham cedo, no carregamento.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

_project_root = Path(__file__).resolve().parents[1]


class ResponseMode(str, Enum):
    """Como o servidor enquadra o envelope JSON-RPC na resposta HTTP."""

    JSON = "json"
    SSE = "sse"
    AUTO = "auto"


class Transport(str, Enum):
    """Transporte do servidor: HTTP (``/mcp``) ou JSON-RPC por linha em stdio."""

    HTTP = "http"
    STDIO = "stdio"


class RequiredArgsPolicy(str, Enum):
    """O que o despachante faz quando faltam argumentos obrigatórios."""

    LENIENT = "lenient"
    STRICT = "strict"


def load_env() -> None:
    """Carrega o ``.env`` da raiz do projeto sem sobrescrever o ambiente."""
    load_dotenv(dotenv_path=_project_root / ".env")


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _list_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080
    response_mode: ResponseMode = ResponseMode.JSON
    required_args: RequiredArgsPolicy = RequiredArgsPolicy.LENIENT
    tool_errors_as_content: bool = False
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    transport: Transport = Transport.HTTP

    @classmethod
    def from_env(cls) -> "ServerSettings":
        load_env()
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            response_mode=ResponseMode(os.getenv("MCP_RESPONSE_MODE", "json").lower()),
            required_args=RequiredArgsPolicy(os.getenv("MCP_REQUIRED_ARGS", "lenient").lower()),
            tool_errors_as_content=_bool_env("MCP_TOOL_ERRORS_AS_CONTENT"),
            cors_origins=_list_env("MCP_CORS_ORIGINS", "*"),
            transport=Transport(os.getenv("MCP_TRANSPORT", "http").strip().lower()),
        )


@dataclass
class ClientSettings:
    server_url: str = "http://localhost:8080/mcp"
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "ClientSettings":
        load_env()
        return cls(
            server_url=os.getenv("MCP_SERVER_URL", "http://localhost:8080/mcp"),
            timeout_seconds=float(os.getenv("MCP_TIMEOUT_SECONDS", "30")),
        )


@dataclass
class LLMSettings:
    """Provedor do LLM: ``azure`` (Azure OpenAI) ou ``openai``."""

    provider: str = "azure"
    azure_api_key: str = ""
    azure_endpoint: str = ""
    azure_deployment: str = "gpt-4o"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    @classmethod
    def from_env(cls) -> "LLMSettings":
        load_env()
        provider = os.getenv("MODEL_PROVIDER", "azure").strip().lower()
        if provider not in {"azure", "openai"}:
            raise ValueError(f"MODEL_PROVIDER inválido: '{provider}' (use 'azure' ou 'openai')")
        return cls(
            provider=provider,
            azure_api_key=os.getenv("AZURE_OPENAI_KEY", ""),
            azure_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT", ""),
            azure_deployment=os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o"),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        )


def configure_logging() -> None:
    """Configura o logging raiz a partir de ``LOG_LEVEL`` (padrão INFO)."""
    load_env()
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
