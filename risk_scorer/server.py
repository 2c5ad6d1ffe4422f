"""
Risk Scorer — Servidor MCP
===========================
Ponto de entrada do servidor de ferramentas clínicas: monta o registro e o
expõe por HTTP (FastAPI + uvicorn, padrão) ou por stdio.

Execução direta:
    python -m risk_scorer.server            # HTTP
    python -m risk_scorer.server --stdio    # JSON-RPC delimitado por linha
    (ou MCP_TRANSPORT=stdio)

Teste manual:
    curl -s localhost:8080/mcp -H 'Content-Type: application/json' \\
        -d '{"jsonrpc":"2.0","id":1,"method":"tools/list","params":{}}'
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Garante que o pacote compartilhado é importável ao executar este arquivo diretamente.
# ---------------------------------------------------------------------------
_project_root = Path(__file__).resolve().parents[1]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from fastapi import FastAPI  # noqa: E402

from mcp_server.app import RpcHandler, create_app  # noqa: E402
from mcp_server.stdio import serve_stdio  # noqa: E402
from risk_scorer.tools import SERVER_NAME, SERVER_VERSION, build_registry  # noqa: E402
from shared.config import ServerSettings, Transport, configure_logging  # noqa: E402

logger = logging.getLogger(__name__)

_app: FastAPI | None = None


def build_app(settings: ServerSettings | None = None) -> FastAPI:
    configure_logging()
    settings = settings or ServerSettings.from_env()
    return create_app(
        build_registry(),
        settings,
        server_name=SERVER_NAME,
        server_version=SERVER_VERSION,
    )


def __getattr__(name: str) -> Any:
    # `uvicorn risk_scorer.server:app` — a aplicação só é montada quando pedida.
    global _app
    if name == "app":
        if _app is None:
            _app = build_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def run_stdio(settings: ServerSettings) -> None:
    handler = RpcHandler(build_registry(), settings, SERVER_NAME, SERVER_VERSION)
    logger.info("Risk Scorer MCP Server em modo STDIO")
    logger.info("Use MCP_TRANSPORT=http (padrão) para o endpoint HTTP /mcp")
    serve_stdio(handler)


def run_http(settings: ServerSettings) -> None:
    import uvicorn

    server_app = build_app(settings)

    logger.info("=" * 60)
    logger.info("Risk Scorer MCP Server")
    logger.info("HTTP: http://localhost:%s/mcp (modo %s)", settings.port, settings.response_mode.value)
    logger.info("Health: http://localhost:%s/health", settings.port)
    logger.info("Ferramentas: %d disponíveis", len(server_app.state.rpc_handler.registry))
    logger.info("=" * 60)

    uvicorn.run(server_app, host=settings.host, port=settings.port)


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()
    settings = ServerSettings.from_env()
    if "--stdio" in argv:
        settings.transport = Transport.STDIO

    if settings.transport is Transport.STDIO:
        run_stdio(settings)
    else:
        run_http(settings)


# ---------------------------------------------------------------------------
# Execução direta
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    main()
