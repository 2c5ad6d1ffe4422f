"""
Orchestrator Host — Ponto de Entrada Principal
================================================
O Cliente MCP que conecta um LLM (Azure OpenAI ou OpenAI) às ferramentas
do servidor Risk Scorer.

Pipeline:
    1. Handshake        →  initialize no servidor MCP
    2. Descoberta       →  tools/list → um ToolProxy por ferramenta
    3. Chamada ao LLM   →  ferramentas anunciadas como function tools
    4. Execução         →  cada tool_call do LLM vira um tools/call via proxy
    5. Resposta final   →  resultados voltam ao LLM como mensagens 'tool'

Notas de arquitetura:
    Falhas de ferramenta não interrompem a conversa — qualquer ``MCPError``
    de um proxy é devolvido ao LLM como texto ``Error: ...`` no lugar do
    resultado, e o LLM decide como informar o usuário.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from openai import AzureOpenAI, OpenAI

# ---------------------------------------------------------------------------
# Garante que a raiz do projeto está no sys.path para `shared` ser importável.
# ---------------------------------------------------------------------------
_project_root = Path(__file__).resolve().parents[1]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from orchestrator_host.client import MCPClient                 # noqa: E402
from orchestrator_host.proxy import ToolProxy, build_tool_proxies  # noqa: E402
from shared.config import ClientSettings, LLMSettings, configure_logging  # noqa: E402
from shared.errors import MCPError                              # noqa: E402

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Rótulos — tornam cada etapa visível no CLI
# ---------------------------------------------------------------------------
AGENT_ORCHESTRATOR = "[Orchestrator]"
AGENT_MCP = "[Cliente MCP]"
AGENT_LLM = "[LLM]"

# ---------------------------------------------------------------------------
# Prompt de sistema — carregado de arquivo externo em prompts/ para legibilidade.
# ---------------------------------------------------------------------------
SYSTEM_PROMPT = (
    _project_root / "prompts" / "clinical_assistant.txt"
).read_text(encoding="utf-8")

TEST_QUERIES = [
    "Calculate the risk score for a 72-year-old patient with 5 comorbidities.",
    "What health conditions does patient P001 have?",
    "Give me a complete summary of patient P003.",
    "What is the risk score for patient P002? They are 45 years old with 1 comorbidity.",
    "Compare the health conditions of patients P001 and P002.",
    "Which patient has the highest risk: Alice Johnson (68 years, 3 comorbidities) "
    "or Maria Lopez (72 years, 5 comorbidities)?",
]


def build_llm_client(settings: LLMSettings) -> tuple[OpenAI, str]:
    """
    Inicializa o cliente do LLM conforme ``MODEL_PROVIDER``.

    Returns:
        O cliente e o nome do modelo/deployment a usar.
    """
    if settings.provider == "azure":
        if not settings.azure_api_key or not settings.azure_endpoint:
            raise ValueError(
                "AZURE_OPENAI_KEY e AZURE_OPENAI_ENDPOINT devem estar definidos no arquivo .env."
            )
        client = AzureOpenAI(
            api_key=settings.azure_api_key,
            api_version="2024-06-01",
            azure_endpoint=settings.azure_endpoint,
        )
        return client, settings.azure_deployment

    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY deve estar definido no arquivo .env.")
    return OpenAI(api_key=settings.openai_api_key), settings.openai_model


def execute_tool_call(proxies: dict[str, ToolProxy], name: str, raw_arguments: str) -> str:
    """Executa um tool_call do LLM; erros viram texto para o LLM, nunca exceções."""
    proxy = proxies.get(name)
    if proxy is None:
        return f"Error: unknown tool '{name}'"
    try:
        arguments = json.loads(raw_arguments or "{}")
    except json.JSONDecodeError as exc:
        return f"Error: invalid tool arguments: {exc}"
    try:
        return proxy.invoke(arguments)
    except MCPError as exc:
        logger.warning("Falha na ferramenta %s: %s", name, exc)
        return f"Error: {exc}"


def run_query(
    llm: OpenAI,
    model: str,
    proxies: dict[str, ToolProxy],
    query: str,
) -> str:
    """
    Executa uma rodada de tool calling: LLM → ferramentas → LLM.

    Returns:
        A resposta final do LLM em texto.
    """
    tools = [proxy.to_openai_tool() for proxy in proxies.values()]
    messages: list[dict[str, Any]] = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": query},
    ]

    response = llm.chat.completions.create(
        model=model,
        temperature=0.2,
        messages=messages,
        tools=tools,
    )
    message = response.choices[0].message

    if not message.tool_calls:
        return (message.content or "").strip()

    messages.append(
        {
            "role": "assistant",
            "content": message.content,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.function.name,
                        "arguments": call.function.arguments,
                    },
                }
                for call in message.tool_calls
            ],
        }
    )
    for call in message.tool_calls:
        print(f"{AGENT_MCP} tools/call → {call.function.name} {call.function.arguments}")
        result = execute_tool_call(proxies, call.function.name, call.function.arguments)
        messages.append({"role": "tool", "tool_call_id": call.id, "content": result})

    final = llm.chat.completions.create(
        model=model,
        temperature=0.2,
        messages=messages,
        tools=tools,
    )
    return (final.choices[0].message.content or "").strip()


def main() -> None:
    """Executa as consultas de teste contra o servidor MCP configurado."""
    configure_logging()

    print("=" * 70)
    print("  Risk Scorer — Cliente MCP com LLM")
    print("  Protocolo: MCP sobre HTTP / JSON-RPC 2.0")
    print("=" * 70)
    print()

    try:
        llm, model = build_llm_client(LLMSettings.from_env())
    except ValueError as exc:
        print(f"ERRO: {exc}")
        sys.exit(1)

    client_settings = ClientSettings.from_env()
    with MCPClient(client_settings.server_url, timeout=client_settings.timeout_seconds) as client:
        try:
            client.initialize()
            proxies = build_tool_proxies(client)
        except MCPError as exc:
            print(f"{AGENT_MCP} ERRO ao conectar em {client_settings.server_url}: {exc}")
            sys.exit(1)

        server = client.server_info or {}
        print(f"{AGENT_MCP} Conectado a {server.get('name', '?')} {server.get('version', '')}")
        print(f"{AGENT_MCP} {len(proxies)} ferramenta(s) carregada(s):")
        for proxy in proxies.values():
            print(f"   • {proxy.name} — {proxy.description}")

        print(f"\n{AGENT_ORCHESTRATOR} Testando o LLM ({model}) com as ferramentas MCP:")
        print("=" * 70)

        for index, query in enumerate(TEST_QUERIES, start=1):
            print(f"\n{AGENT_ORCHESTRATOR} Teste {index}/{len(TEST_QUERIES)}")
            print(f"Consulta: \"{query}\"\n")

            answer = run_query(llm, model, proxies, query)
            print(f"\n{AGENT_LLM} {answer}")
            print("\n" + "─" * 70)

            # Pequena pausa entre requisições ao LLM
            if index < len(TEST_QUERIES):
                time.sleep(0.5)

    print(f"\n{AGENT_ORCHESTRATOR} Todos os testes concluídos!")


if __name__ == "__main__":
    main()
