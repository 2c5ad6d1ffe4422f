"""
Ferramentas do Risk Scorer
===========================
Handlers das três ferramentas clínicas e a montagem do registro. Cada
handler é uma função pura ``(argumentos) -> texto``; o despachante já
entrega os argumentos convertidos para os tipos do esquema.
"""

from __future__ import annotations

import json
from typing import Any

from mcp_server.registry import ToolRegistry
from risk_scorer.patients import HEALTH_CONDITIONS, PATIENTS
from shared.mcp_types import InputSchema, PropertySchema, ToolDescriptor

SERVER_NAME = "risk-scorer-mcp"
SERVER_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Handlers de ferramentas
# ---------------------------------------------------------------------------

def risk_category(score: float) -> str:
    # Comparações estritas: 30 e 60 exatos caem na categoria inferior.
    if score > 60:
        return "high"
    if score > 30:
        return "medium"
    return "low"


def handle_calculate_risk_score(arguments: dict[str, Any]) -> str:
    age = arguments.get("age")
    comorbidity_count = arguments.get("comorbidityCount")
    if age is None or comorbidity_count is None:
        raise ValueError("age and comorbidityCount are required")

    score = age * 0.2 + comorbidity_count * 5
    return json.dumps({"score": score, "category": risk_category(score)}, indent=2)


def handle_get_patient_health_conditions(arguments: dict[str, Any]) -> str:
    patient_id = arguments.get("patientId", "")
    conditions = HEALTH_CONDITIONS.get(patient_id, [])
    if not conditions:
        return json.dumps({"patientId": patient_id, "message": "No conditions found."}, indent=2)
    return json.dumps({"patientId": patient_id, "conditions": conditions}, indent=2)


def handle_get_patient_summary(arguments: dict[str, Any]) -> str:
    patient_id = arguments.get("patientId", "")
    patient = PATIENTS.get(patient_id)
    if patient is None:
        return f"No patient found with ID {patient_id}"
    conditions = HEALTH_CONDITIONS.get(patient_id, [])
    return json.dumps({**patient, "conditions": conditions}, indent=2)


# ---------------------------------------------------------------------------
# Configuração das ferramentas
# ---------------------------------------------------------------------------

_PATIENT_ID_SCHEMA = InputSchema(
    properties={"patientId": PropertySchema(type="string", description="Patient ID")},
    required=["patientId"],
)

TOOLS_CONFIG = [
    (
        ToolDescriptor(
            name="calculate_risk_score",
            description="Compute a clinical risk score from age and comorbidity count.",
            input_schema=InputSchema(
                properties={
                    "age": PropertySchema(type="number", description="Age of the patient"),
                    "comorbidityCount": PropertySchema(
                        type="number", description="Number of chronic conditions"
                    ),
                },
                required=["age", "comorbidityCount"],
            ),
        ),
        handle_calculate_risk_score,
    ),
    (
        ToolDescriptor(
            name="get_patient_health_conditions",
            description="Retrieve known health conditions for a patient.",
            input_schema=_PATIENT_ID_SCHEMA,
        ),
        handle_get_patient_health_conditions,
    ),
    (
        ToolDescriptor(
            name="get_patient_summary",
            description="Return demographic and condition summary for a patient.",
            input_schema=_PATIENT_ID_SCHEMA,
        ),
        handle_get_patient_summary,
    ),
]


def build_registry() -> ToolRegistry:
    """Registra as ferramentas do Risk Scorer na ordem anunciada aos clientes."""
    registry = ToolRegistry()
    for descriptor, handler in TOOLS_CONFIG:
        registry.register(descriptor, handler)
    return registry
