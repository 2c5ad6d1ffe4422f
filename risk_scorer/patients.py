"""
Banco de Dados Mock de Pacientes
=================================
Dados fixos usados pelas ferramentas do Risk Scorer. Em produção seria
conectado a um prontuário eletrônico real (EHR / FHIR).
"""

from __future__ import annotations

from typing import Any

PATIENTS: dict[str, dict[str, Any]] = {
    "P001": {"name": "Alice Johnson", "age": 68, "comorbidities": 3},
    "P002": {"name": "Robert Smith", "age": 45, "comorbidities": 1},
    "P003": {"name": "Maria Lopez", "age": 72, "comorbidities": 5},
}

HEALTH_CONDITIONS: dict[str, list[dict[str, str]]] = {
    "P001": [
        {"name": "Type 2 Diabetes", "severity": "moderate", "dateDiagnosed": "2019-05-12"},
        {"name": "Hypertension", "severity": "mild", "dateDiagnosed": "2015-09-03"},
    ],
    "P002": [
        {"name": "Asthma", "severity": "mild", "dateDiagnosed": "2002-11-22"},
    ],
    "P003": [
        {"name": "Chronic Kidney Disease", "severity": "severe", "dateDiagnosed": "2018-04-01"},
        {"name": "Coronary Artery Disease", "severity": "severe", "dateDiagnosed": "2020-10-10"},
    ],
}
