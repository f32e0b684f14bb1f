"""Prompt construction for the media-buyer advisor.

Builds the Spanish system prompts and the account context block from an
AccountSnapshot. Output is plain Markdown/JSON text; nothing here talks to
a model.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ..campaign_metrics.health_classifier import HealthClassifier
from ..models import AccountSnapshot, CampaignMetrics, HealthState

PERSONA = (
    "Eres un Media Buyer Senior con más de 10 años de experiencia gestionando "
    "presupuestos de Meta Ads para marcas de e-commerce y lead generation en Latinoamérica."
)

CHAT_SYSTEM_PROMPT = f"""{PERSONA}

## Tu rol:
Eres el consultor IA del dashboard TribuAnalyzer Pro. El usuario te puede hacer preguntas sobre sus campañas y tú respondes con análisis basados en los datos reales que tienes.

## Reglas:
- Responde SIEMPRE en español
- Usa Markdown limpio y estructurado con emojis
- Sé directo, accionable y específico, no genérico
- Incluye los números reales de las métricas en tus respuestas
- Si el usuario pide el diagnóstico completo, incluye: Resumen Ejecutivo, Creativos con Fatiga, Campañas para Escalar, Campañas para Optimizar, Recomendaciones de Apagado, y Próximos Pasos
- Si el usuario pregunta algo específico (ej: "¿por qué baja el ROAS de X?"), responde solo eso
- Si no hay datos suficientes, dilo explícitamente
- Analiza el embudo: ATC → IC → Compra y señala dónde hay caídas"""

# Section titles, in order, for the one-shot diagnostic.
DIAGNOSTIC_SECTIONS: List[str] = [
    "Resumen Ejecutivo",
    "🔴 Creativos con Fatiga",
    "🟢 Campañas para Escalar",
    "🟡 Campañas para Optimizar",
    "🔻 Recomendaciones de Apagado",
    "📊 Próximos Pasos",
]

INSUFFICIENT_DATA_NOTE = "Sin datos suficientes para esta sección"

DIAGNOSTIC_SYSTEM_PROMPT = f"""{PERSONA}

Tu tarea es analizar un JSON con métricas de campañas de Meta Ads y entregar un diagnóstico accionable.

## Tu análisis DEBE incluir:

### 1. {DIAGNOSTIC_SECTIONS[0]}
Un párrafo breve con el estado general de la cuenta.

### 2. {DIAGNOSTIC_SECTIONS[1]}
Identifica campañas con señales de fatiga:
- CTR por debajo de 1% o en tendencia a la baja
- Frecuencia alta (>3)
- ROAS decreciente
Explica POR QUÉ están fatigadas y qué hacer.

### 3. {DIAGNOSTIC_SECTIONS[2]}
Identifica campañas con potencial de escalamiento:
- ROAS alto (>2x)
- CPA por debajo del promedio
- CTR saludable (>1.5%)
Recomienda cuánto incrementar el presupuesto y cómo.

### 4. {DIAGNOSTIC_SECTIONS[3]}
Campañas con métricas mixtas que necesitan ajustes.

### 5. {DIAGNOSTIC_SECTIONS[4]}
Campañas que deberían pausarse inmediatamente y por qué.

### 6. {DIAGNOSTIC_SECTIONS[5]}
Lista concreta de 3-5 acciones prioritarias ordenadas por impacto.

## Reglas:
- Responde SIEMPRE en español
- Usa Markdown limpio y estructurado
- Sé directo y accionable, no genérico
- Si no hay suficientes datos para una sección, escribe explícitamente "{INSUFFICIENT_DATA_NOTE}"
- Incluye los números reales de las métricas en tu análisis
- Usa emojis para mejorar la legibilidad"""

# Fatigue hints mirror the diagnostic prompt's own criteria.
FATIGUE_MAX_CTR = 1.0
FATIGUE_MIN_FREQUENCY = 3.0


def _round(value: Optional[float], digits: int = 2) -> Optional[float]:
    return round(value, digits) if value is not None else None


def campaign_row(m: CampaignMetrics, health: HealthState) -> Dict[str, Any]:
    """Per-campaign dict with the Spanish keys the prompts reference."""
    return {
        "nombre": m.name,
        "estado": m.status.value,
        "salud": health.value,
        "gasto": _round(m.spend),
        "impresiones": m.impressions,
        "ctr": _round(m.ctr),
        "frecuencia": _round(m.frequency),
        "añadidos_carrito": m.add_to_cart,
        "pagos_iniciados": m.initiate_checkout,
        "compras": m.purchases,
        "revenue": _round(m.revenue),
        "roas": _round(m.roas),
        "cpa": _round(m.cpa),
        "cpc": _round(m.cpc),
    }


def campaign_rows(snapshot: AccountSnapshot, classifier: Optional[HealthClassifier] = None) -> List[Dict[str, Any]]:
    classifier = classifier or HealthClassifier()
    return [campaign_row(m, classifier.classify(m)) for m in snapshot.campaigns]


def account_summary_lines(snapshot: AccountSnapshot) -> List[str]:
    totals = snapshot.totals
    currency = snapshot.currency
    health = totals.health
    return [
        f"- Moneda: {currency}",
        f"- Período: {snapshot.window_label}",
        f"- Total de campañas: {totals.campaign_count} ({totals.active_count} activas)",
        f"- Gasto total: {totals.spend:.2f} {currency}",
        f"- Revenue total: {totals.revenue:.2f} {currency}",
        f"- ROAS general: {totals.roas_general:.2f}x",
        f"- CPA general: {totals.cpa_general:.2f} {currency}",
        f"- CTR promedio: {totals.ctr_average:.2f}%",
        f"- Compras totales: {totals.purchases}",
        f"- Añadidos al carrito totales: {totals.add_to_cart}",
        f"- Pagos iniciados totales: {totals.initiate_checkout}",
        f"- Salud: {health.green} 🟢 / {health.yellow} 🟡 / {health.red} 🔴 / {health.gray} ⚪",
    ]


def build_campaign_context(snapshot: AccountSnapshot, classifier: Optional[HealthClassifier] = None) -> str:
    """Account context block appended to the chat system prompt ('' when empty)."""
    if not snapshot.campaigns:
        return ""

    rows = campaign_rows(snapshot, classifier)
    return "\n".join([
        "",
        "",
        "## Datos de la cuenta de Meta Ads del usuario:",
        *account_summary_lines(snapshot),
        "",
        "**Datos por campaña:**",
        json.dumps(rows, indent=2, ensure_ascii=False),
    ])


def build_chat_system_prompt(snapshot: AccountSnapshot, classifier: Optional[HealthClassifier] = None) -> str:
    return CHAT_SYSTEM_PROMPT + build_campaign_context(snapshot, classifier)


def _names(campaigns: List[CampaignMetrics]) -> str:
    if not campaigns:
        return INSUFFICIENT_DATA_NOTE
    return ", ".join(m.name for m in campaigns)


def build_diagnostic_prompt(snapshot: AccountSnapshot, classifier: Optional[HealthClassifier] = None) -> str:
    """
    User prompt for the one-shot diagnostic.

    Pre-sorts campaigns into the section buckets using the health policy so
    the model starts from the same classification the dashboard shows; empty
    buckets are marked as lacking data.
    """
    classifier = classifier or HealthClassifier()
    by_state: Dict[HealthState, List[CampaignMetrics]] = {state: [] for state in HealthState}
    fatigued: List[CampaignMetrics] = []

    for m in snapshot.campaigns:
        by_state[classifier.classify(m)].append(m)
        if not classifier.is_dormant(m) and (m.ctr < FATIGUE_MAX_CTR or m.frequency > FATIGUE_MIN_FREQUENCY):
            fatigued.append(m)

    rows = [campaign_row(m, classifier.classify(m)) for m in snapshot.campaigns]

    return "\n".join([
        "Analiza estas campañas de Meta Ads.",
        "",
        "**Contexto de la cuenta:**",
        *account_summary_lines(snapshot),
        "",
        "**Clasificación previa:**",
        f"- Señales de fatiga: {_names(fatigued)}",
        f"- Candidatas a escalar (🟢): {_names(by_state[HealthState.GREEN])}",
        f"- Candidatas a optimizar (🟡): {_names(by_state[HealthState.YELLOW])}",
        f"- Candidatas a apagar/revisar (🔴): {_names(by_state[HealthState.RED])}",
        f"- Sin actividad (⚪): {_names(by_state[HealthState.GRAY])}",
        "",
        "**Datos por campaña:**",
        json.dumps(rows, indent=2, ensure_ascii=False),
    ])
