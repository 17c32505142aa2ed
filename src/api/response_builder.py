"""
Monta a resposta do dashboard (séries por fase + análises por IA)
a partir do agregado calculado.
"""

from datetime import UTC
from typing import Iterable, List, Optional, Sequence

from src.api.schemas.dashboard import (
    AIAnalysisEntry,
    AverageTimesSeries,
    DashboardResponse,
    GiveupWordsSeries,
    PhaseMessagesSeries,
    SwearWordsSeries,
    TopWordResponse,
)
from src.domain.analytics.models import DashboardAggregate, PhaseAggregate, PhaseAnalysis

# Bucket legado que agrupava tudo; não é uma fase de verdade
GENERAL_PHASE_NAMES = frozenset({"general", "geral"})


def is_general_phase(phase: PhaseAggregate) -> bool:
    return (
        phase.phase_key.strip().lower() in GENERAL_PHASE_NAMES
        or phase.phase_name.strip().lower() in GENERAL_PHASE_NAMES
    )


def visible_phases(
    phases: Sequence[PhaseAggregate],
    exclude_general: bool
) -> List[PhaseAggregate]:
    if not exclude_general:
        return list(phases)
    return [p for p in phases if not is_general_phase(p)]


def to_ai_analysis(analyses: Iterable[PhaseAnalysis]) -> List[AIAnalysisEntry]:
    entries = []
    for analysis in analyses:
        created_at = None
        if analysis.generated_at is not None:
            created_at = (
                analysis.generated_at.astimezone(UTC)
                .isoformat(timespec="milliseconds")
                .replace("+00:00", "Z")
            )
        entries.append(AIAnalysisEntry(
            phase_id=analysis.phase_id,
            phase=analysis.phase_name or analysis.phase_id,
            analysis=analysis.analysis_text or "",
            created_at=created_at,
            top_words=[TopWordResponse(word=w.word, count=w.count) for w in analysis.top_words],
        ))
    return entries


def build_dashboard_response(
    game_type: Optional[str],
    aggregate: DashboardAggregate,
    analyses: Iterable[PhaseAnalysis],
    exclude_general: bool = False
) -> DashboardResponse:
    """
    Séries rotuladas por fase (tempo médio, insultos, desistências, mensagens),
    tempo médio total e análises por IA.

    Com ``exclude_general`` a fase "Geral"/"general" some das séries, mas
    continua contando nos totais do agregado.
    """
    phases = visible_phases(aggregate.phases, exclude_general)
    labels = [p.phase_name for p in phases]

    swear_data = [p.offense_count for p in phases]
    giveup_data = [p.giveup_count for p in phases]

    return DashboardResponse(
        game_type=game_type,
        period=aggregate.period,
        average_times=AverageTimesSeries(
            labels=labels,
            data=[p.mean_duration_minutes for p in phases],
            avg_total_time=aggregate.mean_total_minutes,
        ),
        swear_words=SwearWordsSeries(
            labels=labels,
            data=swear_data,
            total_swear_words=sum(swear_data),
        ),
        giveup_words=GiveupWordsSeries(
            labels=labels,
            data=giveup_data,
            total_giveup_words=sum(giveup_data),
        ),
        phase_messages=PhaseMessagesSeries(
            labels=labels,
            data=[p.message_count for p in phases],
        ),
        ai_analysis=to_ai_analysis(analyses),
    )
