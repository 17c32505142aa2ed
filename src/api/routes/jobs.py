"""
Rotas de /api/jobs: estatísticas dos processing_jobs, agregado por fase,
análises por IA (phase_analyses) e diagnóstico de campos dos chats.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from loguru import logger

from src.api.schemas.jobs import (
    ChatFieldsDebugResponse,
    DashboardAggregateResponse,
    JobStatsResponse,
)
from src.api.schemas.phase_analysis import (
    PhaseAnalysisListResponse,
    PhaseAnalysisResponse,
    PhaseAnalysisSave,
    PhaseAnalysisSavedResponse,
)
from src.api.schemas.responses import ErrorResponse
from src.core.config import get_settings
from src.core.exceptions import PhaseAnalysisNotFoundError
from src.domain.analytics.models import AggregationStrategy, TopWord
from src.domain.analytics.periods import Period, resolve_period
from src.domain.services.dashboard_service import (
    DashboardParams,
    DashboardService,
    get_dashboard_service,
)

settings = get_settings()
router = APIRouter(responses={503: {"model": ErrorResponse}})


@router.get("/stats", response_model=JobStatsResponse, response_model_by_alias=True)
async def get_job_stats(
    period: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Contagem de jobs por status.
    Sem period = histórico inteiro.
    """
    stats = await service.get_job_stats(resolve_period(period, Period.ALL))
    return JobStatsResponse.model_validate(stats)


@router.get("/analytics", response_model=DashboardAggregateResponse, response_model_by_alias=True)
async def get_analytics(
    period: Optional[str] = Query(None),
    game_id: Optional[str] = Query(None, alias="gameId"),
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Agregado completo por fase (chats + processing_jobs), com top words.
    """
    params = DashboardParams(
        period=resolve_period(period, Period(settings.default_period)),
        game_id=game_id,
    )
    aggregate = await service.compute_dashboard_aggregate(
        AggregationStrategy.CONVERSATIONS, params
    )
    return DashboardAggregateResponse.model_validate(aggregate)


# ========================================
# ANÁLISES POR IA
# ========================================

@router.get("/phase-analyses", response_model=PhaseAnalysisListResponse, response_model_by_alias=True)
async def list_phase_analyses(
    game_id: Optional[str] = Query(None, alias="gameId"),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Análises de um jogo (gameId vazio = lista vazia)."""
    analyses = await service.list_phase_analyses(game_id)
    return PhaseAnalysisListResponse(
        analyses=[PhaseAnalysisResponse.model_validate(a) for a in analyses]
    )


@router.get(
    "/phase-analyses/{game_id}/{phase_id}",
    response_model=PhaseAnalysisResponse,
    response_model_by_alias=True,
    responses={404: {"model": ErrorResponse}}
)
async def get_phase_analysis(
    game_id: str,
    phase_id: str,
    service: DashboardService = Depends(get_dashboard_service)
):
    analysis = await service.get_phase_analysis(game_id, phase_id)
    if analysis is None:
        raise PhaseAnalysisNotFoundError(game_id, phase_id)
    return PhaseAnalysisResponse.model_validate(analysis)


@router.post(
    "/phase-analyses",
    response_model=PhaseAnalysisSavedResponse,
    response_model_by_alias=True,
    responses={422: {"model": ErrorResponse}}
)
async def save_phase_analysis(
    body: PhaseAnalysisSave,
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Cria ou atualiza a análise de uma fase (merge).
    Só os campos enviados são sobrescritos.
    """
    top_words = None
    if body.top_words is not None:
        top_words = [TopWord(word=w.word, count=w.count) for w in body.top_words]

    doc_id, generated_at = await service.save_phase_analysis(
        body.game_id,
        body.phase_id,
        phase_name=body.phase_name,
        analysis_text=body.analysis_text,
        top_words=top_words,
    )
    logger.info(f"Phase analysis {doc_id} stored via API")
    return PhaseAnalysisSavedResponse(id=doc_id, generated_at=generated_at)


# ========================================
# DIAGNÓSTICO
# ========================================

@router.get("/debug/chat-fields", response_model=ChatFieldsDebugResponse, response_model_by_alias=True)
async def debug_chat_fields(
    limit: int = Query(5),
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Campos reais das mensagens de uma amostra de chats (máx. 20).
    Útil para descobrir onde a fase está gravada.
    """
    report = await service.debug_chat_fields(limit)
    return ChatFieldsDebugResponse.model_validate(report)
