"""
Serviço do Dashboard de Análise.
Orquestra as leituras no Firestore (em paralelo) e a agregação por fase.
"""

import asyncio
import time
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from loguru import logger

from src.core.config import get_settings
from src.core.exceptions import MissingPhaseKeyError
from src.core.logging import log_aggregation, mask_phone_number
from src.domain.analytics.aggregator import (
    aggregate_agent_responses,
    aggregate_conversations,
    phase_totals,
)
from src.domain.analytics.field_probe import inspect_chat_fields
from src.domain.analytics.job_stats import build_job_stats, mean_job_duration_minutes
from src.domain.analytics.models import (
    AggregationStrategy,
    DashboardAggregate,
    JobStats,
    JobStatus,
    PhaseAnalysis,
    PhaseFoldResult,
    TopWord,
)
from src.domain.analytics.periods import (
    Period,
    now_ms,
    period_start_datetime,
    period_start_ms,
)
from src.infrastructure.firestore.client import get_firestore
from src.infrastructure.firestore.repositories import (
    AgentResponseRepository,
    ConversationRepository,
    JobRepository,
    PhaseAnalysisRepository,
)

settings = get_settings()


class DashboardParams(NamedTuple):
    period: Period = Period.LAST_7_DAYS
    game_id: Optional[str] = None


class DashboardView(NamedTuple):
    """Agregado + análises por IA de um jogo; a API monta as séries."""
    game_id: Optional[str]
    aggregate: DashboardAggregate
    analyses: List[PhaseAnalysis]


def fold_source(
    strategy: AggregationStrategy,
    rows: Sequence[Dict[str, Any]],
    params: DashboardParams,
    since_ms: Optional[int],
    top_words_limit: int
) -> PhaseFoldResult:
    """Aplica a estratégia sobre as linhas já lidas (puro)."""
    if strategy is AggregationStrategy.AGENT_RESPONSES:
        return aggregate_agent_responses(rows, game_id=params.game_id, since_ms=since_ms)
    return aggregate_conversations(rows, game_id=params.game_id, top_words_limit=top_words_limit)


def assemble_aggregate(
    strategy: AggregationStrategy,
    params: DashboardParams,
    job_stats: JobStats,
    job_mean_minutes: float,
    fold: PhaseFoldResult
) -> DashboardAggregate:
    """
    Junta contagem de jobs e métricas por fase.

    Tempo médio total: CONVERSATIONS usa o tempo médio dos processing_jobs;
    AGENT_RESPONSES usa a média do intervalo por telefone.
    """
    totals = phase_totals(fold.phases)
    if strategy is AggregationStrategy.AGENT_RESPONSES:
        mean_total = fold.mean_total_minutes or 0.0
    else:
        mean_total = job_mean_minutes

    return DashboardAggregate(
        strategy=strategy,
        job_stats=job_stats,
        mean_total_minutes=mean_total,
        mean_job_duration_minutes=job_mean_minutes,
        total_messages=totals.messages,
        total_offenses=totals.offenses,
        total_giveups=totals.giveups,
        mean_messages_per_phase=totals.mean_messages_per_phase,
        phases=fold.phases,
        period=None if params.period is Period.ALL else params.period.value,
        game_id=params.game_id,
    )


class DashboardService:
    """
    Métricas do Dashboard de Análise.

    Cada requisição lê uma amostra limitada e recente de cada fonte e monta
    o agregado do zero; nada é cacheado entre requisições. Falha em qualquer
    leitura derruba a requisição inteira (não há dashboard parcial).
    """

    def __init__(self, conversations, jobs, agent_responses, phase_analyses):
        self.conversations = conversations
        self.jobs = jobs
        self.agent_responses = agent_responses
        self.phase_analyses = phase_analyses

    # ========================================
    # JOBS
    # ========================================

    async def get_job_stats(self, period: Period, now: Optional[int] = None) -> JobStats:
        """Contagem de jobs por status (COUNT no servidor, em paralelo)."""
        since = period_start_datetime(period, now)
        statuses = list(JobStatus)
        counts = await asyncio.gather(
            *(self.jobs.count_by_status(status, since) for status in statuses)
        )
        return build_job_stats(
            {status.value: count for status, count in zip(statuses, counts)},
            period=None if period is Period.ALL else period.value,
        )

    # ========================================
    # AGREGADO
    # ========================================

    async def compute_dashboard_aggregate(
        self,
        strategy: AggregationStrategy,
        params: DashboardParams
    ) -> DashboardAggregate:
        """
        Lê jobs e a fonte da estratégia em paralelo e agrega por fase.
        """
        started = time.perf_counter()
        game_id = (params.game_id or "").strip() or None
        params = params._replace(game_id=game_id)

        now = now_ms()
        since_ms = period_start_ms(params.period, now)
        since = period_start_datetime(params.period, now)

        if strategy is AggregationStrategy.AGENT_RESPONSES:
            source = self.agent_responses.sample(
                since, settings.agent_responses_sample_limit, game_id
            )
        else:
            source = self.conversations.sample(since, settings.chats_sample_limit)

        job_stats, done_jobs, rows = await asyncio.gather(
            self.get_job_stats(params.period, now),
            self.jobs.done_jobs(since, settings.done_jobs_sample_limit),
            source,
        )

        fold = fold_source(strategy, rows, params, since_ms, settings.top_words_limit)
        aggregate = assemble_aggregate(
            strategy, params, job_stats, mean_job_duration_minutes(done_jobs), fold
        )

        log_aggregation(
            strategy=strategy.value,
            documents=len(rows),
            phases=len(aggregate.phases),
            duration_ms=(time.perf_counter() - started) * 1000,
            game_id=game_id,
            period=params.period.value,
        )
        return aggregate

    async def _dashboard(
        self,
        strategy: AggregationStrategy,
        params: DashboardParams
    ) -> DashboardView:
        aggregate, analyses = await asyncio.gather(
            self.compute_dashboard_aggregate(strategy, params),
            self.list_phase_analyses(params.game_id),
        )
        return DashboardView(params.game_id, aggregate, analyses)

    async def get_dashboard(self, params: DashboardParams) -> DashboardView:
        """Dashboard a partir dos chats."""
        return await self._dashboard(AggregationStrategy.CONVERSATIONS, params)

    async def get_summary(self, params: DashboardParams) -> DashboardView:
        """Resumo a partir de agent_responses."""
        return await self._dashboard(AggregationStrategy.AGENT_RESPONSES, params)

    # ========================================
    # ANÁLISES POR IA (phase_analyses)
    # ========================================

    async def list_phase_analyses(self, game_id: Optional[str]) -> List[PhaseAnalysis]:
        if not game_id or not game_id.strip():
            return []
        return await self.phase_analyses.list_by_game(game_id.strip())

    async def get_phase_analysis(self, game_id: str, phase_id: str) -> Optional[PhaseAnalysis]:
        return await self.phase_analyses.get(game_id, phase_id)

    async def save_phase_analysis(
        self,
        game_id: Optional[str],
        phase_id: Optional[str],
        phase_name: Optional[str] = None,
        analysis_text: Optional[str] = None,
        top_words: Optional[List[TopWord]] = None
    ):
        """Cria ou atualiza a análise; campos None não são sobrescritos."""
        if not game_id or not game_id.strip() or not phase_id or not phase_id.strip():
            raise MissingPhaseKeyError()

        fields: Dict[str, Any] = {}
        if phase_name is not None:
            fields["phaseName"] = phase_name
        if analysis_text is not None:
            fields["analysisText"] = analysis_text
        if top_words is not None:
            fields["topWords"] = [{"word": w.word, "count": w.count} for w in top_words]

        return await self.phase_analyses.save(game_id.strip(), phase_id.strip(), fields)

    # ========================================
    # DIAGNÓSTICO
    # ========================================

    async def debug_chat_fields(self, limit: int = 5) -> Dict[str, Any]:
        """Campos reais das mensagens nos chats (para achar aliases de fase)."""
        limit = max(1, min(limit, settings.debug_chat_fields_max))
        chats = await self.conversations.sample_raw(limit)
        logger.debug(f"Sampled chats: {[mask_phone_number(str(c.get('id', ''))) for c in chats]}")
        report = inspect_chat_fields(chats)
        logger.info(
            f"Chat fields inspected: {report['chats_analyzed']} chats, "
            f"{len(report['unique_fields_found'])} fields"
        )
        return report


def get_dashboard_service() -> DashboardService:
    """
    Dependency do FastAPI: serviço ligado ao Firestore compartilhado.

    Uso:
        @router.get("/dashboard")
        async def dashboard(service: DashboardService = Depends(get_dashboard_service)):
            ...
    """
    client = get_firestore()
    return DashboardService(
        conversations=ConversationRepository(client),
        jobs=JobRepository(client),
        agent_responses=AgentResponseRepository(client),
        phase_analyses=PhaseAnalysisRepository(client),
    )
