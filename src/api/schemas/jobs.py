"""
Schemas de /api/jobs (contagem de jobs e agregado bruto por fase).
"""

from typing import Any, Dict, List, Optional
from pydantic import Field

from src.api.schemas.dashboard import CamelModel, TopWordResponse
from src.domain.analytics.models import AggregationStrategy


class JobStatsResponse(CamelModel):
    """Contagem de processing_jobs por status"""
    pending: int = 0
    processing: int = 0
    done: int = 0
    failed: int = 0
    period: Optional[str] = None


class PhaseAggregateResponse(CamelModel):
    phase_key: str
    phase_name: str
    message_count: int = 0
    offense_count: int = 0
    giveup_count: int = 0
    mean_duration_minutes: Optional[float] = None
    top_words: List[TopWordResponse] = Field(default_factory=list)


class DashboardAggregateResponse(CamelModel):
    """
    Agregado completo (estratégia por conversas), com top words por fase.

    Exemplo:
        {
            "strategy": "conversations",
            "jobStats": {"pending": 2, "processing": 1, "done": 40, "failed": 0},
            "meanTotalMinutes": 12.4,
            "totalMessages": 532,
            "phases": [{"phaseKey": "1", "phaseName": "Boas-vindas", ...}]
        }
    """
    strategy: AggregationStrategy
    job_stats: JobStatsResponse
    mean_total_minutes: float = 0.0
    mean_job_duration_minutes: float = 0.0
    total_messages: int = 0
    total_offenses: int = 0
    total_giveups: int = 0
    mean_messages_per_phase: float = 0.0
    phases: List[PhaseAggregateResponse] = Field(default_factory=list)
    period: Optional[str] = None
    game_id: Optional[str] = None


class MessageFieldsSample(CamelModel):
    chat_id: str
    message_index: int
    all_fields: List[str] = Field(default_factory=list)
    phase_related_fields: Dict[str, Any] = Field(default_factory=dict)


class ChatFieldsDebugResponse(CamelModel):
    """Diagnóstico dos campos reais das mensagens (aliases de fase)"""
    chats_analyzed: int = 0
    sample_messages: List[MessageFieldsSample] = Field(default_factory=list)
    unique_fields_found: List[str] = Field(default_factory=list)
    phase_fields_distribution: Dict[str, int] = Field(default_factory=dict)
