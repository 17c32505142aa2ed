"""
Estruturas de saída da agregação do dashboard.
"""

from enum import Enum
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class AggregationStrategy(str, Enum):
    """Fonte de dados usada para as métricas por fase"""
    CONVERSATIONS = "conversations"
    AGENT_RESPONSES = "agent_responses"


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class TopWord(BaseModel):
    model_config = ConfigDict(frozen=True)

    word: str
    count: int


class PhaseAggregate(BaseModel):
    """Métricas de uma fase (offense_count e giveup_count <= message_count)"""
    model_config = ConfigDict(frozen=True)

    phase_key: str
    phase_name: str
    message_count: int = 0
    offense_count: int = 0
    giveup_count: int = 0
    mean_duration_minutes: Optional[float] = None
    top_words: List[TopWord] = Field(default_factory=list)


class PhaseFoldResult(BaseModel):
    """Saída de uma estratégia de agregação"""
    model_config = ConfigDict(frozen=True)

    phases: List[PhaseAggregate] = Field(default_factory=list)
    mean_total_minutes: Optional[float] = None
    documents: int = 0


class JobStats(BaseModel):
    pending: int = 0
    processing: int = 0
    done: int = 0
    failed: int = 0
    period: Optional[str] = None


class DashboardAggregate(BaseModel):
    """Agregado completo: jobs + totais + métricas por fase"""
    strategy: AggregationStrategy
    job_stats: JobStats
    mean_total_minutes: float = 0.0
    mean_job_duration_minutes: float = 0.0
    total_messages: int = 0
    total_offenses: int = 0
    total_giveups: int = 0
    mean_messages_per_phase: float = 0.0
    phases: List[PhaseAggregate] = Field(default_factory=list)
    period: Optional[str] = None
    game_id: Optional[str] = None


class PhaseAnalysis(BaseModel):
    """Análise por IA de uma fase (coleção phase_analyses)"""
    id: str
    game_id: Optional[str] = None
    phase_id: Optional[str] = None
    phase_name: Optional[str] = None
    analysis_text: Optional[str] = None
    top_words: List[TopWord] = Field(default_factory=list)
    generated_at: Optional[datetime] = None
