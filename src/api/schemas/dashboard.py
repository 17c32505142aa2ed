"""
Schemas de resposta do Dashboard de Análise (formato consumido pelo frontend).
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base com aliases camelCase (contrato do frontend)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class TopWordResponse(CamelModel):
    word: str
    count: int


class AverageTimesSeries(CamelModel):
    """Tempo médio por fase (minutos); null = fase sem amostra de duração"""
    labels: List[str] = Field(default_factory=list)
    data: List[Optional[float]] = Field(default_factory=list)
    avg_total_time: float = 0.0


class SwearWordsSeries(CamelModel):
    labels: List[str] = Field(default_factory=list)
    data: List[int] = Field(default_factory=list)
    total_swear_words: int = 0


class GiveupWordsSeries(CamelModel):
    labels: List[str] = Field(default_factory=list)
    data: List[int] = Field(default_factory=list)
    total_giveup_words: int = 0


class PhaseMessagesSeries(CamelModel):
    labels: List[str] = Field(default_factory=list)
    data: List[int] = Field(default_factory=list)


class AIAnalysisEntry(CamelModel):
    phase_id: Optional[str] = None
    phase: Optional[str] = None
    analysis: str = ""
    created_at: Optional[str] = None
    top_words: List[TopWordResponse] = Field(default_factory=list)


class DashboardResponse(CamelModel):
    """Resposta de /api/dashboard e /api/dashboard/summary"""
    game_type: Optional[str] = None
    period: Optional[str] = None
    average_times: AverageTimesSeries
    swear_words: SwearWordsSeries
    giveup_words: GiveupWordsSeries
    phase_messages: PhaseMessagesSeries
    ai_analysis: List[AIAnalysisEntry] = Field(default_factory=list)
