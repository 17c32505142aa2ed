"""
Schemas das análises por IA armazenadas por jogo e fase.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field

from src.api.schemas.dashboard import CamelModel, TopWordResponse


class PhaseAnalysisSave(CamelModel):
    """Body do POST /api/jobs/phase-analyses"""
    game_id: Optional[str] = Field(None, max_length=200)
    phase_id: Optional[str] = Field(None, max_length=200)
    phase_name: Optional[str] = None
    analysis_text: Optional[str] = None
    top_words: Optional[List[TopWordResponse]] = None


class PhaseAnalysisResponse(CamelModel):
    id: str
    game_id: Optional[str] = None
    phase_id: Optional[str] = None
    phase_name: Optional[str] = None
    analysis_text: Optional[str] = None
    top_words: List[TopWordResponse] = Field(default_factory=list)
    generated_at: Optional[datetime] = None


class PhaseAnalysisListResponse(CamelModel):
    analyses: List[PhaseAnalysisResponse] = Field(default_factory=list)


class PhaseAnalysisSavedResponse(CamelModel):
    success: bool = True
    id: str
    generated_at: datetime
