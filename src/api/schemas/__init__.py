"""
Schemas da API - Importações centralizadas.
Facilita importar schemas de qualquer lugar do código.

Uso:
    from src.api.schemas import DashboardResponse, JobStatsResponse
"""

# Dashboard
from src.api.schemas.dashboard import (
    CamelModel,
    TopWordResponse,
    AverageTimesSeries,
    SwearWordsSeries,
    GiveupWordsSeries,
    PhaseMessagesSeries,
    AIAnalysisEntry,
    DashboardResponse
)

# Jobs
from src.api.schemas.jobs import (
    JobStatsResponse,
    PhaseAggregateResponse,
    DashboardAggregateResponse,
    MessageFieldsSample,
    ChatFieldsDebugResponse
)

# Phase analyses
from src.api.schemas.phase_analysis import (
    PhaseAnalysisSave,
    PhaseAnalysisResponse,
    PhaseAnalysisListResponse,
    PhaseAnalysisSavedResponse
)

# Responses genéricas
from src.api.schemas.responses import (
    ErrorResponse,
    HealthCheckResponse
)

__all__ = [
    # Dashboard
    "CamelModel",
    "TopWordResponse",
    "AverageTimesSeries",
    "SwearWordsSeries",
    "GiveupWordsSeries",
    "PhaseMessagesSeries",
    "AIAnalysisEntry",
    "DashboardResponse",
    # Jobs
    "JobStatsResponse",
    "PhaseAggregateResponse",
    "DashboardAggregateResponse",
    "MessageFieldsSample",
    "ChatFieldsDebugResponse",
    # Phase analyses
    "PhaseAnalysisSave",
    "PhaseAnalysisResponse",
    "PhaseAnalysisListResponse",
    "PhaseAnalysisSavedResponse",
    # Generic
    "ErrorResponse",
    "HealthCheckResponse",
]
