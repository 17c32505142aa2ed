"""
Rotas do Dashboard de Análise (formato consumido pelo frontend).
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from src.api.response_builder import build_dashboard_response
from src.api.schemas.dashboard import DashboardResponse
from src.api.schemas.responses import ErrorResponse
from src.core.config import get_settings
from src.domain.analytics.periods import Period, resolve_period
from src.domain.services.dashboard_service import (
    DashboardParams,
    DashboardService,
    get_dashboard_service,
)

settings = get_settings()
router = APIRouter(responses={503: {"model": ErrorResponse}})

ALL_GAMES = "all"


def dashboard_params(
    game_type: Optional[str],
    period: Optional[str],
    allow_all_games: bool = False
) -> DashboardParams:
    game_id = (game_type or "").strip() or None
    if allow_all_games and game_id and game_id.lower() == ALL_GAMES:
        game_id = None
    return DashboardParams(
        period=resolve_period(period, Period(settings.default_period)),
        game_id=game_id,
    )


@router.get("", response_model=DashboardResponse, response_model_by_alias=True)
async def get_dashboard(
    game_type: Optional[str] = Query(None, alias="gameType"),
    period: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Métricas por fase a partir dos chats.

    - gameType: filtra pelo jogo (vazio = todos)
    - period: 24h, 7d, 30d ou all (inválido = 7d)

    A fase "Geral" (bucket legado) não aparece nas séries.
    """
    view = await service.get_dashboard(dashboard_params(game_type, period))
    return build_dashboard_response(
        view.game_id, view.aggregate, view.analyses, exclude_general=True
    )


@router.get("/summary", response_model=DashboardResponse, response_model_by_alias=True)
async def get_summary(
    game_type: Optional[str] = Query(None, alias="gameType"),
    period: Optional[str] = Query(None),
    service: DashboardService = Depends(get_dashboard_service)
):
    """
    Mesmo formato do dashboard, calculado a partir de agent_responses.
    gameType=all desliga o filtro de jogo.
    """
    view = await service.get_summary(
        dashboard_params(game_type, period, allow_all_games=True)
    )
    return build_dashboard_response(view.game_id, view.aggregate, view.analyses)
