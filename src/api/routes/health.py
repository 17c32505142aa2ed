"""
Rotas de health check e status da aplicação.
"""

from datetime import datetime, UTC
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.api.schemas.responses import HealthCheckResponse
from src.core.config import get_settings
from src.infrastructure.firestore.client import check_firestore_connection

settings = get_settings()
router = APIRouter()


@router.get("", response_model=HealthCheckResponse)
@router.get("/", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check da aplicação.
    Verifica se o Firestore responde.
    """

    configured = settings.is_firestore_configured
    firestore_ok = await check_firestore_connection()

    if not firestore_ok:
        health = "unhealthy"
    elif not configured:
        # Rodando só com ADC/projeto implícito
        health = "degraded"
    else:
        health = "healthy"

    return HealthCheckResponse(
        status=health,
        version=settings.app_version,
        firestore=firestore_ok,
        firestore_configured=configured,
        timestamp=datetime.now(UTC)
    )


@router.get("/live")
async def liveness():
    """
    Liveness probe (para Kubernetes).
    Retorna 200 se a aplicação está rodando.
    """
    return {"status": "alive"}


@router.get("/ready")
async def readiness():
    """
    Readiness probe (para Kubernetes).
    Retorna 200 apenas se o Firestore está acessível.
    """

    if not await check_firestore_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "reason": "firestore unavailable"}
        )

    return {"status": "ready"}
