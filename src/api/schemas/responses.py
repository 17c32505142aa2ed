"""
Schemas genéricos de resposta da API.
"""

from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Corpo devolvido pelos exception handlers"""
    error: str
    details: Optional[Any] = None


class HealthCheckResponse(BaseModel):
    """Resposta do health check"""
    status: str = "healthy"
    version: str
    firestore: bool
    firestore_configured: bool
    timestamp: datetime
