"""
Exceções customizadas do sistema.
Facilita tratamento de erros e respostas HTTP adequadas.
"""

from typing import Optional, Any


class BaseAppException(Exception):
    """Exceção base da aplicação"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ========================================
# EXCEÇÕES DE VALIDAÇÃO
# ========================================

class ValidationError(BaseAppException):
    """Erro de validação de dados"""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any):
        details = {"field": field} if field else {}
        details.update(kwargs)
        super().__init__(message, status_code=422, details=details)


class MissingPhaseKeyError(ValidationError):
    """gameId/phaseId ausentes ao salvar análise"""

    def __init__(self):
        super().__init__(
            message="gameId and phaseId are required",
            field="gameId,phaseId"
        )


# ========================================
# EXCEÇÕES DE FONTE DE DADOS (FIRESTORE)
# ========================================

class DataSourceError(BaseAppException):
    """Falha ao ler/escrever no Firestore (não recuperável na requisição)"""

    def __init__(self, collection: str, reason: str, **kwargs: Any):
        super().__init__(
            message=f"Data source unavailable ({collection}): {reason}",
            status_code=503,
            details={"collection": collection, "reason": reason, **kwargs}
        )


class FirestoreNotConfiguredError(DataSourceError):
    """Cliente do Firestore não pôde ser criado"""

    def __init__(self, reason: str):
        super().__init__(collection="*", reason=reason)


class PhaseAnalysisNotFoundError(BaseAppException):
    """Análise de fase não encontrada"""

    def __init__(self, game_id: str, phase_id: str):
        super().__init__(
            message="Phase analysis not found",
            status_code=404,
            details={"game_id": game_id, "phase_id": phase_id}
        )
