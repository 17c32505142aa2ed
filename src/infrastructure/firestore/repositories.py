"""
Acesso somente-leitura (exceto phase_analyses) às coleções usadas pelo dashboard.
Cada repositório devolve dicts simples; a agregação não conhece o Firestore.
"""

from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from loguru import logger

from src.core.config import get_settings
from src.domain.analytics.models import JobStatus, PhaseAnalysis, TopWord
from src.domain.analytics.timestamps import to_timestamp_ms
from src.infrastructure.firestore.client import (
    count_all,
    fetch_all,
    firestore_call,
    snapshot_to_dict,
)

settings = get_settings()

CHAT_ANALYTICS_FIELDS = ["lastMessage", "messages", "lastUpdated", "createdAt", "levels"]
AGENT_RESPONSE_FIELDS = [
    "phoneNumber", "gameId", "phaseId", "phaseName",
    "createdAt", "hasOffense", "hasDesistencia",
]


class ConversationRepository:
    """Coleção ``chats`` (documento por telefone)"""

    def __init__(self, client: firestore.AsyncClient, collection: Optional[str] = None):
        self.client = client
        self.collection = collection or settings.chats_collection

    async def sample(self, since: Optional[datetime], limit: int) -> List[Dict[str, Any]]:
        """Chats mais recentes (por lastUpdated), limitados à janela quando houver."""
        query = self.client.collection(self.collection)
        if since is not None:
            query = query.where(filter=FieldFilter("lastUpdated", ">=", since))
        query = (
            query.order_by("lastUpdated", direction=firestore.Query.DESCENDING)
            .select(CHAT_ANALYTICS_FIELDS)
            .limit(limit)
        )
        chats = await fetch_all(self.collection, query)
        logger.debug(f"Loaded {len(chats)} chats (since={since}, limit={limit})")
        return chats

    async def sample_raw(self, limit: int) -> List[Dict[str, Any]]:
        """Chats completos, sem projeção de campos (diagnóstico de esquema)."""
        return await fetch_all(self.collection, self.client.collection(self.collection).limit(limit))


class JobRepository:
    """Coleção ``processing_jobs``"""

    def __init__(self, client: firestore.AsyncClient, collection: Optional[str] = None):
        self.client = client
        self.collection = collection or settings.jobs_collection

    def _by_status(self, status: JobStatus, since: Optional[datetime]):
        query = self.client.collection(self.collection).where(
            filter=FieldFilter("status", "==", status.value)
        )
        if since is not None:
            query = query.where(filter=FieldFilter("createdAt", ">=", since))
        return query

    async def count_by_status(self, status: JobStatus, since: Optional[datetime]) -> int:
        return await count_all(self.collection, self._by_status(status, since))

    async def done_jobs(self, since: Optional[datetime], limit: int) -> List[Dict[str, Any]]:
        """startedAt/finishedAt dos jobs concluídos (amostra limitada)."""
        query = self._by_status(JobStatus.DONE, since).select(["startedAt", "finishedAt"]).limit(limit)
        return await fetch_all(self.collection, query)


class AgentResponseRepository:
    """Coleção ``agent_responses`` (um evento por turno do agente)"""

    def __init__(self, client: firestore.AsyncClient, collection: Optional[str] = None):
        self.client = client
        self.collection = collection or settings.agent_responses_collection

    async def sample(
        self,
        since: Optional[datetime],
        limit: int,
        game_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Eventos mais recentes (createdAt desc). gameId só entra na query
        quando configurado (exige índice composto); senão é filtrado em memória.
        """
        query = self.client.collection(self.collection)
        if game_id and settings.agent_responses_filter_game_in_query:
            query = query.where(filter=FieldFilter("gameId", "==", game_id))
        if since is not None:
            query = query.where(filter=FieldFilter("createdAt", ">=", since))
        query = (
            query.order_by("createdAt", direction=firestore.Query.DESCENDING)
            .select(AGENT_RESPONSE_FIELDS)
            .limit(limit)
        )
        rows = await fetch_all(self.collection, query)
        logger.debug(f"Loaded {len(rows)} agent responses (since={since}, limit={limit})")
        return rows


def phase_analysis_doc_id(game_id: str, phase_id: str) -> str:
    """ID do documento: '{gameId}_{phaseId}' com '/' trocado por '_'."""
    return f"{str(game_id).replace('/', '_')}_{str(phase_id).replace('/', '_')}"


def to_phase_analysis(data: Dict[str, Any]) -> PhaseAnalysis:
    top_words = []
    for item in data.get("topWords") or []:
        if isinstance(item, dict) and isinstance(item.get("word"), str):
            count = item.get("count")
            top_words.append(TopWord(word=item["word"], count=count if isinstance(count, int) else 0))

    generated_ms = to_timestamp_ms(data.get("generatedAt"))
    return PhaseAnalysis(
        id=data["id"],
        game_id=data.get("gameId"),
        phase_id=None if data.get("phaseId") is None else str(data.get("phaseId")),
        phase_name=data.get("phaseName"),
        analysis_text=data.get("analysisText"),
        top_words=top_words,
        generated_at=(
            datetime.fromtimestamp(generated_ms / 1000, tz=UTC)
            if generated_ms is not None else None
        ),
    )


class PhaseAnalysisRepository:
    """Coleção ``phase_analyses`` (texto de análise por IA, por jogo e fase)"""

    def __init__(self, client: firestore.AsyncClient, collection: Optional[str] = None):
        self.client = client
        self.collection = collection or settings.phase_analyses_collection

    async def list_by_game(self, game_id: str) -> List[PhaseAnalysis]:
        query = self.client.collection(self.collection).where(
            filter=FieldFilter("gameId", "==", game_id)
        )
        docs = await fetch_all(self.collection, query)
        return [to_phase_analysis(doc) for doc in docs]

    async def get(self, game_id: str, phase_id: str) -> Optional[PhaseAnalysis]:
        ref = self.client.collection(self.collection).document(
            phase_analysis_doc_id(game_id, phase_id)
        )
        snapshot = await firestore_call(
            self.collection,
            lambda: ref.get(timeout=settings.firestore_timeout_seconds)
        )
        if not snapshot.exists:
            return None
        return to_phase_analysis(snapshot_to_dict(snapshot))

    async def save(
        self,
        game_id: str,
        phase_id: str,
        fields: Dict[str, Any]
    ) -> tuple[str, datetime]:
        """Grava com merge; só os campos informados são sobrescritos."""
        doc_id = phase_analysis_doc_id(game_id, phase_id)
        now = datetime.now(UTC)
        data = {
            "gameId": game_id,
            "phaseId": phase_id,
            "updatedAt": now,
            "generatedAt": now,
            **fields,
        }
        ref = self.client.collection(self.collection).document(doc_id)
        await firestore_call(
            self.collection,
            lambda: ref.set(data, merge=True, timeout=settings.firestore_timeout_seconds)
        )
        logger.info(f"Phase analysis saved: {doc_id}")
        return doc_id, now
