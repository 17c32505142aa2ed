from __future__ import annotations

import asyncio
from datetime import datetime, UTC
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as google_exceptions
from tenacity import wait_none

from src.core.exceptions import DataSourceError
from src.domain.analytics.models import JobStatus
from src.infrastructure.firestore import client as firestore_client
from src.infrastructure.firestore.client import count_all, fetch_all, firestore_call
from src.infrastructure.firestore.repositories import (
    AgentResponseRepository,
    ConversationRepository,
    JobRepository,
    PhaseAnalysisRepository,
    phase_analysis_doc_id,
)


# ========================================
# FAKES DO SDK (AsyncClient / AsyncQuery)
# ========================================

class FakeSnapshot:
    def __init__(self, doc_id: str, data: dict | None):
        self.id = doc_id
        self.exists = data is not None
        self._data = data

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeQuery:
    """Registra a cadeia where/order_by/select/limit e devolve documentos fixos."""

    def __init__(self, db: "FakeFirestore", collection: str, ops: tuple = ()):
        self.db = db
        self.collection_name = collection
        self.ops = ops

    def _with(self, op) -> "FakeQuery":
        return FakeQuery(self.db, self.collection_name, self.ops + (op,))

    def where(self, filter=None):
        return self._with(("where", filter.field_path, filter.op_string, filter.value))

    def order_by(self, field_path, direction=None):
        return self._with(("order_by", field_path, direction))

    def select(self, field_paths):
        return self._with(("select", tuple(field_paths)))

    def limit(self, count):
        return self._with(("limit", count))

    def count(self, alias=None):
        query = self

        class Aggregation:
            async def get(self, timeout=None):
                query.db.queries.append((query.collection_name, query.ops + (("count", alias),)))
                return [[SimpleNamespace(alias=alias, value=query.db.count_result)]]

        return Aggregation()

    async def get(self, timeout=None):
        self.db.queries.append((self.collection_name, self.ops))
        return [FakeSnapshot(doc_id, data) for doc_id, data in self.db.documents]


class FakeDocument:
    def __init__(self, db: "FakeFirestore", collection: str, doc_id: str):
        self.db = db
        self.path = f"{collection}/{doc_id}"
        self.id = doc_id

    async def get(self, timeout=None):
        return FakeSnapshot(self.id, self.db.stored.get(self.path))

    async def set(self, data, merge=False, timeout=None):
        self.db.writes.append((self.path, data, merge))


class FakeCollection(FakeQuery):
    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self.db, self.collection_name, doc_id)


class FakeFirestore:
    def __init__(self, documents=(), stored=None, count_result=0):
        self.documents = list(documents)
        self.stored = stored or {}
        self.count_result = count_result
        self.queries = []
        self.writes = []

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)


# ========================================
# CHAMADAS / RETRY
# ========================================

def test_fetch_all_adds_document_id() -> None:
    db = FakeFirestore(documents=[("5511", {"lastUpdated": "2025-01-01T00:00:00Z"})])
    docs = asyncio.run(fetch_all("chats", db.collection("chats").limit(1)))

    assert docs == [{"lastUpdated": "2025-01-01T00:00:00Z", "id": "5511"}]
    assert db.queries == [("chats", (("limit", 1),))]


def test_count_all_reads_total_alias() -> None:
    db = FakeFirestore(count_result=42)
    assert asyncio.run(count_all("processing_jobs", db.collection("processing_jobs"))) == 42


def test_permanent_error_becomes_data_source_error() -> None:
    calls = []

    async def denied():
        calls.append(1)
        raise google_exceptions.PermissionDenied("denied")

    with pytest.raises(DataSourceError) as exc_info:
        asyncio.run(firestore_call("chats", denied))

    assert exc_info.value.status_code == 503
    assert exc_info.value.details["status"] == 403
    assert len(calls) == 1


def test_transient_error_is_retried(monkeypatch) -> None:
    monkeypatch.setattr(firestore_client._attempt.retry, "wait", wait_none())
    outcomes = [google_exceptions.ServiceUnavailable("down"), ["ok"]]

    async def flaky():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert asyncio.run(firestore_call("chats", flaky)) == ["ok"]
    assert outcomes == []


def test_transient_error_gives_up_after_three_attempts(monkeypatch) -> None:
    monkeypatch.setattr(firestore_client._attempt.retry, "wait", wait_none())
    calls = []

    async def always_down():
        calls.append(1)
        raise google_exceptions.ServiceUnavailable("down")

    with pytest.raises(DataSourceError):
        asyncio.run(firestore_call("processing_jobs", always_down))
    assert len(calls) == 3


# ========================================
# REPOSITÓRIOS
# ========================================

def test_conversation_sample_query() -> None:
    db = FakeFirestore()
    since = datetime(2025, 1, 1, tzinfo=UTC)
    asyncio.run(ConversationRepository(db, "chats").sample(since, 1000))

    collection, ops = db.queries[0]
    assert collection == "chats"
    assert ops[0] == ("where", "lastUpdated", ">=", since)
    assert ops[1] == ("order_by", "lastUpdated", "DESCENDING")
    assert "levels" in ops[2][1]
    assert ops[3] == ("limit", 1000)


def test_conversation_sample_without_window_has_no_filter() -> None:
    db = FakeFirestore()
    asyncio.run(ConversationRepository(db, "chats").sample(None, 10))

    _, ops = db.queries[0]
    assert all(op[0] != "where" for op in ops)


def test_job_count_without_window() -> None:
    db = FakeFirestore(count_result=5)
    total = asyncio.run(
        JobRepository(db, "processing_jobs").count_by_status(JobStatus.FAILED, None)
    )

    assert total == 5
    _, ops = db.queries[0]
    assert ops == (("where", "status", "==", "failed"), ("count", "total"))


def test_done_jobs_projects_timestamps() -> None:
    db = FakeFirestore()
    since = datetime(2025, 1, 1, tzinfo=UTC)
    asyncio.run(JobRepository(db, "processing_jobs").done_jobs(since, 500))

    _, ops = db.queries[0]
    assert ops == (
        ("where", "status", "==", "done"),
        ("where", "createdAt", ">=", since),
        ("select", ("startedAt", "finishedAt")),
        ("limit", 500),
    )


def test_agent_responses_game_filter_stays_in_memory() -> None:
    db = FakeFirestore()
    asyncio.run(AgentResponseRepository(db, "agent_responses").sample(None, 50, "mosco"))

    _, ops = db.queries[0]
    assert all(op[0] != "where" for op in ops)
    assert ops[0] == ("order_by", "createdAt", "DESCENDING")


def test_phase_analysis_doc_id_replaces_slashes() -> None:
    assert phase_analysis_doc_id("jogo/a", "1/2") == "jogo_a_1_2"


def test_phase_analysis_get_converts_document() -> None:
    db = FakeFirestore(stored={"phase_analyses/mosco_1": {
        "gameId": "mosco",
        "phaseId": "1",
        "analysisText": "Boa fase",
        "topWords": [{"word": "dica", "count": 4}, {"word": 3}],
        "generatedAt": datetime(2025, 3, 1, 12, 0, tzinfo=UTC),
    }})
    analysis = asyncio.run(PhaseAnalysisRepository(db, "phase_analyses").get("mosco", "1"))

    assert analysis.id == "mosco_1"
    assert analysis.analysis_text == "Boa fase"
    assert [(w.word, w.count) for w in analysis.top_words] == [("dica", 4)]
    assert analysis.generated_at == datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def test_phase_analysis_get_missing_returns_none() -> None:
    db = FakeFirestore()
    assert asyncio.run(PhaseAnalysisRepository(db, "phase_analyses").get("mosco", "9")) is None


def test_phase_analysis_list_filters_by_game() -> None:
    db = FakeFirestore(documents=[("mosco_2", {"gameId": "mosco", "phaseId": 2})])
    analyses = asyncio.run(PhaseAnalysisRepository(db, "phase_analyses").list_by_game("mosco"))

    assert db.queries[0][1] == (("where", "gameId", "==", "mosco"),)
    assert analyses[0].phase_id == "2"


def test_phase_analysis_save_merges() -> None:
    db = FakeFirestore()
    doc_id, generated_at = asyncio.run(
        PhaseAnalysisRepository(db, "phase_analyses").save("mosco", "3", {"phaseName": "Final"})
    )

    assert doc_id == "mosco_3"
    assert generated_at.tzinfo is not None
    path, data, merge = db.writes[0]
    assert path == "phase_analyses/mosco_3"
    assert merge is True
    assert set(data) == {"gameId", "phaseId", "updatedAt", "generatedAt", "phaseName"}
