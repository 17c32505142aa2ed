from __future__ import annotations

from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

import pytest

from src.domain.analytics.models import JobStatus, PhaseAnalysis
from src.domain.services.dashboard_service import DashboardService


class FakeConversationRepository:
    def __init__(self, chats: List[Dict[str, Any]]):
        self.chats = chats
        self.calls: List[tuple] = []

    async def sample(self, since, limit):
        self.calls.append(("sample", since, limit))
        return list(self.chats)[:limit]

    async def sample_raw(self, limit):
        self.calls.append(("sample_raw", limit))
        return list(self.chats)[:limit]


class FakeJobRepository:
    def __init__(self, counts: Optional[Dict[str, int]] = None, done: Optional[List[dict]] = None):
        self.counts = counts or {}
        self.done = done or []
        self.since_seen: List[Optional[datetime]] = []

    async def count_by_status(self, status: JobStatus, since):
        self.since_seen.append(since)
        return self.counts.get(status.value, 0)

    async def done_jobs(self, since, limit):
        return list(self.done)[:limit]


class FakeAgentResponseRepository:
    def __init__(self, rows: List[Dict[str, Any]]):
        self.rows = rows
        self.calls: List[tuple] = []

    async def sample(self, since, limit, game_id=None):
        self.calls.append((since, limit, game_id))
        return list(self.rows)[:limit]


class FakePhaseAnalysisRepository:
    def __init__(self, analyses: Optional[List[PhaseAnalysis]] = None):
        self.analyses = list(analyses or [])
        self.saved: List[tuple] = []

    async def list_by_game(self, game_id):
        return [a for a in self.analyses if a.game_id == game_id]

    async def get(self, game_id, phase_id):
        for analysis in self.analyses:
            if analysis.game_id == game_id and analysis.phase_id == phase_id:
                return analysis
        return None

    async def save(self, game_id, phase_id, fields):
        self.saved.append((game_id, phase_id, fields))
        return f"{game_id}_{phase_id}", datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class FailingRepository:
    """Qualquer leitura falha com o erro informado"""

    def __init__(self, error: Exception):
        self.error = error

    async def sample(self, *args, **kwargs):
        raise self.error

    async def sample_raw(self, *args, **kwargs):
        raise self.error


def make_service(
    chats=None,
    job_counts=None,
    done_jobs=None,
    agent_rows=None,
    analyses=None,
    conversations=None
) -> DashboardService:
    return DashboardService(
        conversations=conversations or FakeConversationRepository(chats or []),
        jobs=FakeJobRepository(job_counts, done_jobs),
        agent_responses=FakeAgentResponseRepository(agent_rows or []),
        phase_analyses=FakePhaseAnalysisRepository(analyses),
    )


@pytest.fixture
def sample_chats() -> List[Dict[str, Any]]:
    return [
        {
            "id": "5511999990001",
            "lastMessage": {"gameType": "mosco", "phaseId": "2", "phaseName": "Enigma"},
            "messages": [
                {"phaseId": "1", "phaseName": "Boas-vindas", "msgBody": "oi quero jogar",
                 "timestamp": "2025-03-01T10:00:00Z"},
                {"phaseId": "1", "phaseName": "Boas-vindas", "msgBody": "quero jogar agora",
                 "timestamp": "2025-03-01T10:02:00Z", "hasDirtyWord": True},
                {"phaseId": "2", "phaseName": "Enigma", "msgBody": "desisto",
                 "timestamp": "2025-03-01T10:05:00Z", "hasGiveup": True},
            ],
        },
        {
            "id": "5511999990002",
            "lastMessage": {"gameType": "mosco", "phase": "Geral", "msgBody": "ajuda",
                            "createdAt": "2025-03-01T11:00:00Z"},
        },
        {
            "id": "5511999990003",
            "lastMessage": {"gameType": "outro", "phaseId": "1", "msgBody": "ola"},
        },
    ]


@pytest.fixture
def sample_analyses() -> List[PhaseAnalysis]:
    return [
        PhaseAnalysis(
            id="mosco_1",
            game_id="mosco",
            phase_id="1",
            phase_name="Boas-vindas",
            analysis_text="Jogadores entram animados.",
            generated_at=datetime(2025, 3, 1, 12, 30, 15, 123000, tzinfo=UTC),
        ),
    ]
