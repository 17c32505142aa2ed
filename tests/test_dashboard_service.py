from __future__ import annotations

import asyncio

import pytest

from src.core.exceptions import DataSourceError, MissingPhaseKeyError
from src.domain.analytics.models import AggregationStrategy, TopWord
from src.domain.analytics.periods import Period
from src.domain.services.dashboard_service import DashboardParams

from conftest import FailingRepository, make_service

DONE_JOBS = [
    {"startedAt": "2025-01-01T00:00:00Z", "finishedAt": "2025-01-01T00:03:00Z"},
    {"startedAt": "2025-01-01T00:00:00Z", "finishedAt": "2025-01-01T00:05:00Z"},
    {"startedAt": "2025-01-01T00:10:00Z", "finishedAt": "2025-01-01T00:00:00Z"},
]

AGENT_ROWS = [
    {"phoneNumber": "1", "gameId": "mosco", "phaseId": 1, "createdAt": "2025-01-01T00:00:00Z"},
    {"phoneNumber": "1", "gameId": "mosco", "phaseId": 2, "createdAt": "2025-01-01T00:06:00Z",
     "hasOffense": True},
    {"phoneNumber": "2", "gameId": "outro", "phaseId": 1, "createdAt": "2025-01-01T00:00:00Z"},
]


def test_job_stats_unbounded_period() -> None:
    service = make_service(job_counts={"pending": 2, "done": 7})
    stats = asyncio.run(service.get_job_stats(Period.ALL))

    assert (stats.pending, stats.processing, stats.done, stats.failed) == (2, 0, 7, 0)
    assert stats.period is None
    assert service.jobs.since_seen == [None, None, None, None]


def test_job_stats_window_is_passed_to_counts() -> None:
    service = make_service()
    stats = asyncio.run(service.get_job_stats(Period.LAST_24_HOURS, now=1_740_000_000_000))

    assert stats.period == "24h"
    assert all(
        since is not None and int(since.timestamp() * 1000) == 1_740_000_000_000 - 86_400_000
        for since in service.jobs.since_seen
    )


def test_conversation_aggregate(sample_chats) -> None:
    service = make_service(chats=sample_chats, job_counts={"done": 3}, done_jobs=DONE_JOBS)
    aggregate = asyncio.run(service.compute_dashboard_aggregate(
        AggregationStrategy.CONVERSATIONS,
        DashboardParams(period=Period.ALL, game_id=" mosco "),
    ))

    assert aggregate.strategy is AggregationStrategy.CONVERSATIONS
    assert aggregate.game_id == "mosco"
    assert aggregate.period is None
    assert aggregate.job_stats.done == 3
    assert aggregate.mean_job_duration_minutes == 4.0
    assert aggregate.mean_total_minutes == 4.0
    assert [p.phase_key for p in aggregate.phases] == ["1", "2", "Geral"]
    assert aggregate.total_messages == 4


def test_agent_responses_aggregate() -> None:
    service = make_service(agent_rows=AGENT_ROWS, done_jobs=DONE_JOBS)
    aggregate = asyncio.run(service.compute_dashboard_aggregate(
        AggregationStrategy.AGENT_RESPONSES,
        DashboardParams(period=Period.ALL, game_id="mosco"),
    ))

    assert [p.phase_name for p in aggregate.phases] == ["Fase 1", "Fase 2"]
    assert aggregate.total_offenses == 1
    assert aggregate.mean_total_minutes == 6.0
    assert aggregate.mean_job_duration_minutes == 4.0
    assert service.agent_responses.calls[0][2] == "mosco"


def test_dashboard_view_carries_all_phases(sample_chats, sample_analyses) -> None:
    service = make_service(chats=sample_chats, analyses=sample_analyses)
    view = asyncio.run(service.get_dashboard(
        DashboardParams(period=Period.ALL, game_id="mosco")
    ))

    assert view.game_id == "mosco"
    assert [p.phase_name for p in view.aggregate.phases] == ["Boas-vindas", "Enigma", "Geral"]
    assert len(view.analyses) == 1


def test_summary_without_game_has_no_analyses() -> None:
    service = make_service(agent_rows=AGENT_ROWS)
    view = asyncio.run(service.get_summary(DashboardParams(period=Period.ALL)))

    assert view.game_id is None
    assert [p.message_count for p in view.aggregate.phases] == [2, 1]
    assert view.analyses == []


def test_read_failure_propagates() -> None:
    service = make_service(conversations=FailingRepository(DataSourceError("chats", "HTTP 503")))
    with pytest.raises(DataSourceError):
        asyncio.run(service.get_dashboard(DashboardParams()))


def test_save_phase_analysis_requires_keys() -> None:
    service = make_service()
    with pytest.raises(MissingPhaseKeyError):
        asyncio.run(service.save_phase_analysis(" ", "1"))
    with pytest.raises(MissingPhaseKeyError):
        asyncio.run(service.save_phase_analysis("mosco", None))


def test_save_phase_analysis_writes_only_given_fields() -> None:
    service = make_service()
    doc_id, _ = asyncio.run(service.save_phase_analysis(
        " mosco ", "2", analysis_text="Texto", top_words=[TopWord(word="dica", count=3)]
    ))

    assert doc_id == "mosco_2"
    assert service.phase_analyses.saved == [
        ("mosco", "2", {"analysisText": "Texto", "topWords": [{"word": "dica", "count": 3}]})
    ]


def test_list_phase_analyses_blank_game(sample_analyses) -> None:
    service = make_service(analyses=sample_analyses)
    assert asyncio.run(service.list_phase_analyses("  ")) == []
    assert len(asyncio.run(service.list_phase_analyses("mosco"))) == 1


def test_debug_chat_fields_clamps_limit(sample_chats) -> None:
    service = make_service(chats=sample_chats)
    report = asyncio.run(service.debug_chat_fields(100))

    assert service.conversations.calls == [("sample_raw", 20)]
    assert report["chats_analyzed"] == 3
    assert "phaseId" in report["unique_fields_found"]
    assert report["sample_messages"][0]["message_index"] == 0
