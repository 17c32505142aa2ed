from __future__ import annotations

from src.domain.analytics.messages import NO_PHASE_KEY, NO_PHASE_NAME, project_messages


def test_no_phase_anywhere_uses_sentinel() -> None:
    records = project_messages({"messages": [{"msgBody": "oi"}]})
    assert len(records) == 1
    assert records[0].phase_key == NO_PHASE_KEY
    assert records[0].phase_name == NO_PHASE_NAME


def test_last_message_only_yields_one_record() -> None:
    records = project_messages({
        "lastMessage": {"phaseId": "1", "phaseName": "Início", "hasOffense": True,
                        "text": "  bom dia  ", "createdAt": "2025-01-01T00:00:00Z"},
    })
    assert len(records) == 1
    record = records[0]
    assert (record.phase_key, record.phase_name) == ("1", "Início")
    assert record.has_offense is True
    assert record.text == "bom dia"
    assert record.timestamp_ms == 1735689600000


def test_record_count_matches_array_length() -> None:
    conversation = {
        "lastMessage": {"phaseId": "9"},
        "messages": [{"phaseId": "1"}, "lixo", None, {}],
    }
    assert len(project_messages(conversation)) == 4


def test_missing_fields_inherit_last_message_phase() -> None:
    conversation = {
        "lastMessage": {"phaseId": "2", "phaseName": "Enigma"},
        "messages": [{"phaseName": "Outra"}, {}],
    }
    first, second = project_messages(conversation)
    assert (first.phase_key, first.phase_name) == ("2", "Outra")
    assert (second.phase_key, second.phase_name) == ("2", "Enigma")


def test_name_only_becomes_key() -> None:
    records = project_messages({"messages": [{"phaseName": "Geral"}]})
    assert records[0].phase_key == "Geral"


def test_flags_require_literal_true() -> None:
    records = project_messages({"messages": [
        {"hasDirtyWord": "true", "hasDesistencia": 1},
        {"hasOffense": True, "hasGiveup": True},
    ]})
    assert [(r.has_offense, r.has_giveup) for r in records] == [(False, False), (True, True)]


def test_timestamp_field_order() -> None:
    records = project_messages({"messages": [
        {"timestamp": "invalid", "createdAt": "2025-01-01T00:00:00Z",
         "lastUpdated": "2025-02-01T00:00:00Z"},
    ]})
    assert records[0].timestamp_ms == 1735689600000


def test_empty_conversation() -> None:
    assert project_messages({}) == []
    assert project_messages({"messages": [], "lastMessage": "texto"}) == []
