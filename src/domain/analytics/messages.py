"""
Projeção dos documentos de chat em registros de mensagem canônicos.

Um chat pode ter ``lastMessage`` (objeto único), ``messages`` (array) ou ambos;
os dois formatos convivem na mesma coleção. Toda a agregação trabalha sobre
``MessageRecord`` e nunca sobre o formato bruto.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from src.domain.analytics.phases import PhaseFields, extract_phase_fields
from src.domain.analytics.timestamps import first_timestamp_ms

NO_PHASE_KEY = "_no_phase_"
NO_PHASE_NAME = "Sem fase"

OFFENSE_FLAGS = ("hasDirtyWord", "hasOffense")
GIVEUP_FLAGS = ("hasGiveup", "hasDesistencia")
TIMESTAMP_FIELDS = ("timestamp", "createdAt", "lastUpdated")
TEXT_FIELDS = ("msgBody", "text")


@dataclass(frozen=True)
class MessageRecord:
    has_offense: bool
    has_giveup: bool
    phase_key: str
    phase_name: str
    timestamp_ms: Optional[int] = None
    text: Optional[str] = None


def _flag(message: Mapping[str, Any], names: tuple[str, ...]) -> bool:
    return any(message.get(name) is True for name in names)


def _text(message: Mapping[str, Any]) -> Optional[str]:
    for name in TEXT_FIELDS:
        value = message.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def resolve_phase(own: PhaseFields, fallback: PhaseFields) -> tuple[str, str]:
    """
    Chave e nome efetivos da fase.

    Campos ausentes na mensagem são herdados do fallback (lastMessage do chat).
    Sem id nem nome, a chave vira o sentinela ``_no_phase_``.
    """
    phase_id = own.phase_id if own.phase_id is not None else fallback.phase_id
    phase_name = own.phase_name if own.phase_name is not None else fallback.phase_name

    key = phase_id if phase_id is not None else phase_name
    name = phase_name if phase_name is not None else phase_id
    return (key if key is not None else NO_PHASE_KEY,
            name if name is not None else NO_PHASE_NAME)


def _record(message: Mapping[str, Any], own: PhaseFields, fallback: PhaseFields) -> MessageRecord:
    phase_key, phase_name = resolve_phase(own, fallback)
    return MessageRecord(
        has_offense=_flag(message, OFFENSE_FLAGS),
        has_giveup=_flag(message, GIVEUP_FLAGS),
        phase_key=phase_key,
        phase_name=phase_name,
        timestamp_ms=first_timestamp_ms(message, TIMESTAMP_FIELDS),
        text=_text(message),
    )


def project_messages(conversation: Mapping[str, Any]) -> list[MessageRecord]:
    """
    Normaliza um chat em uma sequência ordenada de MessageRecord.

    - ``messages`` não vazio: um registro por elemento, com fallback de fase
      vindo do ``lastMessage``;
    - apenas ``lastMessage``: exatamente um registro;
    - nenhum dos dois: lista vazia.
    """
    last_message = conversation.get("lastMessage")
    if not isinstance(last_message, Mapping):
        last_message = None

    fallback = extract_phase_fields(last_message) if last_message else PhaseFields()

    messages = conversation.get("messages")
    if isinstance(messages, list) and messages:
        records = []
        for message in messages:
            if not isinstance(message, Mapping):
                message = {}
            records.append(_record(message, extract_phase_fields(message), fallback))
        return records

    if last_message is not None:
        return [_record(last_message, fallback, fallback)]

    return []
