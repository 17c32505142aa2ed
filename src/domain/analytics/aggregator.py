"""
Agregação das métricas por fase do dashboard.

Duas estratégias respondem à mesma pergunta a partir de fontes diferentes:

- CONVERSATIONS: documentos da coleção ``chats`` (mensagens embutidas,
  duração por ``levels`` ou pelo intervalo de timestamps de cada chat);
- AGENT_RESPONSES: eventos planos da coleção ``agent_responses``, uma linha
  por turno do agente.

Tudo aqui é puro: recebe dicts já lidos do Firestore e devolve estruturas
novas a cada chamada, sem estado compartilhado entre requisições.
"""

from dataclasses import dataclass, field, replace
from functools import reduce
from types import MappingProxyType
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Sequence

from src.domain.analytics.messages import MessageRecord, project_messages
from src.domain.analytics.models import PhaseAggregate, PhaseFoldResult, TopWord
from src.domain.analytics.periods import filter_since
from src.domain.analytics.phases import extract_game_type
from src.domain.analytics.timestamps import (
    ms_to_minutes,
    round_minutes,
    round_one_decimal,
    to_timestamp_ms,
)
from src.domain.analytics.words import extract_top_words

DEFAULT_TOP_WORDS = 50


# ========================================
# ESTRATÉGIA A: CHATS
# ========================================

@dataclass(frozen=True)
class PhaseTally:
    """Acumulador imutável de uma fase (contagens e durações)"""
    phase_name: str
    messages: int = 0
    offenses: int = 0
    giveups: int = 0
    duration_sum_ms: int = 0
    duration_count: int = 0

    def add_record(self, record: MessageRecord) -> "PhaseTally":
        return replace(
            self,
            messages=self.messages + 1,
            offenses=self.offenses + int(record.has_offense),
            giveups=self.giveups + int(record.has_giveup),
        )

    def add_duration(self, duration_ms: int) -> "PhaseTally":
        return replace(
            self,
            duration_sum_ms=self.duration_sum_ms + duration_ms,
            duration_count=self.duration_count + 1,
        )

    def merge(self, other: "PhaseTally") -> "PhaseTally":
        # Nome vindo de mensagens tem prioridade sobre o id usado por levels
        name = self.phase_name
        if self.messages == 0 and other.messages > 0:
            name = other.phase_name
        return PhaseTally(
            phase_name=name,
            messages=self.messages + other.messages,
            offenses=self.offenses + other.offenses,
            giveups=self.giveups + other.giveups,
            duration_sum_ms=self.duration_sum_ms + other.duration_sum_ms,
            duration_count=self.duration_count + other.duration_count,
        )


@dataclass(frozen=True)
class PhaseFold:
    """Mapa fase -> PhaseTally, em ordem de primeira aparição"""
    tallies: Mapping[str, PhaseTally] = field(default_factory=lambda: MappingProxyType({}))
    documents: int = 0

    def merge(self, contribution: Mapping[str, PhaseTally]) -> "PhaseFold":
        merged = dict(self.tallies)
        for key, tally in contribution.items():
            merged[key] = merged[key].merge(tally) if key in merged else tally
        return PhaseFold(MappingProxyType(merged), self.documents + 1)


def message_spans(records: Iterable[MessageRecord]) -> dict[str, int]:
    """
    Duração (max - min) por fase dentro de um único chat.

    Um único timestamp gera intervalo 0, que conta como amostra; fase sem
    nenhum timestamp não gera amostra.
    """
    bounds: dict[str, tuple[int, int]] = {}
    for record in records:
        ts = record.timestamp_ms
        if ts is None:
            continue
        low, high = bounds.get(record.phase_key, (ts, ts))
        bounds[record.phase_key] = (min(low, ts), max(high, ts))
    return {key: high - low for key, (low, high) in bounds.items()}


def level_spans(conversation: Mapping[str, Any], game_id: Optional[str]) -> dict[str, int]:
    """
    Duração por fase a partir de ``levels[gameId].phases[phaseId].{startAt,endAt}``
    (também aceita ``levels[gameId][phaseId]``). Fases sem fim ou com fim
    anterior ao início são ignoradas.
    """
    levels = conversation.get("levels")
    if not game_id or not isinstance(levels, Mapping):
        return {}

    game_levels = levels.get(game_id)
    if not isinstance(game_levels, Mapping):
        return {}

    phases = game_levels.get("phases")
    if not isinstance(phases, Mapping):
        phases = game_levels

    spans = {}
    for phase_id, span in phases.items():
        if not isinstance(span, Mapping):
            continue
        start = to_timestamp_ms(span.get("startAt"))
        end = to_timestamp_ms(span.get("endAt"))
        if start is None or end is None or end < start:
            continue
        spans[str(phase_id)] = end - start
    return spans


def conversation_contribution(
    conversation: Mapping[str, Any],
    game_id: Optional[str] = None,
    records: Optional[Sequence[MessageRecord]] = None
) -> dict[str, PhaseTally]:
    """Contagens e durações de um único chat, por fase."""
    if records is None:
        records = project_messages(conversation)

    tallies: dict[str, PhaseTally] = {}
    for record in records:
        current = tallies.get(record.phase_key) or PhaseTally(record.phase_name)
        tallies[record.phase_key] = current.add_record(record)

    durations = message_spans(records)
    durations.update(level_spans(conversation, game_id or extract_game_type(conversation)))

    for key, duration_ms in durations.items():
        current = tallies.get(key) or PhaseTally(key)
        tallies[key] = current.add_duration(duration_ms)

    return tallies


def matches_game(conversation: Mapping[str, Any], game_id: Optional[str]) -> bool:
    if not game_id:
        return True
    return extract_game_type(conversation) == game_id


def group_texts(projected: Iterable[Sequence[MessageRecord]]) -> dict[str, list[str]]:
    """Textos por fase, na ordem de leitura, para as palavras mais usadas."""
    texts: dict[str, list[str]] = {}
    for records in projected:
        for record in records:
            if record.text:
                texts.setdefault(record.phase_key, []).append(record.text)
    return texts


def finalize_phases(
    tallies: Mapping[str, PhaseTally],
    texts: Mapping[str, Sequence[str]],
    top_words_limit: Optional[int]
) -> list[PhaseAggregate]:
    """Converte acumuladores em PhaseAggregate; fases sem mensagens ficam de fora."""
    phases = []
    for key, tally in tallies.items():
        if tally.messages == 0:
            continue
        mean_minutes = None
        if tally.duration_count > 0:
            mean_minutes = round_minutes(
                ms_to_minutes(tally.duration_sum_ms / tally.duration_count)
            )
        top_words = []
        if top_words_limit:
            top_words = [
                TopWord(word=w.word, count=w.count)
                for w in extract_top_words(texts.get(key, ()), top_words_limit)
            ]
        phases.append(PhaseAggregate(
            phase_key=key,
            phase_name=tally.phase_name,
            message_count=tally.messages,
            offense_count=tally.offenses,
            giveup_count=tally.giveups,
            mean_duration_minutes=mean_minutes,
            top_words=top_words,
        ))
    return phases


def aggregate_conversations(
    conversations: Iterable[Mapping[str, Any]],
    game_id: Optional[str] = None,
    top_words_limit: int = DEFAULT_TOP_WORDS
) -> PhaseFoldResult:
    """
    Estratégia A: métricas por fase sobre a amostra de chats.

    A duração média total não vem dos chats; quem chama usa o tempo médio
    dos processing_jobs.
    """
    game_id = game_id.strip() if game_id else None
    projected = [
        (conversation, project_messages(conversation))
        for conversation in conversations
        if matches_game(conversation, game_id)
    ]
    fold = reduce(
        lambda acc, item: acc.merge(conversation_contribution(item[0], game_id, item[1])),
        projected,
        PhaseFold(),
    )
    texts = group_texts(records for _, records in projected)
    return PhaseFoldResult(
        phases=finalize_phases(fold.tallies, texts, top_words_limit),
        mean_total_minutes=None,
        documents=fold.documents,
    )


# ========================================
# ESTRATÉGIA B: AGENT_RESPONSES
# ========================================

class AgentEvent(NamedTuple):
    phone_number: str
    game_id: Optional[str]
    phase_id: int
    phase_name: Optional[str]
    timestamp_ms: Optional[int]
    has_offense: bool
    has_giveup: bool


def parse_phase_id(value: Any) -> Optional[int]:
    """phaseId inteiro >= 0; qualquer outra coisa é inválida (None)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value >= 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_agent_event(row: Mapping[str, Any]) -> Optional[AgentEvent]:
    """Linha de agent_responses -> AgentEvent, ou None se não aproveitável."""
    phone = row.get("phoneNumber")
    phase_id = parse_phase_id(row.get("phaseId"))
    if not isinstance(phone, str) or not phone or phase_id is None:
        return None
    game = row.get("gameId")
    phase_name = row.get("phaseName")
    return AgentEvent(
        phone_number=phone,
        game_id=game if isinstance(game, str) else None,
        phase_id=phase_id,
        phase_name=phase_name if isinstance(phase_name, str) else None,
        timestamp_ms=to_timestamp_ms(row.get("createdAt")),
        has_offense=row.get("hasOffense") is True,
        has_giveup=row.get("hasDesistencia") is True,
    )


def _spans(groups: Mapping[Any, Sequence[int]]) -> dict[Any, int]:
    return {key: max(values) - min(values) for key, values in groups.items() if values}


def _mean_minutes(durations_ms: Sequence[int]) -> Optional[float]:
    if not durations_ms:
        return None
    return round_minutes(ms_to_minutes(sum(durations_ms) / len(durations_ms)))


def aggregate_agent_responses(
    rows: Iterable[Mapping[str, Any]],
    game_id: Optional[str] = None,
    since_ms: Optional[int] = None
) -> PhaseFoldResult:
    """
    Estratégia B: métricas por fase sobre eventos planos de agent_responses.

    - duração da fase: max - min por (telefone, fase), média por fase;
    - duração total: max - min por telefone, média geral;
    - contagens por fase.
    Eventos não carregam texto, então não há palavras mais usadas.
    """
    game_id = game_id.strip() if game_id else None

    in_window = filter_since(rows, since_ms, lambda row: row.get("createdAt"))
    parsed = (parse_agent_event(row) for row in in_window)
    events = [e for e in parsed if e is not None and (not game_id or e.game_id == game_id)]

    counts: dict[int, list[int]] = {}
    names: dict[int, str] = {}
    by_phone_phase: dict[tuple[str, int], list[int]] = {}
    by_phone: dict[str, list[int]] = {}

    for event in events:
        offense, giveup, messages = counts.get(event.phase_id, [0, 0, 0])
        counts[event.phase_id] = [
            offense + int(event.has_offense),
            giveup + int(event.has_giveup),
            messages + 1,
        ]
        if event.phase_name and event.phase_id not in names:
            names[event.phase_id] = event.phase_name
        if event.timestamp_ms is not None:
            by_phone_phase.setdefault((event.phone_number, event.phase_id), []).append(event.timestamp_ms)
            by_phone.setdefault(event.phone_number, []).append(event.timestamp_ms)

    phase_durations: dict[int, list[int]] = {}
    for (_, phase_id), span in _spans(by_phone_phase).items():
        phase_durations.setdefault(phase_id, []).append(span)

    phases = [
        PhaseAggregate(
            phase_key=str(phase_id),
            phase_name=names.get(phase_id, f"Fase {phase_id}"),
            message_count=counts[phase_id][2],
            offense_count=counts[phase_id][0],
            giveup_count=counts[phase_id][1],
            mean_duration_minutes=_mean_minutes(phase_durations.get(phase_id, [])),
        )
        for phase_id in sorted(counts)
    ]

    return PhaseFoldResult(
        phases=phases,
        mean_total_minutes=_mean_minutes(list(_spans(by_phone).values())),
        documents=len(events),
    )


# ========================================
# TOTAIS
# ========================================

class PhaseTotals(NamedTuple):
    messages: int
    offenses: int
    giveups: int
    mean_messages_per_phase: float


def phase_totals(phases: Sequence[PhaseAggregate]) -> PhaseTotals:
    """Totais entre fases; a média usa só fases com pelo menos uma mensagem."""
    messages = sum(p.message_count for p in phases)
    with_messages = sum(1 for p in phases if p.message_count > 0)
    mean = round_one_decimal(messages / with_messages) if with_messages else 0.0
    return PhaseTotals(
        messages=messages,
        offenses=sum(p.offense_count for p in phases),
        giveups=sum(p.giveup_count for p in phases),
        mean_messages_per_phase=mean,
    )
