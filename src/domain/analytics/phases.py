"""
Resolução de fase (id e nome) em mensagens com esquema inconsistente.

Os documentos de chat foram escritos por versões diferentes do bot, cada uma
com um nome de campo para a fase. Os aliases são tentados em ordem; a primeira
chave com valor string vence.
"""

from typing import Any, Callable, Mapping, NamedTuple, Optional, Sequence

Accessor = Callable[[Mapping[str, Any]], Any]


def _field(name: str) -> Accessor:
    return lambda record: record.get(name)


PHASE_ID_ALIASES: tuple[str, ...] = (
    "phaseId", "phase_id", "phase", "fase", "currentPhase", "current_phase",
)
PHASE_NAME_ALIASES: tuple[str, ...] = (
    "phaseName", "phase_name", "faseName", "fase_name", "phase", "fase",
)
GAME_TYPE_ALIASES: tuple[str, ...] = ("gameType", "gameId")

PHASE_ID_ACCESSORS: tuple[Accessor, ...] = tuple(_field(n) for n in PHASE_ID_ALIASES)
PHASE_NAME_ACCESSORS: tuple[Accessor, ...] = tuple(_field(n) for n in PHASE_NAME_ALIASES)
GAME_TYPE_ACCESSORS: tuple[Accessor, ...] = tuple(_field(n) for n in GAME_TYPE_ALIASES)


class PhaseFields(NamedTuple):
    phase_id: Optional[str] = None
    phase_name: Optional[str] = None


def first_string(record: Mapping[str, Any], accessors: Sequence[Accessor]) -> Optional[str]:
    """Primeiro valor string retornado pelos accessors (não-string é ignorado)."""
    for accessor in accessors:
        value = accessor(record)
        if isinstance(value, str):
            return value
    return None


def extract_phase_fields(record: Any) -> PhaseFields:
    """
    Extrai phaseId/phaseName de uma mensagem, verificando campos alternativos.

    Id e nome são resolvidos de forma independente: um registro pode gerar o
    id a partir de um alias e o nome a partir de outro.
    """
    if not isinstance(record, Mapping):
        return PhaseFields()
    return PhaseFields(
        phase_id=first_string(record, PHASE_ID_ACCESSORS),
        phase_name=first_string(record, PHASE_NAME_ACCESSORS),
    )


def extract_game_type(conversation: Mapping[str, Any]) -> Optional[str]:
    """
    Jogo da conversa: gameType do lastMessage, senão da última mensagem do array.
    """
    last_message = conversation.get("lastMessage")
    if isinstance(last_message, Mapping):
        game = first_string(last_message, GAME_TYPE_ACCESSORS)
        if game:
            return game

    messages = conversation.get("messages")
    if isinstance(messages, list) and messages:
        last = messages[-1]
        if isinstance(last, Mapping):
            return first_string(last, GAME_TYPE_ACCESSORS)
    return None
