"""
Diagnóstico de esquema dos chats: quais campos as mensagens realmente têm e
quais deles parecem guardar a fase. Ajuda a descobrir novos aliases.
"""

from typing import Any, Dict, Iterable, List, Mapping

PHASE_KEYWORDS = ("phase", "fase", "step", "etapa", "stage", "current")
MESSAGES_PER_CHAT = 3
MAX_SAMPLES = 20
LAST_MESSAGE_INDEX = -1


def phase_related_fields(message: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        field: value
        for field, value in message.items()
        if any(keyword in field.lower() for keyword in PHASE_KEYWORDS)
    }


def inspect_chat_fields(chats: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Amostra as 3 primeiras mensagens do array e o lastMessage de cada chat
    (messageIndex -1 indica lastMessage).
    """
    samples: List[Dict[str, Any]] = []
    all_fields: set[str] = set()
    distribution: Dict[str, int] = {}
    analyzed = 0

    def visit(chat_id: str, index: int, message: Mapping[str, Any]) -> None:
        fields = list(message.keys())
        all_fields.update(fields)
        related = phase_related_fields(message)
        for field in related:
            distribution[field] = distribution.get(field, 0) + 1
        samples.append({
            "chat_id": chat_id,
            "message_index": index,
            "all_fields": fields,
            "phase_related_fields": related,
        })

    for chat in chats:
        analyzed += 1
        chat_id = str(chat.get("id", ""))

        messages = chat.get("messages")
        if isinstance(messages, list):
            for index, message in enumerate(messages[:MESSAGES_PER_CHAT]):
                if isinstance(message, Mapping):
                    visit(chat_id, index, message)

        last_message = chat.get("lastMessage")
        if isinstance(last_message, Mapping):
            visit(chat_id, LAST_MESSAGE_INDEX, last_message)

    return {
        "chats_analyzed": analyzed,
        "sample_messages": samples[:MAX_SAMPLES],
        "unique_fields_found": sorted(all_fields),
        "phase_fields_distribution": distribution,
    }
