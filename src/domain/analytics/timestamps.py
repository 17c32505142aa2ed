"""
Normalização de timestamps heterogêneos (datetime, Timestamp do Firestore, ISO string)
para milissegundos desde epoch.
"""

import math
from datetime import date, datetime, time, UTC
from typing import Any, Iterable, Mapping, Optional


def _datetime_to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


def to_timestamp_ms(value: Any) -> Optional[int]:
    """
    Converte um valor temporal em milissegundos desde epoch.

    Reconhece, nesta ordem:
    - datetime (naive é tratado como UTC; o DatetimeWithNanoseconds do
      Firestore é subclasse de datetime)
    - date
    - wrapper de timestamp com ``ToMilliseconds()`` (protobuf)
    - string ISO-8601 (aceita sufixo "Z")

    Qualquer outro tipo, ou string inválida, retorna None.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _datetime_to_ms(value)

    if isinstance(value, date):
        return _datetime_to_ms(datetime.combine(value, time.min))

    to_millis = getattr(value, "ToMilliseconds", None)
    if callable(to_millis):
        try:
            return int(to_millis())
        except (TypeError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _datetime_to_ms(datetime.fromisoformat(text))
        except ValueError:
            return None

    return None


def first_timestamp_ms(record: Mapping[str, Any], keys: Iterable[str]) -> Optional[int]:
    """Primeiro timestamp válido entre as chaves informadas."""
    for key in keys:
        ts = to_timestamp_ms(record.get(key))
        if ts is not None:
            return ts
    return None


def ms_to_minutes(value_ms: float) -> float:
    return value_ms / (60 * 1000)


def round_one_decimal(value: float) -> float:
    """1 casa decimal, meio para cima (0.25 -> 0.3)."""
    return math.floor(value * 10 + 0.5) / 10


def round_minutes(value: Optional[float]) -> Optional[float]:
    """Arredonda minutos para 1 casa decimal (None continua None)."""
    if value is None:
        return None
    return round_one_decimal(value)
