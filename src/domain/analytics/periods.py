"""
Janela de tempo do dashboard (24h, 7d, 30d ou sem limite).
"""

import time
from datetime import datetime, UTC
from enum import Enum
from typing import Callable, Iterable, Optional, TypeVar

from src.domain.analytics.timestamps import to_timestamp_ms

T = TypeVar("T")

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


class Period(str, Enum):
    LAST_24_HOURS = "24h"
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    ALL = "all"


PERIOD_WINDOW_MS: dict[Period, Optional[int]] = {
    Period.LAST_24_HOURS: DAY_MS,
    Period.LAST_7_DAYS: 7 * DAY_MS,
    Period.LAST_30_DAYS: 30 * DAY_MS,
    Period.ALL: None,
}


def resolve_period(
    value: Optional[str],
    default: Period = Period.LAST_7_DAYS
) -> Period:
    """Converte o parâmetro da query; valores desconhecidos caem no default."""
    if isinstance(value, Period):
        return value
    if not value:
        return default
    try:
        return Period(value.strip().lower())
    except ValueError:
        return default


def now_ms() -> int:
    return int(time.time() * 1000)


def period_start_ms(period: Period, now: Optional[int] = None) -> Optional[int]:
    """Limite inferior (ms) da janela, ou None quando sem limite."""
    window = PERIOD_WINDOW_MS[period]
    if window is None:
        return None
    return (now if now is not None else now_ms()) - window


def period_start_datetime(period: Period, now: Optional[int] = None) -> Optional[datetime]:
    """Limite inferior como datetime UTC, para predicados de query."""
    start = period_start_ms(period, now)
    if start is None:
        return None
    return datetime.fromtimestamp(start / 1000, tz=UTC)


def filter_since(
    items: Iterable[T],
    since_ms: Optional[int],
    timestamp_of: Callable[[T], object]
) -> list[T]:
    """Filtro em memória para campos não indexados; timestamp inválido é descartado."""
    if since_ms is None:
        return list(items)
    kept = []
    for item in items:
        ts = to_timestamp_ms(timestamp_of(item))
        if ts is not None and ts >= since_ms:
            kept.append(item)
    return kept
