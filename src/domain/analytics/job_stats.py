"""
Contagem de processing_jobs por status e tempo médio de processamento.
"""

from typing import Any, Iterable, Mapping, Optional

from src.domain.analytics.models import JobStats, JobStatus
from src.domain.analytics.timestamps import ms_to_minutes, round_one_decimal, to_timestamp_ms


def build_job_stats(counts: Mapping[str, int], period: Optional[str] = None) -> JobStats:
    """Monta JobStats; status ausentes contam zero."""
    return JobStats(
        pending=counts.get(JobStatus.PENDING.value, 0),
        processing=counts.get(JobStatus.PROCESSING.value, 0),
        done=counts.get(JobStatus.DONE.value, 0),
        failed=counts.get(JobStatus.FAILED.value, 0),
        period=period,
    )


def mean_job_duration_minutes(jobs: Iterable[Mapping[str, Any]]) -> float:
    """
    Média de (finishedAt - startedAt) em minutos dos jobs concluídos.
    Jobs sem timestamps válidos ou com fim antes do início são ignorados.
    """
    durations = []
    for job in jobs:
        started = to_timestamp_ms(job.get("startedAt"))
        finished = to_timestamp_ms(job.get("finishedAt"))
        if started is not None and finished is not None and finished >= started:
            durations.append(ms_to_minutes(finished - started))

    if not durations:
        return 0.0
    return round_one_decimal(sum(durations) / len(durations))
