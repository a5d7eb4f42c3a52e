"""Dashboard metrics.

The four numbers are recomputed from the entity store on every call; nothing
is cached. The same formulas apply to every backing:

- incidents_this_month: incidents created between the first of the current
  month (00:00 in the metrics timezone) and now.
- training_completion: mean progress percentage over all progress rows,
  clamped to 0..100 and rounded; 0 when there are no rows.
- risk_assessments: number of completed assessments.
- safety_score: 100 - 5 * incidents_this_month
  + 0.2 * (training_completion - 80), clamped to 0..100 and rounded.
"""

import logging
from datetime import datetime, tzinfo
from typing import Iterable, Optional

from config import INCIDENT_PENALTY, METRICS_TIMEZONE, TRAINING_TARGET, TRAINING_WEIGHT
from schemas.assessment import RiskAssessment
from schemas.incident import SafetyIncident
from schemas.metrics import SafetyMetrics
from schemas.training import UserCourseProgress
from storage.base import EntityStore
from utils.clock import ensure_utc, month_start, resolve_timezone, utc_now

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def count_incidents_this_month(
    incidents: Iterable[SafetyIncident], now: datetime, tz: Optional[tzinfo]
) -> int:
    start = month_start(now, tz)
    return sum(1 for i in incidents if start <= ensure_utc(i.created_at) <= now)


def training_completion(progress_rows: Iterable[UserCourseProgress]) -> int:
    values = [row.progress for row in progress_rows]
    if not values:
        return 0
    return round(_clamp(sum(values) / len(values)))


def safety_score(incidents_this_month: int, completion: int) -> int:
    score = (
        100
        - INCIDENT_PENALTY * incidents_this_month
        + TRAINING_WEIGHT * (completion - TRAINING_TARGET)
    )
    return round(_clamp(score))


def compute_safety_metrics(
    incidents: Iterable[SafetyIncident],
    progress_rows: Iterable[UserCourseProgress],
    assessments: Iterable[RiskAssessment],
    now: datetime,
    tz: Optional[tzinfo],
) -> SafetyMetrics:
    incident_count = count_incidents_this_month(incidents, now, tz)
    completion = training_completion(progress_rows)
    completed = sum(1 for a in assessments if a.status == "completed")
    return SafetyMetrics(
        safety_score=safety_score(incident_count, completion),
        incidents_this_month=incident_count,
        training_completion=completion,
        risk_assessments=completed,
    )


class MetricsAggregator:
    """Computes dashboard metrics from whatever store it is given."""

    def __init__(self, store: EntityStore, timezone: Optional[str] = METRICS_TIMEZONE):
        self.store = store
        self.tz = resolve_timezone(timezone)

    async def get_safety_metrics(self, now: Optional[datetime] = None) -> SafetyMetrics:
        now = ensure_utc(now) if now else utc_now()
        incidents = await self.store.get_all_incidents()
        progress_rows = await self.store.get_all_progress()
        assessments = await self.store.get_all_assessments()
        metrics = compute_safety_metrics(incidents, progress_rows, assessments, now, self.tz)
        logger.debug("Computed safety metrics: %s", metrics)
        return metrics
