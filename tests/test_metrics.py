import asyncio
import os
import time
from datetime import datetime

import pytest
import pytz

from schemas.assessment import RiskAssessment
from schemas.incident import SafetyIncident, SafetyIncidentCreate
from schemas.training import UserCourseProgress
from utils.clock import month_start, resolve_timezone
from utils.metrics import (
    MetricsAggregator,
    compute_safety_metrics,
    safety_score,
    training_completion,
)

UTC = pytz.utc
NOW = datetime(2024, 5, 20, 12, 0, tzinfo=UTC)


def _incident(created_at):
    return SafetyIncident(
        id="i",
        title="t",
        description="d",
        severity="low",
        area="a",
        reported_by="u",
        created_at=created_at,
    )


def _progress(value):
    return UserCourseProgress(id="p", user_id="u", course_id="c", progress=value)


def _assessment(status):
    return RiskAssessment(
        id="a", title="t", area="a", risk_level="low", assessor_id="u", status=status
    )


def test_last_month_incident_not_counted():
    incidents = [
        _incident(datetime(2024, 4, 30, 23, 59, tzinfo=UTC)),
        _incident(datetime(2024, 5, 1, 0, 0, tzinfo=UTC)),
        _incident(datetime(2024, 5, 19, 8, 0, tzinfo=UTC)),
    ]
    metrics = compute_safety_metrics(incidents, [], [], NOW, UTC)
    assert metrics.incidents_this_month == 2


def test_month_start_uses_metrics_timezone():
    tz = pytz.timezone("America/New_York")
    # 2024-05-01 02:00 UTC is still April 30th in New York
    now = datetime(2024, 5, 1, 2, 0, tzinfo=UTC)
    assert month_start(now, tz).month == 4


def test_zero_incidents_and_target_completion_scores_100():
    assert safety_score(0, 80) == 100
    metrics = compute_safety_metrics([], [_progress(80)], [], NOW, UTC)
    assert metrics.safety_score == 100
    assert metrics.training_completion == 80


def test_score_formula():
    # 100 - 5*2 + 0.2*(50 - 80) = 84
    assert safety_score(2, 50) == 84
    assert safety_score(30, 0) == 0
    assert safety_score(0, 100) == 100


def test_training_completion_average():
    assert training_completion([]) == 0
    assert training_completion([_progress(100), _progress(50), _progress(0)]) == 50


def test_risk_assessments_counts_completed_only():
    assessments = [_assessment("completed"), _assessment("pending"), _assessment("completed")]
    metrics = compute_safety_metrics([], [], assessments, NOW, UTC)
    assert metrics.risk_assessments == 2


def test_aggregator_reads_from_store(memory_store):
    async def scenario():
        await memory_store.create_incident(SafetyIncidentCreate(
            title="t", description="d", severity="low", area="a", reported_by="u"
        ))
        await memory_store.update_progress("u", "c", 100)
        return await MetricsAggregator(memory_store, "UTC").get_safety_metrics()

    metrics = asyncio.run(scenario())
    assert metrics.incidents_this_month == 1
    assert metrics.training_completion == 100
    # 100 - 5 + 0.2 * 20 = 99
    assert metrics.safety_score == 99


@pytest.fixture
def berlin_local_time():
    """Run with the process local zone set to Europe/Berlin."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Europe/Berlin"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


def test_local_month_start_follows_dst(berlin_local_time):
    # October 30th is CET (+01:00) but October 1st was still CEST (+02:00)
    now = datetime(2026, 10, 30, 12, 0, tzinfo=UTC)
    assert resolve_timezone(None) is None
    assert month_start(now) == datetime(2026, 9, 30, 22, 0, tzinfo=UTC)

    # 00:30 on October 1st in Berlin
    incident = _incident(datetime(2026, 9, 30, 22, 30, tzinfo=UTC))
    metrics = compute_safety_metrics([incident], [], [], now, resolve_timezone(None))
    assert metrics.incidents_this_month == 1
