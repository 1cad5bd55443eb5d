"""Prometheus metrics for the challenge evaluation service.

Labels carry the challenge type so dashboards show which exercises learners
attempt and pass, not just generic HTTP stats.

Metrics:
    cee_evaluations_total             Counter by challenge type and outcome (passed/failed)
    cee_evaluation_score              Histogram of overall scores by challenge type
    cee_evaluation_latency_seconds    Histogram of engine evaluation time
    cee_unknown_challenges_total      Requests for challenge ids not in the catalogue

Usage::

    from infrastructure.metrics import LatencyTimer, record_evaluation

    with LatencyTimer() as t:
        result = evaluate_challenge(challenge, snapshot)
    record_evaluation(challenge.challenge_type, result.passed,
                      score=result.overall, latency_seconds=t.elapsed)
"""

from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_REGISTRY = CollectorRegistry()

evaluations_total = Counter(
    "cee_evaluations_total",
    "Challenge evaluations by challenge type and outcome",
    ["challenge_type", "outcome"],
    registry=_REGISTRY,
)

evaluation_score = Histogram(
    "cee_evaluation_score",
    "Overall score (0-100) of evaluated attempts",
    ["challenge_type"],
    buckets=[10, 20, 30, 40, 50, 60, 75, 90, 100],
    registry=_REGISTRY,
)

evaluation_latency_seconds = Histogram(
    "cee_evaluation_latency_seconds",
    "Engine evaluation time in seconds",
    ["challenge_type"],
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05],
    registry=_REGISTRY,
)

unknown_challenges_total = Counter(
    "cee_unknown_challenges_total",
    "Requests for challenge ids that are not in the catalogue",
    registry=_REGISTRY,
)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def record_evaluation(
    challenge_type: str,
    passed: bool,
    *,
    score: int | None = None,
    latency_seconds: float | None = None,
) -> None:
    """Record one evaluated attempt.

    Args:
        challenge_type: Type tag as stored on the challenge (e.g. "chop").
        passed: Whether the attempt passed.
        score: Overall score, observed in the score histogram when given.
        latency_seconds: Engine time, observed in the latency histogram when given.
    """
    outcome = "passed" if passed else "failed"
    evaluations_total.labels(challenge_type=challenge_type, outcome=outcome).inc()
    if score is not None:
        evaluation_score.labels(challenge_type=challenge_type).observe(score)
    if latency_seconds is not None:
        evaluation_latency_seconds.labels(challenge_type=challenge_type).observe(latency_seconds)


def record_unknown_challenge() -> None:
    """Increment the unknown challenge id counter."""
    unknown_challenges_total.inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


def get_evaluation_count(challenge_type: str, outcome: str) -> float:
    """Current value of the evaluations counter for one label pair."""
    value = _REGISTRY.get_sample_value(
        "cee_evaluations_total", {"challenge_type": challenge_type, "outcome": outcome}
    )
    return value or 0.0


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            result = evaluate_challenge(challenge, snapshot)
        record_evaluation("chop", result.passed, latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
