"""
api/routes/challenges.py — Challenge catalogue and evaluation endpoints.

Endpoints
=========
    GET  /challenges                   — Catalogue summaries, optional ?module= filter
    GET  /challenges/modules           — Module ids that have at least one challenge
    GET  /challenges/{id}              — Learner-facing detail (no target values)
    GET  /challenges/{id}/hints        — First ?revealed=N hints (default 1)
    POST /challenges/{id}/evaluate     — Score one attempt; body holds exactly one
                                         of sampler, channel, mix, drums

All scoring is delegated to core.challenge_eval. These are thin HTTP
controllers — no business logic lives here.

Error codes
===========
    404  — Unknown challenge id
    422  — Invalid learner state, or a state of the wrong kind for the challenge
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from api.schemas.challenges import (
    ChallengeDetail,
    ChallengeSummary,
    EvaluateRequest,
    HintsResponse,
)
from core.challenge_eval import (
    Challenge,
    available_modules,
    evaluate_challenge,
    hints_for,
    list_challenges,
    load_challenge,
)
from core.challenge_eval.conditions import describe_condition
from core.challenge_eval.router import snapshot_kind
from core.challenge_eval.snapshots import snapshot_from_dict
from core.challenge_eval.types import DrumTarget, GoalTarget
from infrastructure.metrics import LatencyTimer, record_evaluation, record_unknown_challenge

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/challenges", tags=["challenges"])


def _get_challenge(challenge_id: str) -> Challenge:
    try:
        return load_challenge(challenge_id)
    except ValueError as exc:
        record_unknown_challenge()
        raise HTTPException(status_code=404, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def _serialize_summary(challenge: Challenge) -> dict[str, Any]:
    return {
        "id": challenge.id,
        "title": challenge.title,
        "difficulty": challenge.difficulty,
        "module": challenge.module,
        "challenge_type": challenge.challenge_type,
    }


def _serialize_detail(challenge: Challenge) -> dict[str, Any]:
    """Learner-facing view. Goal statements and drum focus are shown, reference values are not."""
    goal = None
    goals: list[str] = []
    if isinstance(challenge.target, GoalTarget):
        goal = challenge.target.description
        goals = [describe_condition(c) for c in challenge.target.conditions]
    focus = list(challenge.target.focus) if isinstance(challenge.target, DrumTarget) else []

    return {
        **_serialize_summary(challenge),
        "description": challenge.description,
        "hint_count": len(challenge.hints),
        "controls": sorted(challenge.available_controls),
        "goal": goal,
        "goals": goals,
        "focus": focus,
        "expected_slices": challenge.expected_slices,
        "target_key": challenge.target_key,
        "target_bpm": challenge.target_bpm,
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=list[ChallengeSummary])
def list_all(
    module: str | None = Query(None, description="Module id filter, e.g. 'SM4' (case-insensitive)"),
) -> list[dict[str, Any]]:
    """List bundled challenges in catalogue order."""
    return [_serialize_summary(c) for c in list_challenges(module)]


@router.get("/modules", response_model=list[str])
def modules() -> list[str]:
    """List module ids that have at least one challenge."""
    return available_modules()


@router.get("/{challenge_id}", response_model=ChallengeDetail)
def get_challenge(challenge_id: str) -> dict[str, Any]:
    """Return one challenge without its solution values."""
    return _serialize_detail(_get_challenge(challenge_id))


@router.get("/{challenge_id}/hints", response_model=HintsResponse)
def get_hints(
    challenge_id: str,
    revealed: int = Query(1, ge=0, description="Number of hints to reveal"),
) -> dict[str, Any]:
    """Reveal the first ``revealed`` hints, clamped to what the challenge has."""
    challenge = _get_challenge(challenge_id)
    hints = hints_for(challenge, revealed)
    return {
        "challenge_id": challenge.id,
        "hints": list(hints),
        "revealed": len(hints),
        "total": len(challenge.hints),
    }


@router.post("/{challenge_id}/evaluate")
def evaluate(challenge_id: str, body: EvaluateRequest) -> dict[str, Any]:
    """Score one attempt and return the serialized ScoreResult.

    Challenges with an unknown type tag are still evaluated and answer with
    the engine's fallback result (overall 0, 1 star, not passed).
    """
    challenge = _get_challenge(challenge_id)
    kind, data = body.state()

    try:
        snapshot = snapshot_from_dict(kind, data)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    expected = snapshot_kind(challenge.challenge_type)
    if expected is not None and not isinstance(snapshot, expected):
        raise HTTPException(
            status_code=422,
            detail=(
                f"Challenge {challenge.id!r} ({challenge.challenge_type}) "
                f"expects a {expected.__name__} state, got '{kind}'"
            ),
        )

    with LatencyTimer() as timer:
        result = evaluate_challenge(challenge, snapshot)

    record_evaluation(
        challenge.challenge_type,
        result.passed,
        score=result.overall,
        latency_seconds=timer.elapsed,
    )
    logger.info(
        "Evaluated %s: overall=%d stars=%d passed=%s",
        challenge.id,
        result.overall,
        result.stars,
        result.passed,
    )
    return result.as_dict()
