"""
core/challenge_eval/production.py — Evaluators for multi-layer challenges.

    reference-match   per-layer closeness to a reference mix
    goal              share of declarative conditions that hold
    multitrack-goal   same as goal, conditions may also read EQ, reverb,
                      compression and the bus

Pure module — no I/O, no logging.
"""

from __future__ import annotations

from core.challenge_eval.conditions import evaluate_conditions, goal_score
from core.challenge_eval.grading import TARGET_MISMATCH_MESSAGE, fallback_result, grade, mean
from core.challenge_eval.tolerance import DEFAULT_TOLERANCES, score_tolerance
from core.challenge_eval.types import (
    Challenge,
    ChallengeType,
    GoalTarget,
    LayerScore,
    LayerState,
    MixSnapshot,
    ReferenceLayer,
    ReferenceTarget,
    ScoreBreakdown,
    ScoreResult,
)

# Per-layer note bands for reference matching.
_LAYER_NEEDS_WORK_BELOW = 60.0
_LAYER_CLOSE_BELOW = 85.0


# ---------------------------------------------------------------------------
# Reference match
# ---------------------------------------------------------------------------


def _score_layer(state: LayerState, ref: ReferenceLayer, controls: frozenset[str]) -> float:
    """Mean of every enabled comparison for one layer."""
    tol = DEFAULT_TOLERANCES
    scores = [
        score_tolerance(state.volume, ref.volume, tol.volume),
        100.0 if state.muted == ref.muted else 0.0,
    ]
    if ref.pan is not None and "pan" in controls:
        scores.append(score_tolerance(state.pan, ref.pan, tol.pan))
    if "eq" in controls:
        if ref.eq_low is not None:
            scores.append(score_tolerance(state.eq_low, ref.eq_low, tol.reference_eq))
        if ref.eq_high is not None:
            scores.append(score_tolerance(state.eq_high, ref.eq_high, tol.reference_eq))
    return sum(scores) / len(scores)


def _pair_layers(
    target: ReferenceTarget, layers: tuple[LayerState, ...]
) -> list[tuple[LayerState, ReferenceLayer]]:
    """Pair reference layers with learner layers by id, else by position."""
    by_id = {layer.id: layer for layer in layers}
    pairs: list[tuple[LayerState, ReferenceLayer]] = []
    for index, ref in enumerate(target.layers):
        if ref.layer_id is not None:
            state = by_id.get(ref.layer_id)
        else:
            state = layers[index] if index < len(layers) else None
        if state is not None:
            pairs.append((state, ref))
    return pairs


def evaluate_reference_match(challenge: Challenge, snapshot: MixSnapshot) -> ScoreResult:
    """Compare every layer with its reference counterpart.

    Volume and mute state are always compared. Pan is compared when the
    reference sets it and the ``pan`` control is available; low and high EQ
    when the reference sets them and the ``eq`` control is available.
    Reference layers without a learner counterpart are skipped. When no
    layer could be compared the overall score is 0.
    """
    target = challenge.target
    if not isinstance(target, ReferenceTarget):
        return fallback_result(ChallengeType.REFERENCE_MATCH.value, TARGET_MISMATCH_MESSAGE)

    layer_scores: list[LayerScore] = []
    notes: list[str] = []
    for state, ref in _pair_layers(target, snapshot.layers):
        score = _score_layer(state, ref, challenge.available_controls)
        layer_scores.append(LayerScore(id=state.id, name=state.display_name, score=score))
        if score < _LAYER_NEEDS_WORK_BELOW:
            notes.append(f"{state.display_name} needs adjustment")
        elif score < _LAYER_CLOSE_BELOW:
            notes.append(f"{state.display_name} is close, fine-tune it")

    overall = mean(ls.score for ls in layer_scores)
    breakdown = ScoreBreakdown(
        type=ChallengeType.REFERENCE_MATCH.value,
        layer_scores=tuple(layer_scores),
    )
    return grade(ChallengeType.REFERENCE_MATCH, overall or 0.0, breakdown, notes)


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


def evaluate_goal(
    challenge: Challenge,
    snapshot: MixSnapshot,
    challenge_type: ChallengeType = ChallengeType.GOAL,
) -> ScoreResult:
    """Score the share of goal conditions that hold.

    Each failed condition adds a ``Not met: ...`` note, in condition order.
    A goal without conditions scores 0.
    """
    target = challenge.target
    if not isinstance(target, GoalTarget):
        return fallback_result(challenge_type.value, TARGET_MISMATCH_MESSAGE)

    results = evaluate_conditions(target.conditions, snapshot.layers, snapshot.bus)
    notes = [f"Not met: {r.description}" for r in results if not r.passed]
    breakdown = ScoreBreakdown(type=challenge_type.value, condition_results=results)
    return grade(challenge_type, goal_score(results), breakdown, notes)
