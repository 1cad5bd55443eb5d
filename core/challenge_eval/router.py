"""
core/challenge_eval/router.py — Route a challenge to its evaluator.

``evaluate_challenge`` is total: whatever the challenge type tag, target or
snapshot, it returns a ``ScoreResult`` and never raises. Input it cannot
evaluate gets a zero-score fallback whose single feedback line says why.
Legacy type tags (``chop-challenge``, ``flip-this``, ...) route like their
canonical form.
Routing table:
    type tag → (evaluator, accepted snapshot class, accepted target classes)

Pure module — no I/O, no logging.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial

from core.challenge_eval.drums import evaluate_drum_sequencing
from core.challenge_eval.grading import TARGET_MISMATCH_MESSAGE, fallback_result
from core.challenge_eval.mixing import (
    evaluate_compressor_match,
    evaluate_eq_match,
    evaluate_problem_fix,
)
from core.challenge_eval.production import evaluate_goal, evaluate_reference_match
from core.challenge_eval.sampling import (
    evaluate_chop,
    evaluate_clean_sample,
    evaluate_creative,
    evaluate_recreate_kit,
    evaluate_tune_to_track,
)
from core.challenge_eval.types import (
    BusState,
    Challenge,
    ChallengeType,
    ChannelSnapshot,
    CompressorTarget,
    DrumPattern,
    DrumTarget,
    EqTarget,
    GoalTarget,
    LayerState,
    MixSnapshot,
    ProblemTarget,
    ReferenceTarget,
    SamplerParams,
    SamplerTarget,
    ScoreResult,
    Snapshot,
    normalise_type,
)

SNAPSHOT_MISMATCH_MESSAGE = "Submitted state does not fit this challenge"


@dataclass(frozen=True)
class _Route:
    evaluate: Callable[..., ScoreResult]
    snapshot_type: type
    target_types: tuple[type, ...]


_SAMPLER_TARGETS: tuple[type, ...] = (SamplerTarget, type(None))

_ROUTES: dict[ChallengeType, _Route] = {
    ChallengeType.REFERENCE_MATCH: _Route(
        evaluate_reference_match, MixSnapshot, (ReferenceTarget,)
    ),
    ChallengeType.GOAL: _Route(evaluate_goal, MixSnapshot, (GoalTarget,)),
    ChallengeType.MULTITRACK_GOAL: _Route(
        partial(evaluate_goal, challenge_type=ChallengeType.MULTITRACK_GOAL),
        MixSnapshot,
        (GoalTarget,),
    ),
    ChallengeType.RECREATE_KIT: _Route(evaluate_recreate_kit, SamplerParams, _SAMPLER_TARGETS),
    ChallengeType.CHOP: _Route(evaluate_chop, SamplerParams, _SAMPLER_TARGETS),
    ChallengeType.TUNE_TO_TRACK: _Route(evaluate_tune_to_track, SamplerParams, _SAMPLER_TARGETS),
    ChallengeType.CREATIVE: _Route(evaluate_creative, SamplerParams, _SAMPLER_TARGETS),
    ChallengeType.CLEAN_SAMPLE: _Route(evaluate_clean_sample, SamplerParams, _SAMPLER_TARGETS),
    ChallengeType.EQ_MATCH: _Route(evaluate_eq_match, ChannelSnapshot, (EqTarget,)),
    ChallengeType.COMPRESSOR_MATCH: _Route(
        evaluate_compressor_match, ChannelSnapshot, (CompressorTarget,)
    ),
    ChallengeType.PROBLEM_FIX: _Route(evaluate_problem_fix, ChannelSnapshot, (ProblemTarget,)),
    ChallengeType.DRUM_SEQUENCING: _Route(evaluate_drum_sequencing, DrumPattern, (DrumTarget,)),
}


def snapshot_kind(challenge_type: str) -> type | None:
    """Snapshot class a type tag expects, or None for an unknown tag."""
    try:
        return _ROUTES[ChallengeType(normalise_type(challenge_type))].snapshot_type
    except ValueError:
        return None


def evaluate_challenge(challenge: Challenge, snapshot: Snapshot) -> ScoreResult:
    """Evaluate one attempt.

    Args:
        challenge: Immutable challenge definition.
        snapshot:  Learner state: ``SamplerParams``, ``ChannelSnapshot``, ``MixSnapshot``
                   or ``DrumPattern`` depending on the challenge type.

    Returns:
        ScoreResult. Unknown type tags, and snapshots or targets of the
        wrong shape, yield overall 0, 1 star, not passed.
    """
    try:
        challenge_type = ChallengeType(normalise_type(challenge.challenge_type))
    except ValueError:
        return fallback_result(challenge.challenge_type)

    route = _ROUTES[challenge_type]
    if not isinstance(snapshot, route.snapshot_type):
        return fallback_result(challenge_type.value, SNAPSHOT_MISMATCH_MESSAGE)
    if not isinstance(challenge.target, route.target_types):
        return fallback_result(challenge_type.value, TARGET_MISMATCH_MESSAGE)
    return route.evaluate(challenge, snapshot)


def evaluate_goal_challenge(
    challenge: Challenge,
    layer_states: Sequence[LayerState],
    bus: BusState | None = None,
) -> ScoreResult:
    """Evaluate a multi-layer challenge from its layer states.

    Convenience entry point for callers that hold a list of layers rather
    than a ``MixSnapshot``.
    """
    return evaluate_challenge(challenge, MixSnapshot(layers=tuple(layer_states), bus=bus))
