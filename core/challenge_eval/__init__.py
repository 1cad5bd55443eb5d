"""
core/challenge_eval — Challenge evaluation engine.

Scores a learner's sampler, channel, multi-layer mix or drum pattern state
against an immutable challenge definition and returns a 0–100 score, a star
rating, a pass/fail verdict and ordered feedback.

All evaluation functions are pure: frozen dataclasses in → frozen dataclasses
out. No logging, no I/O, no state between calls. The only impure piece is
the catalogue loader, which reads the bundled YAML once per process.

Public API:
    Types:      Challenge, ChallengeType, SamplerParams, SampleSlice,
                LayerState, BusState, ChannelSnapshot, MixSnapshot,
                DrumStep, DrumTrack, DrumPattern,
                ScoreResult, ScoreBreakdown, ConditionResult
    Routing:    evaluate_challenge, evaluate_goal_challenge
    Scoring:    score_tolerance, score_pitch, score_time_stretch,
                score_trim_points, score_fades, score_slices
    Conditions: evaluate_condition, effective_loudness
    Grading:    stars_for, PASS_THRESHOLD
    Progress:   ChallengeProgress, record_attempt, merge_progress
    Catalogue:  load_challenge, list_challenges, available_modules,
                challenge_from_dict, hints_for
"""

from core.challenge_eval._challenge_loader import (
    available_modules,
    challenge_from_dict,
    list_challenges,
    load_challenge,
)
from core.challenge_eval.conditions import effective_loudness, evaluate_condition
from core.challenge_eval.grading import PASS_THRESHOLD, stars_for
from core.challenge_eval.hints import hints_for
from core.challenge_eval.progress import ChallengeProgress, merge_progress, record_attempt
from core.challenge_eval.router import evaluate_challenge, evaluate_goal_challenge
from core.challenge_eval.tolerance import (
    DEFAULT_TOLERANCES,
    Tolerances,
    score_fades,
    score_pitch,
    score_slices,
    score_time_stretch,
    score_tolerance,
    score_trim_points,
)
from core.challenge_eval.types import (
    BusState,
    Challenge,
    ChallengeType,
    ChannelSnapshot,
    CompressorParams,
    ConditionResult,
    DrumPattern,
    DrumStep,
    DrumTrack,
    EQParams,
    LayerState,
    MixSnapshot,
    SamplerParams,
    SampleSlice,
    ScoreBreakdown,
    ScoreResult,
)

__all__ = [
    # Types
    "BusState",
    "Challenge",
    "ChallengeType",
    "ChannelSnapshot",
    "CompressorParams",
    "ConditionResult",
    "DrumPattern",
    "DrumStep",
    "DrumTrack",
    "EQParams",
    "LayerState",
    "MixSnapshot",
    "SampleSlice",
    "SamplerParams",
    "ScoreBreakdown",
    "ScoreResult",
    # Routing
    "evaluate_challenge",
    "evaluate_goal_challenge",
    # Scoring
    "DEFAULT_TOLERANCES",
    "Tolerances",
    "score_tolerance",
    "score_pitch",
    "score_time_stretch",
    "score_trim_points",
    "score_fades",
    "score_slices",
    # Conditions
    "evaluate_condition",
    "effective_loudness",
    # Grading
    "PASS_THRESHOLD",
    "stars_for",
    # Progress
    "ChallengeProgress",
    "record_attempt",
    "merge_progress",
    # Catalogue
    "available_modules",
    "challenge_from_dict",
    "hints_for",
    "list_challenges",
    "load_challenge",
]
