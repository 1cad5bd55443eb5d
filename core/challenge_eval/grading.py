"""
core/challenge_eval/grading.py — Result aggregation shared by every evaluator.

Every ``ScoreResult`` in the engine is built by ``grade`` (or
``fallback_result``), so the star mapping, the pass threshold and the
headline-first feedback order cannot drift between challenge types.

Bands:
    overall >= 90  → 3 stars
    overall >= 75  → 2 stars
    overall >= 60  → 1 star, passed
    otherwise      → 1 star, not passed

Pure module — no I/O, no logging.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from core.challenge_eval.tolerance import round_score
from core.challenge_eval.types import ChallengeType, ScoreBreakdown, ScoreResult

PASS_THRESHOLD = 60
"""Lowest overall score that passes a challenge."""

TWO_STAR_THRESHOLD = 75
THREE_STAR_THRESHOLD = 90

# Lowest star count a result can carry. Progress records use 0 for "never passed".
MIN_STARS = 1

# Sub-score bands for corrective notes.
NEEDS_WORK_BELOW = 70.0
CLOSE_BELOW = 90.0

# Headlines per challenge type, in band order: >= 90, >= 75, >= 60, below.
HEADLINES: dict[ChallengeType, tuple[str, str, str, str]] = {
    ChallengeType.REFERENCE_MATCH: (
        "Excellent balance!",
        "Good work, getting close!",
        "Keep refining the balance",
        "Listen to the reference again",
    ),
    ChallengeType.GOAL: (
        "All goals met!",
        "Almost there!",
        "Good start, keep going",
        "Review the goals and try again",
    ),
    ChallengeType.MULTITRACK_GOAL: (
        "All goals met!",
        "Almost there!",
        "Good start, keep going",
        "Review the goals and try again",
    ),
    ChallengeType.RECREATE_KIT: (
        "Excellent kit recreation!",
        "Good work, getting close!",
        "Keep refining your samples",
        "Listen to the reference again",
    ),
    ChallengeType.CHOP: (
        "Perfect chops!",
        "Nice chopping!",
        "Chops are acceptable",
        "Keep practicing your chopping",
    ),
    ChallengeType.TUNE_TO_TRACK: (
        "Sample is perfectly tuned to the track!",
        "Good tuning, almost there!",
        "Getting closer, keep adjusting",
        "Listen to the reference and match pitch/tempo",
    ),
    ChallengeType.CREATIVE: (
        "Impressive flip!",
        "Great creative work!",
        "Keep flipping!",
        "Load a sample and make it your own",
    ),
    ChallengeType.CLEAN_SAMPLE: (
        "Sample is clean and polished!",
        "Good cleanup work!",
        "Sample is usable, but could be cleaner",
        "Focus on trimming silence and smoothing edges",
    ),
    ChallengeType.EQ_MATCH: (
        "EQ matched!",
        "Close to the target EQ",
        "EQ is in the right direction",
        "Listen again and rebalance the EQ",
    ),
    ChallengeType.COMPRESSOR_MATCH: (
        "Compression dialed in!",
        "Close to the target compression",
        "Compression is in the right direction",
        "Listen again and adjust the compressor",
    ),
    ChallengeType.PROBLEM_FIX: (
        "Problem fixed!",
        "Mostly fixed, one more tweak",
        "Partly fixed, keep going",
        "The problem is still there",
    ),
    ChallengeType.DRUM_SEQUENCING: (
        "Excellent drum pattern!",
        "Good work, pattern is solid!",
        "Pattern is close, keep refining",
        "Keep practicing - listen to the target pattern",
    ),
}

UNKNOWN_TYPE_MESSAGE = "Unknown challenge type"
TARGET_MISMATCH_MESSAGE = "Challenge has no target for its type"


# ---------------------------------------------------------------------------
# Shared mappings
# ---------------------------------------------------------------------------


def stars_for(overall: int) -> int:
    """Star rating for an overall score. Monotonic non-decreasing."""
    if overall >= THREE_STAR_THRESHOLD:
        return 3
    if overall >= TWO_STAR_THRESHOLD:
        return 2
    return MIN_STARS


def is_passed(overall: int) -> bool:
    return overall >= PASS_THRESHOLD


def headline(challenge_type: ChallengeType, overall: int) -> str:
    """Summary line for ``overall`` in the wording of ``challenge_type``."""
    excellent, good, passing, failing = HEADLINES[challenge_type]
    if overall >= THREE_STAR_THRESHOLD:
        return excellent
    if overall >= TWO_STAR_THRESHOLD:
        return good
    if overall >= PASS_THRESHOLD:
        return passing
    return failing


def mean(scores: Iterable[float]) -> float | None:
    """Arithmetic mean, or None when there is nothing to average."""
    values = list(scores)
    if not values:
        return None
    return sum(values) / len(values)


# ---------------------------------------------------------------------------
# Result construction
# ---------------------------------------------------------------------------


def grade(
    challenge_type: ChallengeType,
    overall: float,
    breakdown: ScoreBreakdown,
    notes: Sequence[str] = (),
) -> ScoreResult:
    """Build the final result: round, clamp, rate and put the headline first.

    Args:
        challenge_type: Selects the headline wording.
        overall:        Unrounded aggregate score.
        breakdown:      Sub-scores that contributed.
        notes:          Corrective notes, in the order they should be shown.
    """
    # round_score maps NaN and infinities to 0.
    score = min(100, max(0, round_score(overall)))
    return ScoreResult(
        overall=score,
        stars=stars_for(score),
        passed=is_passed(score),
        breakdown=breakdown,
        feedback=(headline(challenge_type, score), *notes),
    )


def fallback_result(type_tag: str, message: str = UNKNOWN_TYPE_MESSAGE) -> ScoreResult:
    """Zero-score result for input the engine cannot evaluate."""
    return ScoreResult(
        overall=0,
        stars=MIN_STARS,
        passed=False,
        breakdown=ScoreBreakdown(type=type_tag),
        feedback=(message,),
    )
