"""
core/challenge_eval/mixing.py — Evaluators for single-channel mixing challenges.

    eq-match          three-band EQ closeness (±3 dB per band)
    compressor-match  threshold and amount, plus attack and release when
                      the target sets both
    problem-fix       every supplied solution range is pass/fail

Matching challenges reuse the shared tolerance curve, so "close" means the
same 70–100 band here as everywhere else in the engine.

Pure module — no I/O, no logging.
"""

from __future__ import annotations

from core.challenge_eval.grading import (
    NEEDS_WORK_BELOW,
    TARGET_MISMATCH_MESSAGE,
    fallback_result,
    grade,
    mean,
)
from core.challenge_eval.tolerance import DEFAULT_TOLERANCES, score_tolerance
from core.challenge_eval.types import (
    Challenge,
    ChallengeType,
    ChannelSnapshot,
    CompressorTarget,
    EqTarget,
    ProblemTarget,
    ScoreBreakdown,
    ScoreResult,
)

EQ_BAND_NAMES: tuple[str, ...] = ("low", "mid", "high")
COMPRESSOR_RANGE_NAMES: tuple[str, ...] = ("threshold", "amount")

# Per-band correction wording: {band: template with a {direction} slot}.
_EQ_NOTES = {
    "low": "Try to {direction} the low frequencies more",
    "mid": "The mids need more {direction}",
    "high": "Adjust the highs - {direction} a bit more",
}


def _fmt(value: float) -> str:
    return f"{value:g}"


# ---------------------------------------------------------------------------
# EQ match
# ---------------------------------------------------------------------------


def evaluate_eq_match(challenge: Challenge, snapshot: ChannelSnapshot) -> ScoreResult:
    """Score each EQ band against the target and name the bands to fix."""
    target = challenge.target
    if not isinstance(target, EqTarget):
        return fallback_result(ChallengeType.EQ_MATCH.value, TARGET_MISMATCH_MESSAGE)

    components: list[tuple[str, float]] = []
    notes: list[str] = []
    for band in EQ_BAND_NAMES:
        actual, wanted = getattr(snapshot.eq, band), getattr(target, band)
        score = score_tolerance(actual, wanted, DEFAULT_TOLERANCES.eq)
        components.append((band, score))
        if score < NEEDS_WORK_BELOW:
            direction = "boost" if actual < wanted else "cut"
            notes.append(_EQ_NOTES[band].format(direction=direction))

    if not notes:
        notes.append("Good EQ balance!")

    overall = mean(score for _, score in components) or 0.0
    breakdown = ScoreBreakdown(type=ChallengeType.EQ_MATCH.value, components=tuple(components))
    return grade(ChallengeType.EQ_MATCH, overall, breakdown, notes)


# ---------------------------------------------------------------------------
# Compressor match
# ---------------------------------------------------------------------------


def evaluate_compressor_match(challenge: Challenge, snapshot: ChannelSnapshot) -> ScoreResult:
    """Score threshold and amount, and attack/release when both are targeted."""
    target = challenge.target
    if not isinstance(target, CompressorTarget):
        return fallback_result(ChallengeType.COMPRESSOR_MATCH.value, TARGET_MISMATCH_MESSAGE)
    comp = snapshot.compressor
    tol = DEFAULT_TOLERANCES

    threshold = score_tolerance(comp.threshold, target.threshold, tol.threshold)
    amount = score_tolerance(comp.amount, target.amount, tol.amount)
    components: list[tuple[str, float]] = [("threshold", threshold), ("amount", amount)]
    notes: list[str] = []

    if threshold < NEEDS_WORK_BELOW:
        direction = "Raise" if comp.threshold < target.threshold else "Lower"
        notes.append(f"{direction} the threshold")
    if amount < NEEDS_WORK_BELOW:
        direction = "Increase" if comp.amount < target.amount else "Decrease"
        notes.append(f"{direction} the compression amount")

    if target.attack is not None and target.release is not None:
        attack = score_tolerance(comp.attack, target.attack, tol.attack)
        release = score_tolerance(comp.release, target.release, tol.release)
        components += [("attack", attack), ("release", release)]
        if attack < NEEDS_WORK_BELOW:
            direction = "slower" if comp.attack < target.attack else "faster"
            notes.append(f"Try a {direction} attack")
        if release < NEEDS_WORK_BELOW:
            direction = "slower" if comp.release < target.release else "faster"
            notes.append(f"Adjust for a {direction} release")

    if not notes:
        notes.append("Compression settings look good!")

    overall = mean(score for _, score in components) or 0.0
    breakdown = ScoreBreakdown(
        type=ChallengeType.COMPRESSOR_MATCH.value, components=tuple(components)
    )
    return grade(ChallengeType.COMPRESSOR_MATCH, overall, breakdown, notes)


# ---------------------------------------------------------------------------
# Problem fix
# ---------------------------------------------------------------------------


def evaluate_problem_fix(challenge: Challenge, snapshot: ChannelSnapshot) -> ScoreResult:
    """Check each solution range: 100 inside (inclusive), 0 outside.

    The overall score is the mean over the supplied ranges; a problem with
    no ranges scores 0. Ranges on unknown controls count as unmet.
    """
    target = challenge.target
    if not isinstance(target, ProblemTarget):
        return fallback_result(ChallengeType.PROBLEM_FIX.value, TARGET_MISMATCH_MESSAGE)

    components: list[tuple[str, float]] = []
    notes: list[str] = []

    for band, (low, high) in target.eq_ranges:
        value = getattr(snapshot.eq, band) if band in EQ_BAND_NAMES else None
        ok = value is not None and low <= value <= high
        components.append((f"eq_{band}", 100.0 if ok else 0.0))
        if not ok:
            notes.append(
                f"{band.capitalize()} EQ should be between {_fmt(low)} and {_fmt(high)} dB"
            )

    for name, (low, high) in target.compressor_ranges:
        value = getattr(snapshot.compressor, name) if name in COMPRESSOR_RANGE_NAMES else None
        ok = value is not None and low <= value <= high
        components.append((f"compressor_{name}", 100.0 if ok else 0.0))
        if ok:
            continue
        if name == "amount":
            notes.append(f"Compression amount should be between {_fmt(low)}% and {_fmt(high)}%")
        else:
            notes.append(
                f"{name.capitalize()} should be between {_fmt(low)} and {_fmt(high)} dB"
            )

    if not components:
        notes.append("This problem has no solution ranges to check")
    elif not notes:
        notes.append("Problem solved correctly!")

    overall = mean(score for _, score in components) or 0.0
    breakdown = ScoreBreakdown(type=ChallengeType.PROBLEM_FIX.value, components=tuple(components))
    return grade(ChallengeType.PROBLEM_FIX, overall, breakdown, notes)
