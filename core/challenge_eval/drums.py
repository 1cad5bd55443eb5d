"""
core/challenge_eval/drums.py — Evaluator for drum-sequencing challenges.

The learner programs a step sequencer; the challenge names the aspects of
the target pattern that are scored (its focus):

    pattern    share of steps whose on/off state matches, per track
    velocity   hit strength on steps active in both patterns
    swing      global swing amount, ±0.1 tolerance
    tempo      BPM, ±5 tolerance

The overall score is the mean of the focused sub-scores. A challenge with
no focus scores 0.

Pure module — no I/O, no logging.
"""

from __future__ import annotations

from core.challenge_eval.grading import (
    CLOSE_BELOW,
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
    DrumPattern,
    DrumTarget,
    DrumTrack,
    ScoreBreakdown,
    ScoreResult,
)

# Corrective notes per focus area: (needs work, close).
_NOTES: dict[str, tuple[str, str]] = {
    "pattern": (
        "Some steps are in the wrong position - check the pattern",
        "Pattern is close, but a few steps need adjustment",
    ),
    "velocity": (
        "Velocity dynamics are off - adjust hit strengths",
        "Velocities are close, fine-tune the dynamics",
    ),
    "swing": (
        "Swing amount needs adjustment",
        "Swing is close, small adjustment needed",
    ),
    "tempo": (
        "Tempo is off - check the BPM",
        "Tempo is close, fine-tune the BPM",
    ),
}


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------


def _track_pattern_score(actual: DrumTrack, target: DrumTrack) -> float:
    """Percentage of shared steps whose on/off state matches."""
    length = min(len(actual.steps), len(target.steps))
    if length == 0:
        return 100.0
    matches = sum(
        1 for a, t in zip(actual.steps[:length], target.steps[:length]) if a.active == t.active
    )
    return matches / length * 100.0


def score_pattern(actual: DrumPattern, target: DrumPattern) -> float:
    """Mean step-placement score over the target's tracks.

    Tracks are matched by id. A target track the learner does not have
    scores 0; a target with no tracks scores 100.
    """
    if not target.tracks:
        return 100.0
    by_id = {track.id: track for track in actual.tracks}
    scores = [
        _track_pattern_score(by_id[track.id], track) if track.id in by_id else 0.0
        for track in target.tracks
    ]
    return sum(scores) / len(scores)


def score_velocity(actual: DrumPattern, target: DrumPattern) -> float:
    """Mean velocity closeness over steps active in both patterns.

    100 when no step is active in both.
    """
    by_id = {track.id: track for track in actual.tracks}
    scores: list[float] = []
    for target_track in target.tracks:
        track = by_id.get(target_track.id)
        if track is None:
            continue
        for a, t in zip(track.steps, target_track.steps):
            if a.active and t.active:
                scores.append(
                    score_tolerance(a.velocity, t.velocity, DEFAULT_TOLERANCES.velocity)
                )
    return 100.0 if not scores else sum(scores) / len(scores)


def score_swing(actual: float, target: float) -> float:
    """Swing amount, ±0.1 tolerance."""
    return score_tolerance(actual, target, DEFAULT_TOLERANCES.swing)


def score_tempo(actual: float, target: float) -> float:
    """Tempo in BPM, ±5 tolerance."""
    return score_tolerance(actual, target, DEFAULT_TOLERANCES.tempo)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


def evaluate_drum_sequencing(challenge: Challenge, pattern: DrumPattern) -> ScoreResult:
    """Score the focused aspects of the learner's pattern against the target."""
    target = challenge.target
    if not isinstance(target, DrumTarget):
        return fallback_result(ChallengeType.DRUM_SEQUENCING.value, TARGET_MISMATCH_MESSAGE)

    sub_scores: dict[str, float] = {}
    if "pattern" in target.focus:
        sub_scores["pattern"] = score_pattern(pattern, target.pattern)
    if "velocity" in target.focus:
        sub_scores["velocity"] = score_velocity(pattern, target.pattern)
    if "swing" in target.focus:
        sub_scores["swing"] = score_swing(pattern.swing, target.pattern.swing)
    if "tempo" in target.focus:
        sub_scores["tempo"] = score_tempo(pattern.tempo, target.pattern.tempo)

    notes: list[str] = []
    for area, score in sub_scores.items():
        needs_work, close = _NOTES[area]
        if score < NEEDS_WORK_BELOW:
            notes.append(needs_work)
        elif score < CLOSE_BELOW:
            notes.append(close)

    overall = mean(sub_scores.values())
    breakdown = ScoreBreakdown(
        type=ChallengeType.DRUM_SEQUENCING.value,
        pattern_score=sub_scores.get("pattern"),
        velocity_score=sub_scores.get("velocity"),
        swing_score=sub_scores.get("swing"),
        tempo_score=sub_scores.get("tempo"),
    )
    return grade(
        ChallengeType.DRUM_SEQUENCING, 0.0 if overall is None else overall, breakdown, notes
    )
