"""
core/challenge_eval/sampling.py — Evaluators for sampler challenges.

One function per sampler challenge type, each ``(challenge, params) →
ScoreResult``:

    recreate-kit   pitch + slices + time stretch, whichever targets exist
    chop           slice count and spacing (4 slices when unspecified)
    tune-to-track  pitch + time stretch, whichever targets exist
    creative       rewards loading a sample and manipulating it
    clean-sample   trim points + fades, with a heuristic when no targets exist

Only sub-scores whose target is present are averaged. Notes follow the
shared bands: below 70 needs work, 70–90 is close, 90+ gets no note.

Pure module — no I/O, no logging.
"""

from __future__ import annotations

from core.challenge_eval.grading import CLOSE_BELOW, NEEDS_WORK_BELOW, grade, mean
from core.challenge_eval.tolerance import (
    score_fades,
    score_pitch,
    score_slices,
    score_time_stretch,
    score_trim_points,
)
from core.challenge_eval.types import (
    Challenge,
    ChallengeType,
    SamplerParams,
    SamplerTarget,
    ScoreBreakdown,
    ScoreResult,
)

DEFAULT_EXPECTED_SLICES = 4

# Clean-sample heuristic scores when the challenge has no trim/fade targets.
_HEURISTIC_FULL = 100.0
_HEURISTIC_PARTIAL = 75.0
_HEURISTIC_NONE = 50.0

# Creative scoring.
_UNMODIFIED_SCORE = 50.0
_MANIPULATION_BASE = 60.0
_MANIPULATION_STEP = 10.0


def _sampler_target(challenge: Challenge) -> SamplerTarget:
    if isinstance(challenge.target, SamplerTarget):
        return challenge.target
    return SamplerTarget()


def _fmt(value: float) -> str:
    return f"{value:g}"


def _is_trimmed(params: SamplerParams) -> bool:
    return params.start_point > 0 or params.end_point < 1


# ---------------------------------------------------------------------------
# Recreate kit
# ---------------------------------------------------------------------------


def evaluate_recreate_kit(challenge: Challenge, params: SamplerParams) -> ScoreResult:
    """Score pitch, slices and time stretch against whichever targets exist.

    A challenge with no target fields at all has nothing to miss and
    scores 100.
    """
    target = _sampler_target(challenge)
    notes: list[str] = []
    scores: list[float] = []

    pitch_score: float | None = None
    if target.pitch is not None:
        pitch_score = score_pitch(params.pitch, target.pitch)
        scores.append(pitch_score)
        if pitch_score < NEEDS_WORK_BELOW:
            notes.append(f"Pitch is off by {_fmt(abs(params.pitch - target.pitch))} semitones")
        elif pitch_score < CLOSE_BELOW:
            notes.append("Pitch is close, fine-tune it")

    slice_score: float | None = None
    if challenge.expected_slices is not None:
        slice_score = float(score_slices(params.slices, challenge.expected_slices, params.duration))
        scores.append(slice_score)
        if slice_score < NEEDS_WORK_BELOW:
            notes.append(
                f"Expected {challenge.expected_slices} slices, you have {len(params.slices)}"
            )
        elif slice_score < CLOSE_BELOW:
            notes.append("Check your slice distribution")

    timing_score: float | None = None
    if target.time_stretch is not None:
        timing_score = score_time_stretch(params.time_stretch, target.time_stretch)
        scores.append(timing_score)
        if timing_score < NEEDS_WORK_BELOW:
            notes.append("Time stretch is off target")
        elif timing_score < CLOSE_BELOW:
            notes.append("Time stretch is close")

    overall = mean(scores)
    breakdown = ScoreBreakdown(
        type=ChallengeType.RECREATE_KIT.value,
        pitch_score=pitch_score,
        slice_score=slice_score,
        timing_score=timing_score,
    )
    return grade(
        ChallengeType.RECREATE_KIT, 100.0 if overall is None else overall, breakdown, notes
    )


# ---------------------------------------------------------------------------
# Chop
# ---------------------------------------------------------------------------


def evaluate_chop(challenge: Challenge, params: SamplerParams) -> ScoreResult:
    """Score slice count and spacing."""
    expected = (
        challenge.expected_slices
        if challenge.expected_slices is not None
        else DEFAULT_EXPECTED_SLICES
    )
    actual = len(params.slices)
    slice_score = score_slices(params.slices, expected, params.duration)
    notes: list[str] = []

    if actual == 0 and expected > 0:
        notes.append("No slices created - chop up the sample!")
    elif actual != expected:
        notes.append(f"Expected {expected} slices, you have {actual}")

    if slice_score < 60 and actual > 0:
        notes.append("Try spacing your chops more evenly")
    elif 60 <= slice_score < CLOSE_BELOW:
        notes.append("Good chopping, refine the spacing")

    breakdown = ScoreBreakdown(type=ChallengeType.CHOP.value, slice_score=float(slice_score))
    return grade(ChallengeType.CHOP, slice_score, breakdown, notes)


# ---------------------------------------------------------------------------
# Tune to track
# ---------------------------------------------------------------------------


def evaluate_tune_to_track(challenge: Challenge, params: SamplerParams) -> ScoreResult:
    """Score pitch and time stretch against the track's key and tempo targets."""
    target = _sampler_target(challenge)
    notes: list[str] = []
    scores: list[float] = []

    pitch_score: float | None = None
    if target.pitch is not None:
        pitch_score = score_pitch(params.pitch, target.pitch)
        scores.append(pitch_score)
        if pitch_score < NEEDS_WORK_BELOW:
            direction = "sharp" if params.pitch > target.pitch else "flat"
            notes.append(f"Sample is {direction} - adjust pitch")
        elif pitch_score < CLOSE_BELOW:
            notes.append("Almost in tune, small adjustment needed")

    timing_score: float | None = None
    if target.time_stretch is not None:
        timing_score = score_time_stretch(params.time_stretch, target.time_stretch)
        scores.append(timing_score)
        if timing_score < NEEDS_WORK_BELOW:
            notes.append("Tempo is off - adjust time stretch")
        elif timing_score < CLOSE_BELOW:
            notes.append("Tempo is close, fine-tune it")

    overall = mean(scores)
    breakdown = ScoreBreakdown(
        type=ChallengeType.TUNE_TO_TRACK.value,
        pitch_score=pitch_score,
        timing_score=timing_score,
    )
    return grade(
        ChallengeType.TUNE_TO_TRACK, 100.0 if overall is None else overall, breakdown, notes
    )


# ---------------------------------------------------------------------------
# Creative
# ---------------------------------------------------------------------------


def count_manipulations(params: SamplerParams) -> int:
    """How many of pitch, stretch, slices, reverse and trim differ from defaults."""
    return sum(
        (
            params.pitch != 0,
            params.time_stretch != 1.0,
            len(params.slices) > 0,
            params.reverse,
            _is_trimmed(params),
        )
    )


def evaluate_creative(challenge: Challenge, params: SamplerParams) -> ScoreResult:
    """Reward loading a sample and transforming it in several ways."""
    notes: list[str] = []
    manipulations = count_manipulations(params)

    if not params.sample_url:
        creativity = 0.0
        notes.append("Load a sample to start your flip")
    elif manipulations == 0:
        creativity = _UNMODIFIED_SCORE
        notes.append("Sample loaded - now get creative! Try pitching, chopping, or reversing")
    else:
        creativity = min(100.0, _MANIPULATION_BASE + _MANIPULATION_STEP * manipulations)
        if manipulations == 1:
            notes.append("Good start! Try combining more techniques")
        elif manipulations == 2:
            notes.append("Nice! Keep experimenting")
        else:
            notes.append("Creative flip! You're using multiple techniques")

    breakdown = ScoreBreakdown(type=ChallengeType.CREATIVE.value, creativity_score=creativity)
    return grade(ChallengeType.CREATIVE, creativity, breakdown, notes)


# ---------------------------------------------------------------------------
# Clean sample
# ---------------------------------------------------------------------------


def evaluate_clean_sample(challenge: Challenge, params: SamplerParams) -> ScoreResult:
    """Score trim points and fades.

    A missing start or end target defaults to the untrimmed edge (0 or 1),
    a missing fade target to no fade. With no trim or fade target at all the
    learner is graded on whether any cleanup was applied.
    """
    target = _sampler_target(challenge)
    notes: list[str] = []

    trim_score: float | None = None
    if target.start_point is not None or target.end_point is not None:
        trim_score = score_trim_points(
            params.start_point,
            params.end_point,
            target.start_point if target.start_point is not None else 0.0,
            target.end_point if target.end_point is not None else 1.0,
        )
        if trim_score < NEEDS_WORK_BELOW:
            notes.append("Trim points need adjustment")
        elif trim_score < CLOSE_BELOW:
            notes.append("Trim is close, refine the start/end points")

    fade_score: float | None = None
    if target.fade_in is not None or target.fade_out is not None:
        fade_score = score_fades(
            params.fade_in,
            params.fade_out,
            target.fade_in if target.fade_in is not None else 0.0,
            target.fade_out if target.fade_out is not None else 0.0,
        )
        if fade_score < NEEDS_WORK_BELOW:
            notes.append("Adjust your fades to smooth the edges")
        elif fade_score < CLOSE_BELOW:
            notes.append("Fades are close, fine-tune them")

    if trim_score is None and fade_score is None:
        has_trim = _is_trimmed(params)
        has_fades = params.fade_in > 0 or params.fade_out > 0
        if has_trim and has_fades:
            trim_score = fade_score = _HEURISTIC_FULL
        elif has_trim or has_fades:
            trim_score = fade_score = _HEURISTIC_PARTIAL
            notes.append("Good start! Try trimming and adding fades")
        else:
            trim_score = fade_score = _HEURISTIC_NONE
            notes.append("Trim the sample and add fades to clean it up")

    overall = mean(s for s in (trim_score, fade_score) if s is not None)
    breakdown = ScoreBreakdown(
        type=ChallengeType.CLEAN_SAMPLE.value,
        trim_score=trim_score,
        fade_score=fade_score,
    )
    return grade(ChallengeType.CLEAN_SAMPLE, overall or 0.0, breakdown, notes)
