"""
core/challenge_eval/types.py — Frozen data types for challenge evaluation.

All types are frozen dataclasses — immutable value objects that are safe
to share between the engine, the API layer, and tests.

Design:
    - No I/O, no side effects, no state.
    - Sequence fields are tuples and mapping-like fields are tuple-of-tuples
      so every record stays hashable.
    - Challenge targets and snapshots are closed unions; the router and the
      evaluators dispatch on the concrete class, never on ad-hoc dict keys.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Challenge type tags
# ---------------------------------------------------------------------------


class ChallengeType(Enum):
    """Canonical challenge type tags understood by the router."""

    REFERENCE_MATCH = "reference-match"
    GOAL = "goal"
    MULTITRACK_GOAL = "multitrack-goal"
    RECREATE_KIT = "recreate-kit"
    CHOP = "chop"
    TUNE_TO_TRACK = "tune-to-track"
    CREATIVE = "creative"
    CLEAN_SAMPLE = "clean-sample"
    EQ_MATCH = "eq-match"
    COMPRESSOR_MATCH = "compressor-match"
    PROBLEM_FIX = "problem-fix"
    DRUM_SEQUENCING = "drum-sequencing"


TYPE_ALIASES: dict[str, str] = {
    "chop-challenge": ChallengeType.CHOP.value,
    "flip-this": ChallengeType.CREATIVE.value,
    "reference": ChallengeType.REFERENCE_MATCH.value,
    "match-beat": ChallengeType.DRUM_SEQUENCING.value,
    "add-dynamics": ChallengeType.DRUM_SEQUENCING.value,
    "fix-groove": ChallengeType.DRUM_SEQUENCING.value,
    "complete-loop": ChallengeType.DRUM_SEQUENCING.value,
    "genre-challenge": ChallengeType.DRUM_SEQUENCING.value,
}
"""Legacy type tags and the canonical tag each one maps to."""


def normalise_type(type_tag: str) -> str:
    """Map legacy type tags to their canonical form."""
    return TYPE_ALIASES.get(type_tag, type_tag)


# ---------------------------------------------------------------------------
# Learner state: sampler
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SampleSlice:
    """One slice marker inside a loaded sample (times in seconds)."""

    start: float
    end: float
    pitch: float = 0.0
    velocity: float = 1.0
    id: str = ""


@dataclass(frozen=True)
class SamplerParams:
    """Snapshot of the sampler controls at the moment of evaluation.

    ``start_point`` and ``end_point`` are normalized to the sample length
    (0.0–1.0). ``duration`` is the loaded sample length in seconds and is
    only used to measure slice spacing.
    """

    pitch: float = 0.0
    """Pitch shift in semitones."""

    time_stretch: float = 1.0
    """Playback length ratio. 1.0 = unchanged."""

    start_point: float = 0.0
    end_point: float = 1.0
    loop: bool = False
    reverse: bool = False
    slices: tuple[SampleSlice, ...] = ()
    volume: float = 0.0
    fade_in: float = 0.0
    """Fade-in length in seconds."""

    fade_out: float = 0.0
    """Fade-out length in seconds."""

    sample_url: str | None = None
    duration: float = 0.0


# ---------------------------------------------------------------------------
# Learner state: mixing and production
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerState:
    """State of one layer (production) or track (mixing).

    Invariant:
        A muted layer is silent for every loudness comparison, whatever its
        stored ``volume`` — see ``conditions.effective_loudness``.
    """

    id: str
    name: str = ""
    volume: float = 0.0
    """Fader level in dB."""

    pan: float = 0.0
    """Stereo position, -1.0 (hard left) to 1.0 (hard right)."""

    muted: bool = False
    solo: bool = False
    eq_low: float = 0.0
    eq_mid: float = 0.0
    eq_high: float = 0.0
    reverb_mix: float = 0.0
    """Reverb send/mix in percent (0–100)."""

    compressor_amount: float | None = None
    """Track compressor amount in percent, None when the track has no compressor."""

    @property
    def display_name(self) -> str:
        """Name for feedback lines, falling back to the id."""
        return self.name or self.id


@dataclass(frozen=True)
class BusState:
    """Aggregate master/bus processing shared by all tracks."""

    eq_low: float = 0.0
    eq_mid: float = 0.0
    eq_high: float = 0.0
    compressor_amount: float = 0.0


@dataclass(frozen=True)
class EQParams:
    """Three-band channel EQ gains in dB."""

    low: float = 0.0
    mid: float = 0.0
    high: float = 0.0


@dataclass(frozen=True)
class CompressorParams:
    """Channel compressor controls."""

    threshold: float = -20.0
    """Threshold in dB."""

    amount: float = 0.0
    """Compression amount in percent."""

    attack: float = 0.01
    """Attack time in seconds."""

    release: float = 0.1
    """Release time in seconds."""


@dataclass(frozen=True)
class ChannelSnapshot:
    """Single-channel mixing state (EQ + compressor)."""

    eq: EQParams = field(default_factory=EQParams)
    compressor: CompressorParams = field(default_factory=CompressorParams)


@dataclass(frozen=True)
class MixSnapshot:
    """Multi-layer state for production and multitrack mixing challenges."""

    layers: tuple[LayerState, ...]
    bus: BusState | None = None


# ---------------------------------------------------------------------------
# Learner state: drum sequencer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DrumStep:
    """One step of a drum track. Velocity is 0.0–1.0."""

    active: bool = False
    velocity: float = 0.8


@dataclass(frozen=True)
class DrumTrack:
    """One instrument row of the step sequencer, matched by ``id``."""

    id: str
    steps: tuple[DrumStep, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class DrumPattern:
    """Step-sequencer pattern: tracks plus global tempo (BPM) and swing (0.0–1.0)."""

    tracks: tuple[DrumTrack, ...] = ()
    tempo: float = 120.0
    swing: float = 0.0


Snapshot = SamplerParams | ChannelSnapshot | MixSnapshot | DrumPattern

# ---------------------------------------------------------------------------
# Conditions, one frozen record per variant
#
# Each variant carries only the fields its check needs. Ranges are inclusive.
# Layer references are layer ids; EQ bands are "low", "mid" or "high".
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LevelOrder:
    """``louder`` is louder than ``quieter`` (muted layers count as silent)."""

    louder: str
    quieter: str


@dataclass(frozen=True)
class RelativeLevel:
    """Effective level of ``layer1`` minus ``layer2`` lies in [min_db, max_db]."""

    layer1: str
    layer2: str
    min_db: float
    max_db: float


@dataclass(frozen=True)
class PanPosition:
    layer_id: str
    min_pan: float
    max_pan: float


@dataclass(frozen=True)
class PanSpread:
    """Stereo width of the active layers is at least ``min_width``.

    An empty ``layer_ids`` means every layer takes part.
    """

    min_width: float
    layer_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class PanOpposite:
    """The two layers sit on opposite sides, each at least ``min_offset`` from center."""

    layer1: str
    layer2: str
    min_offset: float = 0.1


@dataclass(frozen=True)
class VolumeRange:
    layer_id: str
    min_db: float
    max_db: float


@dataclass(frozen=True)
class VolumeBalanced:
    """Both layers audible and within ``tolerance`` dB of each other."""

    layer1: str
    layer2: str
    tolerance: float


@dataclass(frozen=True)
class LayerActive:
    layer_id: str
    active: bool = True


@dataclass(frozen=True)
class LayerMuted:
    layer_id: str
    muted: bool = True


@dataclass(frozen=True)
class FrequencySeparation:
    """EQ gains of the two layers in ``band`` differ by at least ``min_difference`` dB."""

    layer1: str
    layer2: str
    band: str
    min_difference: float = 3.0


@dataclass(frozen=True)
class EqCut:
    layer_id: str
    band: str
    min_cut: float


@dataclass(frozen=True)
class EqBoost:
    layer_id: str
    band: str
    min_boost: float


@dataclass(frozen=True)
class ReverbAmount:
    layer_id: str
    min_mix: float = 0.0
    max_mix: float = 100.0


@dataclass(frozen=True)
class ReverbContrast:
    """``wet_layer`` carries at least ``min_difference`` percent more reverb than ``dry_layer``."""

    dry_layer: str
    wet_layer: str
    min_difference: float


@dataclass(frozen=True)
class DepthPlacement:
    """Layer sits at ``depth`` ("front", "middle" or "back"), judged by its reverb mix."""

    layer_id: str
    depth: str


@dataclass(frozen=True)
class TrackCompression:
    layer_id: str
    min_amount: float
    max_amount: float | None = None


@dataclass(frozen=True)
class CompressionContrast:
    more_compressed: str
    less_compressed: str
    min_difference: float


@dataclass(frozen=True)
class BusCompression:
    min_amount: float
    max_amount: float | None = None


@dataclass(frozen=True)
class BusEqBoost:
    band: str
    min_boost: float


@dataclass(frozen=True)
class BusEqCut:
    band: str
    min_cut: float


@dataclass(frozen=True)
class UnknownCondition:
    """A condition tag the catalogue could not map. Always fails."""

    tag: str


Condition = (
    LevelOrder
    | RelativeLevel
    | PanPosition
    | PanSpread
    | PanOpposite
    | VolumeRange
    | VolumeBalanced
    | LayerActive
    | LayerMuted
    | FrequencySeparation
    | EqCut
    | EqBoost
    | ReverbAmount
    | ReverbContrast
    | DepthPlacement
    | TrackCompression
    | CompressionContrast
    | BusCompression
    | BusEqBoost
    | BusEqCut
    | UnknownCondition
)

# ---------------------------------------------------------------------------
# Challenge targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SamplerTarget:
    """Sampler parameters to match. Absent fields are not scored."""

    pitch: float | None = None
    time_stretch: float | None = None
    start_point: float | None = None
    end_point: float | None = None
    fade_in: float | None = None
    fade_out: float | None = None


@dataclass(frozen=True)
class ReferenceLayer:
    """Target state for one layer of a reference mix.

    When ``layer_id`` is set the layer is matched by id, otherwise by position.
    """

    volume: float
    muted: bool = False
    pan: float | None = None
    eq_low: float | None = None
    eq_high: float | None = None
    layer_id: str | None = None


@dataclass(frozen=True)
class ReferenceTarget:
    """A full reference mix: one target record per layer."""

    layers: tuple[ReferenceLayer, ...]


@dataclass(frozen=True)
class GoalTarget:
    """A textual goal plus the conditions that define it."""

    description: str
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class EqTarget:
    """Three-band EQ settings to match (dB)."""

    low: float
    mid: float
    high: float


@dataclass(frozen=True)
class CompressorTarget:
    """Compressor settings to match. Timings are scored only when both are set."""

    threshold: float
    amount: float
    attack: float | None = None
    release: float | None = None


@dataclass(frozen=True)
class ProblemTarget:
    """A described mix problem and the inclusive ranges that solve it.

    ``eq_ranges`` and ``compressor_ranges`` are tuple-of-tuples:
    ``(("low", (-3.0, 0.0)),)`` means "low EQ between -3 and 0 dB".
    """

    description: str
    eq_ranges: tuple[tuple[str, tuple[float, float]], ...] = ()
    compressor_ranges: tuple[tuple[str, tuple[float, float]], ...] = ()


DRUM_FOCUS_AREAS: tuple[str, ...] = ("pattern", "velocity", "swing", "tempo")
"""Aspects a drum-sequencing challenge can score, in feedback order."""


@dataclass(frozen=True)
class DrumTarget:
    """Target pattern plus the aspects of it that are scored."""

    pattern: DrumPattern
    focus: tuple[str, ...]

    def __post_init__(self) -> None:
        """Focus entries must be known aspects."""
        unknown = [f for f in self.focus if f not in DRUM_FOCUS_AREAS]
        if unknown:
            raise ValueError(f"unknown drum focus {unknown}, expected any of {DRUM_FOCUS_AREAS}")


ChallengeTarget = (
    SamplerTarget
    | ReferenceTarget
    | GoalTarget
    | EqTarget
    | CompressorTarget
    | ProblemTarget
    | DrumTarget
)

# ---------------------------------------------------------------------------
# Challenge
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Challenge:
    """Immutable definition of one exercise.

    ``challenge_type`` keeps the tag exactly as authored so the router can
    answer unknown tags with a fallback result instead of failing to load.
    """

    id: str
    title: str
    description: str
    difficulty: int
    module: str
    challenge_type: str
    target: ChallengeTarget | None = None
    hints: tuple[str, ...] = ()
    expected_slices: int | None = None
    target_key: str | None = None
    target_bpm: float | None = None
    available_controls: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        """Validate authored fields."""
        if self.difficulty not in (1, 2, 3):
            raise ValueError(f"difficulty must be 1, 2 or 3, got {self.difficulty}")
        if self.expected_slices is not None and self.expected_slices < 0:
            raise ValueError(f"expected_slices must be non-negative, got {self.expected_slices}")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConditionResult:
    """Outcome of one condition check."""

    description: str
    passed: bool
    value: float | None = None
    """Measured value behind the verdict, for diagnostics. None when not measurable."""


@dataclass(frozen=True)
class LayerScore:
    """Reference-match score for one layer."""

    id: str
    name: str
    score: float


@dataclass(frozen=True)
class ScoreBreakdown:
    """Challenge-type-tagged sub-scores. A field is None when it did not apply."""

    type: str
    pitch_score: float | None = None
    slice_score: float | None = None
    timing_score: float | None = None
    trim_score: float | None = None
    fade_score: float | None = None
    creativity_score: float | None = None
    pattern_score: float | None = None
    velocity_score: float | None = None
    swing_score: float | None = None
    tempo_score: float | None = None
    layer_scores: tuple[LayerScore, ...] | None = None
    condition_results: tuple[ConditionResult, ...] | None = None
    components: tuple[tuple[str, float], ...] = ()
    """Named per-effect sub-scores (e.g. ``("low", 85.0)``) for mixing challenges."""

    def as_dict(self) -> dict[str, Any]:
        """Return only the sub-scores that applied, JSON-ready."""
        out: dict[str, Any] = {"type": self.type}
        for key in (
            "pitch_score",
            "slice_score",
            "timing_score",
            "trim_score",
            "fade_score",
            "creativity_score",
            "pattern_score",
            "velocity_score",
            "swing_score",
            "tempo_score",
        ):
            value = getattr(self, key)
            if value is not None:
                out[key] = _finite_score(value)
        if self.layer_scores is not None:
            out["layer_scores"] = [
                {"id": ls.id, "name": ls.name, "score": _finite_score(ls.score)}
                for ls in self.layer_scores
            ]
        if self.condition_results is not None:
            out["condition_results"] = [
                {
                    "description": cr.description,
                    "passed": cr.passed,
                    "value": _finite_or_none(cr.value),
                }
                for cr in self.condition_results
            ]
        if self.components:
            out["components"] = {name: _finite_score(score) for name, score in self.components}
        return out


@dataclass(frozen=True)
class ScoreResult:
    """Final evaluation of one attempt.

    Invariants:
        0 <= overall <= 100
        passed == (overall >= 60)
        feedback[0] is the summary headline
    """

    overall: int
    stars: int
    passed: bool
    breakdown: ScoreBreakdown
    feedback: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict."""
        return {
            "overall": self.overall,
            "stars": self.stars,
            "passed": self.passed,
            "breakdown": self.breakdown.as_dict(),
            "feedback": list(self.feedback),
        }


def _finite_or_none(value: float | None) -> float | None:
    """Silent layers measure as -inf; JSON has no infinity."""
    if value is None or not math.isfinite(value):
        return None
    return round(value, 2)


def _finite_score(value: float) -> float:
    """A sub-score computed from non-finite learner input counts as 0."""
    return round(value, 2) if math.isfinite(value) else 0.0
