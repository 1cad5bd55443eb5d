"""
api/schemas/challenges.py — Pydantic models for the /challenges endpoints.

Learner-state models mirror the engine's snapshot dataclasses field for
field (snake_case), so a validated request dumps straight into
``core.challenge_eval.snapshots.snapshot_from_dict``. Unknown fields, NaN
and infinite numbers are rejected with 422.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.challenge_eval.snapshots import SNAPSHOT_KINDS

# ---------------------------------------------------------------------------
# Learner state
# ---------------------------------------------------------------------------


class _State(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class SliceState(_State):
    start: float = Field(..., ge=0, description="Slice start in seconds")
    end: float = Field(..., ge=0, description="Slice end in seconds")
    pitch: float = Field(0.0, description="Per-slice pitch offset in semitones")
    velocity: float = Field(1.0, ge=0, le=1)
    id: str = ""


class SamplerState(_State):
    """Sampler controls at the moment of submission."""

    pitch: float = Field(0.0, ge=-48, le=48, description="Pitch shift in semitones")
    time_stretch: float = Field(1.0, gt=0, description="Playback length ratio, 1.0 = unchanged")
    start_point: float = Field(0.0, ge=0, le=1, description="Normalized start point")
    end_point: float = Field(1.0, ge=0, le=1, description="Normalized end point")
    loop: bool = False
    reverse: bool = False
    slices: list[SliceState] = Field(default_factory=list)
    volume: float = Field(0.0, description="Output level in dB")
    fade_in: float = Field(0.0, ge=0, description="Fade-in length in seconds")
    fade_out: float = Field(0.0, ge=0, description="Fade-out length in seconds")
    sample_url: str | None = Field(None, description="Loaded sample, null when none is loaded")
    duration: float = Field(0.0, ge=0, description="Sample length in seconds")


class EQState(_State):
    low: float = Field(0.0, description="Low band gain in dB")
    mid: float = Field(0.0, description="Mid band gain in dB")
    high: float = Field(0.0, description="High band gain in dB")


class CompressorState(_State):
    threshold: float = Field(-20.0, le=0, description="Threshold in dB")
    amount: float = Field(0.0, ge=0, le=100, description="Compression amount in percent")
    attack: float = Field(0.01, ge=0, description="Attack in seconds")
    release: float = Field(0.1, ge=0, description="Release in seconds")


class ChannelState(_State):
    """Single-channel EQ and compressor."""

    eq: EQState = Field(default_factory=EQState)
    compressor: CompressorState = Field(default_factory=CompressorState)


class LayerStateModel(_State):
    id: str = Field(..., min_length=1, description="Layer id referenced by challenge conditions")
    name: str = ""
    volume: float = Field(0.0, description="Fader level in dB")
    pan: float = Field(0.0, ge=-1, le=1)
    muted: bool = False
    solo: bool = False
    eq_low: float = 0.0
    eq_mid: float = 0.0
    eq_high: float = 0.0
    reverb_mix: float = Field(0.0, ge=0, le=100, description="Reverb mix in percent")
    compressor_amount: float | None = Field(None, ge=0, le=100)


class BusStateModel(_State):
    eq_low: float = 0.0
    eq_mid: float = 0.0
    eq_high: float = 0.0
    compressor_amount: float = Field(0.0, ge=0, le=100)


class MixState(_State):
    """Every layer of a multi-layer challenge, plus the optional master bus."""

    layers: list[LayerStateModel] = Field(..., min_length=1)
    bus: BusStateModel | None = None


class DrumStepState(_State):
    active: bool = False
    velocity: float = Field(0.8, ge=0, le=1, description="Hit strength")


class DrumTrackState(_State):
    id: str = Field(..., min_length=1, description="Track id, e.g. 'kick' or 'hihat-closed'")
    name: str = ""
    steps: list[DrumStepState] = Field(default_factory=list)


class DrumPatternState(_State):
    """Step-sequencer pattern: every track plus global tempo and swing."""

    tracks: list[DrumTrackState] = Field(default_factory=list)
    tempo: float = Field(120.0, gt=0, description="Tempo in BPM")
    swing: float = Field(0.0, ge=0, le=1, description="Swing amount, 0 = straight")


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class EvaluateRequest(BaseModel):
    """POST /challenges/{id}/evaluate — exactly one learner state."""

    model_config = ConfigDict(extra="forbid")

    sampler: SamplerState | None = None
    channel: ChannelState | None = None
    mix: MixState | None = None
    drums: DrumPatternState | None = None

    @model_validator(mode="after")
    def exactly_one_state(self) -> EvaluateRequest:
        """Reject bodies with zero or several states."""
        provided = [kind for kind in SNAPSHOT_KINDS if getattr(self, kind) is not None]
        if len(provided) != 1:
            raise ValueError(
                f"provide exactly one of {', '.join(SNAPSHOT_KINDS)}; got {provided or 'none'}"
            )
        return self

    def state(self) -> tuple[str, dict[str, Any]]:
        """Return (kind, fields) for the provided state, explicit fields only."""
        for kind in SNAPSHOT_KINDS:
            model = getattr(self, kind)
            if model is not None:
                return kind, model.model_dump(exclude_unset=True)
        raise ValueError("no learner state provided")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ChallengeSummary(BaseModel):
    """One catalogue entry in GET /challenges."""

    id: str
    title: str
    difficulty: int = Field(..., ge=1, le=3)
    module: str
    challenge_type: str


class ChallengeDetail(ChallengeSummary):
    """GET /challenges/{id} — everything the learner may see, no solution values."""

    description: str
    hint_count: int
    controls: list[str]
    goal: str | None = Field(None, description="Goal statement for goal challenges")
    goals: list[str] = Field(default_factory=list, description="Condition statements to satisfy")
    focus: list[str] = Field(
        default_factory=list, description="Scored aspects of a drum-sequencing challenge"
    )
    expected_slices: int | None = None
    target_key: str | None = None
    target_bpm: float | None = None


class HintsResponse(BaseModel):
    """GET /challenges/{id}/hints."""

    challenge_id: str
    hints: list[str]
    revealed: int
    total: int
