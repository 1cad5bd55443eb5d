"""
Tests for core/challenge_eval/snapshots.py — learner state from plain dicts.
"""

import pytest

from core.challenge_eval.snapshots import snapshot_from_dict
from core.challenge_eval.types import (
    BusState,
    ChannelSnapshot,
    CompressorParams,
    DrumPattern,
    DrumStep,
    DrumTrack,
    EQParams,
    LayerState,
    MixSnapshot,
    SamplerParams,
    SampleSlice,
)


class TestSampler:
    def test_nested_slices(self):
        params = snapshot_from_dict(
            "sampler",
            {"pitch": 2.0, "duration": 4.0, "slices": [{"start": 0.0, "end": 1.0}]},
        )
        assert params == SamplerParams(
            pitch=2.0, duration=4.0, slices=(SampleSlice(start=0.0, end=1.0),)
        )

    def test_empty_is_defaults(self):
        assert snapshot_from_dict("sampler", {}) == SamplerParams()

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="invalid sampler state"):
            snapshot_from_dict("sampler", {"pitchh": 2.0})

    def test_slice_must_be_object(self):
        with pytest.raises(ValueError, match="slice must be an object"):
            snapshot_from_dict("sampler", {"slices": [1.0]})


class TestChannel:
    def test_eq_and_compressor(self):
        snapshot = snapshot_from_dict(
            "channel", {"eq": {"low": 3.0}, "compressor": {"threshold": -18.0, "amount": 60.0}}
        )
        assert snapshot == ChannelSnapshot(
            eq=EQParams(low=3.0), compressor=CompressorParams(threshold=-18.0, amount=60.0)
        )

    def test_unexpected_field(self):
        with pytest.raises(ValueError, match="unexpected channel fields"):
            snapshot_from_dict("channel", {"eq": {}, "reverb": {}})


class TestMix:
    def test_layers_and_bus(self):
        snapshot = snapshot_from_dict(
            "mix",
            {
                "layers": [{"id": "kick", "volume": -3.0}, {"id": "pad", "muted": True}],
                "bus": {"compressor_amount": 20.0},
            },
        )
        assert snapshot == MixSnapshot(
            layers=(LayerState(id="kick", volume=-3.0), LayerState(id="pad", muted=True)),
            bus=BusState(compressor_amount=20.0),
        )

    def test_bus_is_optional(self):
        assert snapshot_from_dict("mix", {"layers": [{"id": "kick"}]}).bus is None

    def test_layer_requires_id(self):
        with pytest.raises(ValueError, match="invalid layer"):
            snapshot_from_dict("mix", {"layers": [{"volume": -3.0}]})


class TestDrums:
    def test_tracks_and_steps(self):
        pattern = snapshot_from_dict(
            "drums",
            {
                "tempo": 96.0,
                "swing": 0.25,
                "tracks": [
                    {"id": "kick", "steps": [{"active": True, "velocity": 1.0}, {}]},
                    {"id": "snare", "name": "Snare"},
                ],
            },
        )
        assert pattern == DrumPattern(
            tracks=(
                DrumTrack(id="kick", steps=(DrumStep(active=True, velocity=1.0), DrumStep())),
                DrumTrack(id="snare", name="Snare"),
            ),
            tempo=96.0,
            swing=0.25,
        )

    def test_empty_is_defaults(self):
        assert snapshot_from_dict("drums", {}) == DrumPattern()

    def test_track_requires_id(self):
        with pytest.raises(ValueError, match="invalid track"):
            snapshot_from_dict("drums", {"tracks": [{"steps": []}]})

    def test_unknown_step_field(self):
        with pytest.raises(ValueError, match="invalid step"):
            snapshot_from_dict("drums", {"tracks": [{"id": "kick", "steps": [{"on": True}]}]})

    def test_unknown_pattern_field(self):
        with pytest.raises(ValueError, match="invalid drum pattern"):
            snapshot_from_dict("drums", {"bpm": 120})


def test_unknown_kind():
    with pytest.raises(ValueError, match="Unknown snapshot kind"):
        snapshot_from_dict("synth", {})


def test_non_mapping_state():
    with pytest.raises(ValueError, match="must be an object"):
        snapshot_from_dict("mix", [1, 2])
