"""
core/challenge_eval/snapshots.py — Build learner snapshots from plain dicts.

Host layers (HTTP API, tools) receive learner state as JSON-like mappings.
This module turns them into the frozen snapshot types the engine reads:

    "sampler" → SamplerParams
    "channel" → ChannelSnapshot
    "mix"     → MixSnapshot
    "drums"   → DrumPattern

Unknown keys are rejected so typos in client payloads surface as errors
instead of silently scoring defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

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
    Snapshot,
)

SNAPSHOT_KINDS: tuple[str, ...] = ("sampler", "channel", "mix", "drums")


def _build(cls: type, data: Mapping[str, Any], what: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    try:
        return cls(**data)
    except TypeError as exc:
        raise ValueError(f"invalid {what}: {exc}") from exc


def _fields(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return dict(data)


def sampler_from_dict(data: Mapping[str, Any]) -> SamplerParams:
    fields = _fields(data, "sampler state")
    slices = tuple(_build(SampleSlice, s, "slice") for s in fields.pop("slices", ()) or ())
    return _build(SamplerParams, {**fields, "slices": slices}, "sampler state")


def channel_from_dict(data: Mapping[str, Any]) -> ChannelSnapshot:
    fields = _fields(data, "channel state")
    eq = _build(EQParams, fields.pop("eq", None) or {}, "eq")
    compressor = _build(CompressorParams, fields.pop("compressor", None) or {}, "compressor")
    if fields:
        raise ValueError(f"unexpected channel fields: {sorted(fields)}")
    return ChannelSnapshot(eq=eq, compressor=compressor)


def mix_from_dict(data: Mapping[str, Any]) -> MixSnapshot:
    fields = _fields(data, "mix state")
    layers = tuple(_build(LayerState, layer, "layer") for layer in fields.pop("layers", ()) or ())
    bus_data = fields.pop("bus", None)
    bus = None if bus_data is None else _build(BusState, bus_data, "bus")
    if fields:
        raise ValueError(f"unexpected mix fields: {sorted(fields)}")
    return MixSnapshot(layers=layers, bus=bus)


def _drum_track_from_dict(data: Mapping[str, Any]) -> DrumTrack:
    fields = _fields(data, "track")
    steps = tuple(_build(DrumStep, s, "step") for s in fields.pop("steps", ()) or ())
    return _build(DrumTrack, {**fields, "steps": steps}, "track")


def drums_from_dict(data: Mapping[str, Any]) -> DrumPattern:
    fields = _fields(data, "drum pattern")
    tracks = tuple(_drum_track_from_dict(t) for t in fields.pop("tracks", ()) or ())
    return _build(DrumPattern, {**fields, "tracks": tracks}, "drum pattern")


def snapshot_from_dict(kind: str, data: Mapping[str, Any]) -> Snapshot:
    """Build the snapshot of the given kind.

    Args:
        kind: One of ``SNAPSHOT_KINDS``.
        data: Field mapping; nested records (slices, eq, layers, bus, tracks) as mappings.

    Raises:
        ValueError: Unknown kind, unknown fields, or non-mapping records.
    """
    if kind == "sampler":
        return sampler_from_dict(data)
    if kind == "channel":
        return channel_from_dict(data)
    if kind == "mix":
        return mix_from_dict(data)
    if kind == "drums":
        return drums_from_dict(data)
    raise ValueError(f"Unknown snapshot kind {kind!r}. Available: {list(SNAPSHOT_KINDS)}")
