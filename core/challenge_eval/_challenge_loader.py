"""
core/challenge_eval/_challenge_loader.py — Load the bundled challenge catalogue.

Uses importlib.resources (stdlib) to read the YAML files bundled in the
core/challenge_eval/challenges/ package. The whole catalogue is parsed once
per process and cached in a module-level dict keyed by challenge id.

YAML record shape (one list entry under ``challenges:``):

    id, title, description, difficulty, module, type   (required)
    hints, controls, expected_slices, target_key,
    target_bpm, target                                 (optional)

``target`` is read according to the canonical challenge type. Legacy type
tags are accepted and normalised (``chop-challenge`` → ``chop``,
``flip-this`` → ``creative``, ``reference`` → ``reference-match``, and the
drum tags ``match-beat``, ``add-dynamics``, ... → ``drum-sequencing``).
Drum targets list only the hit positions of each track:

    target:
      focus: [pattern, velocity]
      pattern:
        tempo: 120
        steps: 16
        tracks:
          - {id: kick, hits: [0, 4, 8, 12]}
          - {id: snare, velocity: 0.9, hits: [4, [12, 1.0]]}

A hit is a step index, or ``[index, velocity]`` to override the track
velocity.
Unknown type tags load with no target so the router can answer them with
its fallback result; unknown condition tags load as ``UnknownCondition``.

Malformed records raise ValueError naming the challenge id.
"""

from __future__ import annotations

import importlib.resources
import logging
from collections.abc import Callable, Mapping
from typing import Any

import yaml  # PyYAML

from core.challenge_eval.conditions import PAN_POSITIONS
from core.challenge_eval.types import (
    BusCompression,
    BusEqBoost,
    BusEqCut,
    Challenge,
    ChallengeTarget,
    ChallengeType,
    CompressionContrast,
    CompressorTarget,
    Condition,
    DepthPlacement,
    DrumPattern,
    DrumStep,
    DrumTarget,
    DrumTrack,
    EqBoost,
    EqCut,
    EqTarget,
    FrequencySeparation,
    GoalTarget,
    LayerActive,
    LayerMuted,
    LevelOrder,
    PanOpposite,
    PanPosition,
    PanSpread,
    ProblemTarget,
    ReferenceLayer,
    ReferenceTarget,
    RelativeLevel,
    ReverbAmount,
    ReverbContrast,
    SamplerTarget,
    TrackCompression,
    UnknownCondition,
    VolumeBalanced,
    VolumeRange,
    normalise_type,
)

logger = logging.getLogger(__name__)

_CATALOGUE_PACKAGE = "core.challenge_eval.challenges"
_CATALOGUE_FILES: tuple[str, ...] = (
    "sampling.yaml",
    "production.yaml",
    "mixing.yaml",
    "drums.yaml",
)

_SAMPLER_TYPES = frozenset(
    {
        ChallengeType.RECREATE_KIT,
        ChallengeType.CHOP,
        ChallengeType.TUNE_TO_TRACK,
        ChallengeType.CREATIVE,
        ChallengeType.CLEAN_SAMPLE,
    }
)

_CACHE: dict[str, Challenge] = {}


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


def _pair(value: Any) -> tuple[float, float]:
    """Read a two-element [min, max] list."""
    low, high = value
    return float(low), float(high)


def _opt_float(data: Mapping[str, Any], key: str) -> float | None:
    value = data.get(key)
    return None if value is None else float(value)


def _pan_range(value: Any) -> tuple[float, float]:
    if isinstance(value, str):
        if value not in PAN_POSITIONS:
            raise ValueError(f"unknown pan position {value!r}")
        return PAN_POSITIONS[value]
    return _pair(value)


def _level_order(d: Mapping[str, Any]) -> Condition:
    return LevelOrder(louder=d["louder"], quieter=d["quieter"])


def _relative_level(d: Mapping[str, Any]) -> Condition:
    low, high = _pair(d["difference"])
    return RelativeLevel(layer1=d["layer1"], layer2=d["layer2"], min_db=low, max_db=high)


def _pan_position(d: Mapping[str, Any]) -> Condition:
    low, high = _pan_range(d["position"])
    return PanPosition(layer_id=d["layer"], min_pan=low, max_pan=high)


def _pan_spread(d: Mapping[str, Any]) -> Condition:
    return PanSpread(min_width=float(d["min_width"]), layer_ids=tuple(d.get("layers", ())))


def _pan_opposite(d: Mapping[str, Any]) -> Condition:
    return PanOpposite(
        layer1=d["layer1"], layer2=d["layer2"], min_offset=float(d.get("min_offset", 0.1))
    )


def _volume_range(d: Mapping[str, Any]) -> Condition:
    low, high = _pair(d["range"])
    return VolumeRange(layer_id=d["layer"], min_db=low, max_db=high)


def _volume_balanced(d: Mapping[str, Any]) -> Condition:
    return VolumeBalanced(layer1=d["layer1"], layer2=d["layer2"], tolerance=float(d["tolerance"]))


def _layer_active(d: Mapping[str, Any]) -> Condition:
    return LayerActive(layer_id=d["layer"], active=bool(d.get("active", True)))


def _layer_muted(d: Mapping[str, Any]) -> Condition:
    return LayerMuted(layer_id=d["layer"], muted=bool(d.get("muted", True)))


def _frequency_separation(d: Mapping[str, Any]) -> Condition:
    return FrequencySeparation(
        layer1=d["layer1"],
        layer2=d["layer2"],
        band=d["band"],
        min_difference=float(d.get("min_difference", 3.0)),
    )


def _eq_cut(d: Mapping[str, Any]) -> Condition:
    return EqCut(layer_id=d["layer"], band=d["band"], min_cut=float(d["min_cut"]))


def _eq_boost(d: Mapping[str, Any]) -> Condition:
    return EqBoost(layer_id=d["layer"], band=d["band"], min_boost=float(d["min_boost"]))


def _reverb_amount(d: Mapping[str, Any]) -> Condition:
    return ReverbAmount(
        layer_id=d["layer"],
        min_mix=float(d.get("min_mix", 0.0)),
        max_mix=float(d.get("max_mix", 100.0)),
    )


def _reverb_contrast(d: Mapping[str, Any]) -> Condition:
    return ReverbContrast(
        dry_layer=d["dry"], wet_layer=d["wet"], min_difference=float(d["min_difference"])
    )


def _depth_placement(d: Mapping[str, Any]) -> Condition:
    return DepthPlacement(layer_id=d["layer"], depth=d["depth"])


def _track_compression(d: Mapping[str, Any]) -> Condition:
    return TrackCompression(
        layer_id=d["layer"],
        min_amount=float(d["min_amount"]),
        max_amount=_opt_float(d, "max_amount"),
    )


def _compression_contrast(d: Mapping[str, Any]) -> Condition:
    return CompressionContrast(
        more_compressed=d["more_compressed"],
        less_compressed=d["less_compressed"],
        min_difference=float(d["min_difference"]),
    )


def _bus_compression(d: Mapping[str, Any]) -> Condition:
    return BusCompression(min_amount=float(d["min_amount"]), max_amount=_opt_float(d, "max_amount"))


def _bus_eq_boost(d: Mapping[str, Any]) -> Condition:
    return BusEqBoost(band=d["band"], min_boost=float(d["min_boost"]))


def _bus_eq_cut(d: Mapping[str, Any]) -> Condition:
    return BusEqCut(band=d["band"], min_cut=float(d["min_cut"]))


_CONDITION_BUILDERS: dict[str, Callable[[Mapping[str, Any]], Condition]] = {
    "level_order": _level_order,
    "volume_louder": _level_order,
    "relative_level": _relative_level,
    "pan_position": _pan_position,
    "pan_spread": _pan_spread,
    "pan_opposite": _pan_opposite,
    "volume_range": _volume_range,
    "volume_balanced": _volume_balanced,
    "layer_active": _layer_active,
    "layer_muted": _layer_muted,
    "frequency_separation": _frequency_separation,
    "eq_cut": _eq_cut,
    "eq_boost": _eq_boost,
    "reverb_amount": _reverb_amount,
    "reverb_contrast": _reverb_contrast,
    "depth_placement": _depth_placement,
    "track_compression": _track_compression,
    "compression_contrast": _compression_contrast,
    "bus_compression": _bus_compression,
    "bus_eq_boost": _bus_eq_boost,
    "bus_eq_cut": _bus_eq_cut,
}


def condition_from_dict(data: Mapping[str, Any]) -> Condition:
    """Build one condition from its YAML mapping.

    Unknown tags become ``UnknownCondition`` and fail at evaluation time.
    Known tags with missing or malformed fields raise.
    """
    tag = str(data.get("type", ""))
    builder = _CONDITION_BUILDERS.get(tag)
    if builder is None:
        logger.warning("Unknown condition tag %r, it will never pass", tag)
        return UnknownCondition(tag=tag)
    return builder(data)


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


def _sampler_target(d: Mapping[str, Any]) -> SamplerTarget:
    return SamplerTarget(
        pitch=_opt_float(d, "pitch"),
        time_stretch=_opt_float(d, "time_stretch"),
        start_point=_opt_float(d, "start_point"),
        end_point=_opt_float(d, "end_point"),
        fade_in=_opt_float(d, "fade_in"),
        fade_out=_opt_float(d, "fade_out"),
    )


def _reference_target(d: Mapping[str, Any]) -> ReferenceTarget:
    layers = tuple(
        ReferenceLayer(
            volume=float(layer["volume"]),
            muted=bool(layer.get("muted", False)),
            pan=_opt_float(layer, "pan"),
            eq_low=_opt_float(layer, "eq_low"),
            eq_high=_opt_float(layer, "eq_high"),
            layer_id=layer.get("layer"),
        )
        for layer in d["layers"]
    )
    return ReferenceTarget(layers=layers)


def _goal_target(d: Mapping[str, Any]) -> GoalTarget:
    return GoalTarget(
        description=str(d.get("description", "")),
        conditions=tuple(condition_from_dict(c) for c in d.get("conditions", ())),
    )


def _eq_target(d: Mapping[str, Any]) -> EqTarget:
    return EqTarget(low=float(d["low"]), mid=float(d["mid"]), high=float(d["high"]))


def _compressor_target(d: Mapping[str, Any]) -> CompressorTarget:
    return CompressorTarget(
        threshold=float(d["threshold"]),
        amount=float(d["amount"]),
        attack=_opt_float(d, "attack"),
        release=_opt_float(d, "release"),
    )


def _problem_target(d: Mapping[str, Any]) -> ProblemTarget:
    solution = d.get("solution", {})
    return ProblemTarget(
        description=str(d.get("description", "")),
        eq_ranges=tuple((band, _pair(r)) for band, r in solution.get("eq", {}).items()),
        compressor_ranges=tuple(
            (name, _pair(r)) for name, r in solution.get("compressor", {}).items()
        ),
    )


_DEFAULT_STEPS = 16
_DEFAULT_VELOCITY = 0.8


def _drum_track(d: Mapping[str, Any], steps: int) -> DrumTrack:
    velocity = float(d.get("velocity", _DEFAULT_VELOCITY))
    hits: dict[int, float] = {}
    for hit in d.get("hits", ()):
        if isinstance(hit, int):
            hits[hit] = velocity
        else:
            index, hit_velocity = hit
            hits[int(index)] = float(hit_velocity)
    out_of_range = sorted(i for i in hits if not 0 <= i < steps)
    if out_of_range:
        raise ValueError(f"track {d['id']!r} has hits outside 0..{steps - 1}: {out_of_range}")
    return DrumTrack(
        id=str(d["id"]),
        name=str(d.get("name", d["id"])),
        steps=tuple(
            DrumStep(active=True, velocity=hits[i]) if i in hits else DrumStep()
            for i in range(steps)
        ),
    )


def _drum_target(d: Mapping[str, Any]) -> DrumTarget:
    pattern = d["pattern"]
    steps = int(pattern.get("steps", _DEFAULT_STEPS))
    return DrumTarget(
        pattern=DrumPattern(
            tracks=tuple(_drum_track(t, steps) for t in pattern.get("tracks", ())),
            tempo=float(pattern.get("tempo", 120.0)),
            swing=float(pattern.get("swing", 0.0)),
        ),
        focus=tuple(str(f) for f in d["focus"]),
    )


_TARGET_BUILDERS: dict[ChallengeType, Callable[[Mapping[str, Any]], ChallengeTarget]] = {
    ChallengeType.REFERENCE_MATCH: _reference_target,
    ChallengeType.GOAL: _goal_target,
    ChallengeType.MULTITRACK_GOAL: _goal_target,
    ChallengeType.EQ_MATCH: _eq_target,
    ChallengeType.COMPRESSOR_MATCH: _compressor_target,
    ChallengeType.PROBLEM_FIX: _problem_target,
    ChallengeType.DRUM_SEQUENCING: _drum_target,
}


def _build_target(type_tag: str, data: Mapping[str, Any] | None) -> ChallengeTarget | None:
    try:
        challenge_type = ChallengeType(type_tag)
    except ValueError:
        return None
    if challenge_type in _SAMPLER_TYPES:
        return None if data is None else _sampler_target(data)
    if data is None:
        raise ValueError(f"challenge type {type_tag!r} requires a target")
    return _TARGET_BUILDERS[challenge_type](data)


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


def challenge_from_dict(data: Mapping[str, Any]) -> Challenge:
    """Build a ``Challenge`` from one YAML record.

    Raises:
        ValueError: If a required field is missing or a field is malformed.
    """
    challenge_id = data.get("id", "<missing id>")
    try:
        type_tag = normalise_type(str(data["type"]))
        expected = data.get("expected_slices")
        bpm = data.get("target_bpm")
        return Challenge(
            id=str(data["id"]),
            title=str(data["title"]),
            description=str(data["description"]),
            difficulty=int(data["difficulty"]),
            module=str(data["module"]),
            challenge_type=type_tag,
            target=_build_target(type_tag, data.get("target")),
            hints=tuple(str(h) for h in data.get("hints", ())),
            expected_slices=None if expected is None else int(expected),
            target_key=data.get("target_key"),
            target_bpm=None if bpm is None else float(bpm),
            available_controls=frozenset(data.get("controls", ())),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed challenge {challenge_id!r}: {exc}") from exc


def _load_catalogue() -> dict[str, Challenge]:
    if _CACHE:
        return _CACHE

    pkg = importlib.resources.files(_CATALOGUE_PACKAGE)
    loaded: dict[str, Challenge] = {}
    for filename in _CATALOGUE_FILES:
        text = (pkg / filename).read_text(encoding="utf-8")
        document: dict[str, Any] = yaml.safe_load(text) or {}
        for record in document.get("challenges", ()):
            challenge = challenge_from_dict(record)
            if challenge.id in loaded:
                raise ValueError(f"Duplicate challenge id {challenge.id!r} in {filename}")
            loaded[challenge.id] = challenge
        logger.debug("Loaded challenges from %s (total=%d)", filename, len(loaded))

    _CACHE.update(loaded)
    return _CACHE


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_challenge(challenge_id: str) -> Challenge:
    """Return the bundled challenge with the given id.

    Raises:
        ValueError: If no challenge has that id.
    """
    catalogue = _load_catalogue()
    challenge = catalogue.get(challenge_id)
    if challenge is None:
        raise ValueError(f"Unknown challenge {challenge_id!r}")
    return challenge


def list_challenges(module: str | None = None) -> list[Challenge]:
    """Return bundled challenges in catalogue order, optionally for one module.

    Module ids are case-insensitive.
    """
    challenges = list(_load_catalogue().values())
    if module is None:
        return challenges
    wanted = module.strip().upper()
    return [c for c in challenges if c.module.upper() == wanted]


def available_modules() -> list[str]:
    """Return sorted list of module ids that have at least one challenge."""
    return sorted({c.module for c in _load_catalogue().values()})
