"""
core/challenge_eval/conditions.py — Goal condition evaluation.

Every condition variant in ``types.Condition`` has exactly one check
function registered in ``_CHECKS``. A condition whose class has no check
(``UnknownCondition`` included) fails closed instead of raising.

Loudness rule:
    All loudness comparisons go through ``effective_loudness``: a muted
    layer is -inf, whatever its fader says.

Ranges are inclusive everywhere. A condition that names a layer missing
from the snapshot fails.

Pure module — no I/O, no logging.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from core.challenge_eval.tolerance import round_score
from core.challenge_eval.types import (
    BusCompression,
    BusEqBoost,
    BusEqCut,
    BusState,
    CompressionContrast,
    Condition,
    ConditionResult,
    DepthPlacement,
    EqBoost,
    EqCut,
    FrequencySeparation,
    LayerActive,
    LayerMuted,
    LayerState,
    LevelOrder,
    PanOpposite,
    PanPosition,
    PanSpread,
    RelativeLevel,
    ReverbAmount,
    ReverbContrast,
    TrackCompression,
    UnknownCondition,
    VolumeBalanced,
    VolumeRange,
)

# ---------------------------------------------------------------------------
# Named positions
# ---------------------------------------------------------------------------

PAN_POSITIONS: dict[str, tuple[float, float]] = {
    "center": (-0.15, 0.15),
    "left": (-1.0, -0.25),
    "right": (0.25, 1.0),
}
"""Inclusive pan ranges for named stereo positions."""

DEPTH_RANGES: dict[str, tuple[float, float]] = {
    "front": (0.0, 25.0),
    "middle": (20.0, 45.0),
    "back": (40.0, 100.0),
}
"""Inclusive reverb-mix ranges (percent) for named depths."""

EQ_BANDS: tuple[str, ...] = ("low", "mid", "high")

_Outcome = tuple[bool, float | None]
_Layers = Mapping[str, LayerState]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def effective_loudness(layer: LayerState) -> float:
    """Loudness used for every comparison: -inf when muted, else the fader dB."""
    return -math.inf if layer.muted else layer.volume


def _band_gain(state: LayerState | BusState, band: str) -> float | None:
    if band not in EQ_BANDS:
        return None
    return float(getattr(state, f"eq_{band}"))


def _in_range(value: float, low: float, high: float | None) -> bool:
    return value >= low and (high is None or value <= high)


def _compression(layer: LayerState) -> float:
    return layer.compressor_amount if layer.compressor_amount is not None else 0.0


# ---------------------------------------------------------------------------
# Checks, one per variant
# ---------------------------------------------------------------------------


def _check_level_order(c: LevelOrder, layers: _Layers, bus: BusState | None) -> _Outcome:
    louder, quieter = layers.get(c.louder), layers.get(c.quieter)
    if louder is None or quieter is None:
        return False, None
    diff = effective_loudness(louder) - effective_loudness(quieter)
    return effective_loudness(louder) > effective_loudness(quieter), diff


def _check_relative_level(c: RelativeLevel, layers: _Layers, bus: BusState | None) -> _Outcome:
    first, second = layers.get(c.layer1), layers.get(c.layer2)
    if first is None or second is None:
        return False, None
    # Two muted layers give inf - inf = nan, which fails both comparisons.
    diff = effective_loudness(first) - effective_loudness(second)
    return c.min_db <= diff <= c.max_db, diff


def _check_pan_position(c: PanPosition, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    if layer is None:
        return False, None
    return c.min_pan <= layer.pan <= c.max_pan, layer.pan


def _check_pan_spread(c: PanSpread, layers: _Layers, bus: BusState | None) -> _Outcome:
    if c.layer_ids:
        candidates = [layers[lid] for lid in c.layer_ids if lid in layers]
    else:
        candidates = list(layers.values())
    pans = [layer.pan for layer in candidates if not layer.muted]
    width = max(pans) - min(pans) if len(pans) >= 2 else 0.0
    return width >= c.min_width, width


def _check_pan_opposite(c: PanOpposite, layers: _Layers, bus: BusState | None) -> _Outcome:
    first, second = layers.get(c.layer1), layers.get(c.layer2)
    if first is None or second is None:
        return False, None
    opposite = first.pan * second.pan < 0
    wide_enough = abs(first.pan) >= c.min_offset and abs(second.pan) >= c.min_offset
    return opposite and wide_enough, abs(first.pan - second.pan)


def _check_volume_range(c: VolumeRange, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    if layer is None:
        return False, None
    level = effective_loudness(layer)
    return c.min_db <= level <= c.max_db, level


def _check_volume_balanced(c: VolumeBalanced, layers: _Layers, bus: BusState | None) -> _Outcome:
    first, second = layers.get(c.layer1), layers.get(c.layer2)
    if first is None or second is None or first.muted or second.muted:
        return False, None
    diff = abs(first.volume - second.volume)
    return diff <= c.tolerance, diff


def _check_layer_active(c: LayerActive, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    if layer is None:
        return False, None
    return (not layer.muted) == c.active, None


def _check_layer_muted(c: LayerMuted, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    if layer is None:
        return False, None
    return layer.muted == c.muted, None


def _check_frequency_separation(
    c: FrequencySeparation, layers: _Layers, bus: BusState | None
) -> _Outcome:
    first, second = layers.get(c.layer1), layers.get(c.layer2)
    if first is None or second is None:
        return False, None
    gain1, gain2 = _band_gain(first, c.band), _band_gain(second, c.band)
    if gain1 is None or gain2 is None:
        return False, None
    diff = abs(gain1 - gain2)
    return diff >= c.min_difference, diff


def _check_eq_cut(c: EqCut, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    gain = _band_gain(layer, c.band) if layer is not None else None
    if gain is None:
        return False, None
    return gain <= -c.min_cut, gain


def _check_eq_boost(c: EqBoost, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    gain = _band_gain(layer, c.band) if layer is not None else None
    if gain is None:
        return False, None
    return gain >= c.min_boost, gain


def _check_reverb_amount(c: ReverbAmount, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    if layer is None:
        return False, None
    return c.min_mix <= layer.reverb_mix <= c.max_mix, layer.reverb_mix


def _check_reverb_contrast(c: ReverbContrast, layers: _Layers, bus: BusState | None) -> _Outcome:
    dry, wet = layers.get(c.dry_layer), layers.get(c.wet_layer)
    if dry is None or wet is None:
        return False, None
    diff = wet.reverb_mix - dry.reverb_mix
    return diff >= c.min_difference, diff


def _check_depth_placement(c: DepthPlacement, layers: _Layers, bus: BusState | None) -> _Outcome:
    layer = layers.get(c.layer_id)
    depth_range = DEPTH_RANGES.get(c.depth)
    if layer is None or depth_range is None:
        return False, None
    low, high = depth_range
    return low <= layer.reverb_mix <= high, layer.reverb_mix


def _check_track_compression(
    c: TrackCompression, layers: _Layers, bus: BusState | None
) -> _Outcome:
    layer = layers.get(c.layer_id)
    if layer is None:
        return False, None
    amount = _compression(layer)
    return _in_range(amount, c.min_amount, c.max_amount), amount


def _check_compression_contrast(
    c: CompressionContrast, layers: _Layers, bus: BusState | None
) -> _Outcome:
    more, less = layers.get(c.more_compressed), layers.get(c.less_compressed)
    if more is None or less is None:
        return False, None
    diff = _compression(more) - _compression(less)
    return diff >= c.min_difference, diff


def _check_bus_compression(c: BusCompression, layers: _Layers, bus: BusState | None) -> _Outcome:
    if bus is None:
        return False, None
    return _in_range(bus.compressor_amount, c.min_amount, c.max_amount), bus.compressor_amount


def _check_bus_eq_boost(c: BusEqBoost, layers: _Layers, bus: BusState | None) -> _Outcome:
    gain = _band_gain(bus, c.band) if bus is not None else None
    if gain is None:
        return False, None
    return gain >= c.min_boost, gain


def _check_bus_eq_cut(c: BusEqCut, layers: _Layers, bus: BusState | None) -> _Outcome:
    gain = _band_gain(bus, c.band) if bus is not None else None
    if gain is None:
        return False, None
    return gain <= -c.min_cut, gain


_CHECKS: dict[type, Callable[[Any, _Layers, BusState | None], _Outcome]] = {
    LevelOrder: _check_level_order,
    RelativeLevel: _check_relative_level,
    PanPosition: _check_pan_position,
    PanSpread: _check_pan_spread,
    PanOpposite: _check_pan_opposite,
    VolumeRange: _check_volume_range,
    VolumeBalanced: _check_volume_balanced,
    LayerActive: _check_layer_active,
    LayerMuted: _check_layer_muted,
    FrequencySeparation: _check_frequency_separation,
    EqCut: _check_eq_cut,
    EqBoost: _check_eq_boost,
    ReverbAmount: _check_reverb_amount,
    ReverbContrast: _check_reverb_contrast,
    DepthPlacement: _check_depth_placement,
    TrackCompression: _check_track_compression,
    CompressionContrast: _check_compression_contrast,
    BusCompression: _check_bus_compression,
    BusEqBoost: _check_bus_eq_boost,
    BusEqCut: _check_bus_eq_cut,
}


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------


def _fmt(value: float) -> str:
    """Render 3.0 as "3" and 2.5 as "2.5"."""
    return f"{value:g}"


def describe_condition(condition: Condition) -> str:
    """Human-readable statement of what the condition asks for."""
    if isinstance(condition, LevelOrder):
        return f"{condition.louder} louder than {condition.quieter}"
    if isinstance(condition, RelativeLevel):
        return f"{condition.layer1} level relative to {condition.layer2}"
    if isinstance(condition, PanPosition):
        return f"{condition.layer_id} panned correctly"
    if isinstance(condition, PanSpread):
        return f"Stereo width at least {_fmt(condition.min_width)}"
    if isinstance(condition, PanOpposite):
        return f"{condition.layer1} and {condition.layer2} panned to opposite sides"
    if isinstance(condition, VolumeRange):
        return (
            f"{condition.layer_id} volume between {_fmt(condition.min_db)} "
            f"and {_fmt(condition.max_db)} dB"
        )
    if isinstance(condition, VolumeBalanced):
        return (
            f"{condition.layer1} and {condition.layer2} balanced "
            f"within {_fmt(condition.tolerance)} dB"
        )
    if isinstance(condition, LayerActive):
        verb = "is playing" if condition.active else "is not playing"
        return f"{condition.layer_id} {verb}"
    if isinstance(condition, LayerMuted):
        verb = "is muted" if condition.muted else "is unmuted"
        return f"{condition.layer_id} {verb}"
    if isinstance(condition, FrequencySeparation):
        return f"{condition.layer1} and {condition.layer2} separated in the {condition.band} band"
    if isinstance(condition, EqCut):
        return f"{condition.layer_id} {condition.band} cut by at least {_fmt(condition.min_cut)} dB"
    if isinstance(condition, EqBoost):
        return (
            f"{condition.layer_id} {condition.band} boosted by at least "
            f"{_fmt(condition.min_boost)} dB"
        )
    if isinstance(condition, ReverbAmount):
        return (
            f"{condition.layer_id} reverb between {_fmt(condition.min_mix)}% "
            f"and {_fmt(condition.max_mix)}%"
        )
    if isinstance(condition, ReverbContrast):
        return (
            f"{condition.wet_layer} wetter than {condition.dry_layer} "
            f"by at least {_fmt(condition.min_difference)}%"
        )
    if isinstance(condition, DepthPlacement):
        return f"{condition.layer_id} placed at the {condition.depth}"
    if isinstance(condition, TrackCompression):
        return f"{condition.layer_id} compressed at least {_fmt(condition.min_amount)}%"
    if isinstance(condition, CompressionContrast):
        return f"{condition.more_compressed} more compressed than {condition.less_compressed}"
    if isinstance(condition, BusCompression):
        return f"Bus compression at least {_fmt(condition.min_amount)}%"
    if isinstance(condition, BusEqBoost):
        return f"Bus {condition.band} boosted by at least {_fmt(condition.min_boost)} dB"
    if isinstance(condition, BusEqCut):
        return f"Bus {condition.band} cut by at least {_fmt(condition.min_cut)} dB"
    if isinstance(condition, UnknownCondition):
        return f"Unknown condition: {condition.tag}"
    return "Unknown condition"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _index_layers(layers: Sequence[LayerState] | _Layers) -> _Layers:
    if isinstance(layers, Mapping):
        return layers
    return {layer.id: layer for layer in layers}


def evaluate_condition(
    condition: Condition,
    layers: Sequence[LayerState] | Mapping[str, LayerState],
    bus: BusState | None = None,
) -> ConditionResult:
    """Check one condition against the current layer and bus state.

    Args:
        condition: Any ``Condition`` variant.
        layers:    Layer states, as a sequence or already keyed by id.
        bus:       Master bus state; bus conditions fail when it is None.

    Returns:
        ConditionResult with the description, verdict, and measured value.
        Never raises: unmapped variants fail closed.
    """
    check = _CHECKS.get(type(condition))
    if check is None:
        return ConditionResult(describe_condition(condition), False, None)
    passed, value = check(condition, _index_layers(layers), bus)
    return ConditionResult(describe_condition(condition), passed, value)


def evaluate_conditions(
    conditions: Sequence[Condition],
    layers: Sequence[LayerState] | Mapping[str, LayerState],
    bus: BusState | None = None,
) -> tuple[ConditionResult, ...]:
    """Evaluate every condition independently, preserving order."""
    indexed = _index_layers(layers)
    return tuple(evaluate_condition(condition, indexed, bus) for condition in conditions)


def goal_score(results: Sequence[ConditionResult]) -> int:
    """Percentage of passed conditions, rounded. An empty goal scores 0."""
    if not results:
        return 0
    passed = sum(1 for r in results if r.passed)
    return round_score(100.0 * passed / len(results))
