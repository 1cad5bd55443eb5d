"""
Tests for core/challenge_eval/_challenge_loader.py — bundled YAML catalogue.

Covers:
  - the catalogue loads, ids are unique, every record maps to a known type
  - legacy type aliases
  - target parsing per family, drum hit lists included
  - unknown condition tags and malformed records
  - hints_for clamping
"""

import logging

import pytest

from core.challenge_eval import (
    available_modules,
    challenge_from_dict,
    hints_for,
    list_challenges,
    load_challenge,
)
from core.challenge_eval._challenge_loader import condition_from_dict, normalise_type
from core.challenge_eval.types import (
    ChallengeType,
    CompressorTarget,
    DrumStep,
    DrumTarget,
    GoalTarget,
    LevelOrder,
    PanOpposite,
    PanPosition,
    ProblemTarget,
    ReferenceTarget,
    RelativeLevel,
    SamplerTarget,
    UnknownCondition,
)


def _record(**overrides) -> dict:
    record = {
        "id": "x-01",
        "title": "X",
        "description": "test",
        "difficulty": 1,
        "module": "X1",
        "type": "chop-challenge",
    }
    record.update(overrides)
    return record


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


class TestCatalogue:
    def test_loads_all_families(self):
        types = {c.challenge_type for c in list_challenges()}
        assert types == {t.value for t in ChallengeType}

    def test_ids_are_unique(self):
        ids = [c.id for c in list_challenges()]
        assert len(ids) == len(set(ids))

    def test_every_challenge_has_hints(self):
        assert all(c.hints for c in list_challenges())

    def test_module_filter_is_case_insensitive(self):
        chops = list_challenges("sm4")
        assert [c.id for c in chops] == [
            "sm4-01-slice-breaks",
            "sm4-02-chop-vocals",
            "sm4-03-manual-slices",
        ]

    def test_available_modules(self):
        modules = available_modules()
        assert modules == sorted(modules)
        assert {"SM4", "P3", "F1", "A4"} <= set(modules)

    def test_unknown_id(self):
        with pytest.raises(ValueError, match="Unknown challenge"):
            load_challenge("does-not-exist")

    def test_aliases_are_normalised(self):
        assert load_challenge("sm4-01-slice-breaks").challenge_type == "chop"
        assert load_challenge("sm5-04-creative-flip").challenge_type == "creative"
        assert load_challenge("p1-01-find-the-space").challenge_type == "reference-match"
        assert load_challenge("ds4-01-accents").challenge_type == "drum-sequencing"
        assert normalise_type("genre-challenge") == "drum-sequencing"
        assert normalise_type("eq-match") == "eq-match"


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


class TestTargets:
    def test_sampler_target(self):
        challenge = load_challenge("sm3-04-tempo-match")
        assert challenge.target == SamplerTarget(pitch=1.0, time_stretch=0.9)

    def test_sampler_target_is_optional(self):
        assert load_challenge("sm4-03-manual-slices").target is None

    def test_reference_target_by_layer_id(self):
        target = load_challenge("p1-02-bass-vs-keys").target
        assert isinstance(target, ReferenceTarget)
        assert [ref.layer_id for ref in target.layers] == ["sub", "mid-bass", "keys"]
        assert target.layers[1].muted

    def test_goal_target(self):
        target = load_challenge("p3-01-build-the-drop").target
        assert isinstance(target, GoalTarget)
        assert target.conditions[0] == LevelOrder(louder="kick", quieter="pad")
        assert target.conditions[3] == PanPosition("kick", -0.2, 0.2)

    def test_relative_level_difference(self):
        target = load_challenge("p4-02-pocket-balance").target
        assert target.conditions[0] == RelativeLevel("kick", "snare", 2.0, 6.0)

    def test_multitrack_target(self):
        target = load_challenge("i4-02-wide-guitars").target
        assert target.conditions[0] == PanOpposite("guitar_l", "guitar_r", 0.5)

    def test_compressor_target(self):
        target = load_challenge("f5-02-punchy-transients").target
        assert isinstance(target, CompressorTarget)
        assert target.attack is not None and target.release is not None

    def test_problem_target(self):
        target = load_challenge("f6-01-muddy-bass").target
        assert isinstance(target, ProblemTarget)
        assert target.eq_ranges == (("low", (-6.0, -2.0)),)
        assert target.compressor_ranges == ()

    def test_drum_target(self):
        target = load_challenge("ds1-02-backbeat").target
        assert isinstance(target, DrumTarget)
        assert target.focus == ("pattern",)
        assert target.pattern.tempo == 120.0
        kick, snare = target.pattern.tracks
        assert (kick.id, kick.name) == ("kick", "Kick")
        assert len(snare.steps) == 16
        assert [i for i, step in enumerate(snare.steps) if step.active] == [4, 12]

    def test_drum_hit_velocity_override(self):
        kick = load_challenge("ds4-01-accents").target.pattern.tracks[0]
        assert kick.steps[0] == DrumStep(active=True, velocity=1.0)
        assert kick.steps[4] == DrumStep(active=True, velocity=0.8)
        assert kick.steps[1] == DrumStep()


# ---------------------------------------------------------------------------
# Parsing edge cases
# ---------------------------------------------------------------------------


class TestParsing:
    def test_named_pan_position(self):
        data = {"type": "pan_position", "layer": "pad", "position": "left"}
        condition = condition_from_dict(data)
        assert condition == PanPosition("pad", -1.0, -0.25)

    def test_volume_louder_alias(self):
        condition = condition_from_dict({"type": "volume_louder", "louder": "a", "quieter": "b"})
        assert condition == LevelOrder("a", "b")

    def test_unknown_condition_tag(self, caplog):
        with caplog.at_level(logging.WARNING):
            condition = condition_from_dict({"type": "sidechain", "layer": "bass"})
        assert condition == UnknownCondition(tag="sidechain")
        assert "sidechain" in caplog.text

    def test_unknown_challenge_type_loads_without_target(self):
        challenge = challenge_from_dict(_record(type="synth-patch", target={"cutoff": 800}))
        assert challenge.challenge_type == "synth-patch"
        assert challenge.target is None

    def test_missing_required_field(self):
        record = _record()
        del record["title"]
        with pytest.raises(ValueError, match="Malformed challenge 'x-01'"):
            challenge_from_dict(record)

    def test_bad_difficulty(self):
        with pytest.raises(ValueError, match="difficulty"):
            challenge_from_dict(_record(difficulty=5))

    def test_goal_without_target(self):
        with pytest.raises(ValueError, match="requires a target"):
            challenge_from_dict(_record(type="goal"))

    def test_drum_hit_out_of_range(self):
        pattern = {"steps": 8, "tracks": [{"id": "kick", "hits": [0, 8]}]}
        target = {"focus": ["pattern"], "pattern": pattern}
        with pytest.raises(ValueError, match=r"hits outside 0..7: \[8\]"):
            challenge_from_dict(_record(type="match-beat", target=target))

    def test_drum_unknown_focus(self):
        target = {"focus": ["groove"], "pattern": {"tracks": []}}
        with pytest.raises(ValueError, match="unknown drum focus"):
            challenge_from_dict(_record(type="fix-groove", target=target))

    def test_optional_fields(self):
        challenge = challenge_from_dict(
            _record(expected_slices=8, target_bpm=92, controls=["volume"], hints=["a", "b"])
        )
        assert challenge.expected_slices == 8
        assert challenge.target_bpm == 92.0
        assert challenge.available_controls == frozenset({"volume"})
        assert challenge.hints == ("a", "b")


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------


class TestHints:
    def test_progressive_reveal(self):
        challenge = challenge_from_dict(_record(hints=["one", "two", "three"]))
        assert hints_for(challenge, 0) == ()
        assert hints_for(challenge, 2) == ("one", "two")

    def test_clamped(self):
        challenge = challenge_from_dict(_record(hints=["one", "two"]))
        assert hints_for(challenge, 10) == ("one", "two")
        assert hints_for(challenge, -3) == ()
