"""
Tests for core/challenge_eval/production.py — reference-match and goal evaluators.
"""

from core.challenge_eval.grading import TARGET_MISMATCH_MESSAGE
from core.challenge_eval.production import evaluate_goal, evaluate_reference_match
from core.challenge_eval.types import (
    Challenge,
    ChallengeType,
    GoalTarget,
    LayerActive,
    LayerState,
    LevelOrder,
    MixSnapshot,
    ReferenceLayer,
    ReferenceTarget,
)


def _reference(
    *layers: ReferenceLayer, controls: tuple[str, ...] = ("volume", "mute")
) -> Challenge:
    return Challenge(
        id="p-test",
        title="Reference test",
        description="test",
        difficulty=1,
        module="P1",
        challenge_type=ChallengeType.REFERENCE_MATCH.value,
        target=ReferenceTarget(layers=layers),
        available_controls=frozenset(controls),
    )


def _goal(*conditions) -> Challenge:
    return Challenge(
        id="p-goal",
        title="Goal test",
        description="test",
        difficulty=2,
        module="P3",
        challenge_type=ChallengeType.GOAL.value,
        target=GoalTarget(description="test goal", conditions=tuple(conditions)),
    )


def _mix(*layers: LayerState) -> MixSnapshot:
    return MixSnapshot(layers=layers)


# ---------------------------------------------------------------------------
# Reference match
# ---------------------------------------------------------------------------


class TestReferenceMatch:
    def test_exact_match(self):
        challenge = _reference(ReferenceLayer(volume=-6.0, muted=False))
        result = evaluate_reference_match(challenge, _mix(LayerState(id="kick", volume=-6.0)))
        assert result.overall == 100
        assert result.stars == 3
        assert result.passed

    def test_mute_mismatch_penalty(self):
        challenge = _reference(ReferenceLayer(volume=-6.0, muted=False))
        result = evaluate_reference_match(
            challenge, _mix(LayerState(id="kick", volume=-6.0, muted=True))
        )
        assert result.overall < 80
        assert "kick needs adjustment" in result.feedback

    def test_far_off_volume_fails(self):
        challenge = _reference(ReferenceLayer(volume=-6.0, muted=False))
        result = evaluate_reference_match(challenge, _mix(LayerState(id="kick", volume=6.0)))
        assert result.overall < 60
        assert not result.passed

    def test_mean_across_layers(self):
        challenge = _reference(ReferenceLayer(volume=-3.0), ReferenceLayer(volume=-9.0))
        result = evaluate_reference_match(
            challenge,
            _mix(LayerState(id="kick", volume=-3.0), LayerState(id="pad", volume=-9.0, muted=True)),
        )
        # kick: (100 + 100) / 2, pad: (100 + 0) / 2
        assert result.overall == 75
        scores = {ls.id: ls.score for ls in result.breakdown.layer_scores}
        assert scores == {"kick": 100.0, "pad": 50.0}

    def test_layers_paired_by_id(self):
        challenge = _reference(
            ReferenceLayer(volume=-6.0, layer_id="sub"),
            ReferenceLayer(volume=-12.0, muted=True, layer_id="mid-bass"),
        )
        result = evaluate_reference_match(
            challenge,
            _mix(
                LayerState(id="mid-bass", volume=-12.0, muted=True),
                LayerState(id="sub", volume=-6.0),
            ),
        )
        assert result.overall == 100

    def test_pan_ignored_without_pan_control(self):
        challenge = _reference(ReferenceLayer(volume=-6.0, pan=-0.6))
        result = evaluate_reference_match(challenge, _mix(LayerState(id="pad", volume=-6.0)))
        assert result.overall == 100

    def test_pan_and_eq_scored_when_controls_enabled(self):
        challenge = _reference(
            ReferenceLayer(volume=-6.0, pan=-0.6, eq_low=0.0, eq_high=2.0),
            controls=("volume", "mute", "pan", "eq"),
        )
        result = evaluate_reference_match(challenge, _mix(LayerState(id="pad", volume=-6.0)))
        assert result.overall < 100

    def test_layer_names_used_in_feedback(self):
        challenge = _reference(ReferenceLayer(volume=-6.0))
        result = evaluate_reference_match(
            challenge, _mix(LayerState(id="l1", name="Kick", volume=-10.0))
        )
        # volume 4 dB off (~51) averaged with a matching mute state (100)
        assert "Kick is close, fine-tune it" in result.feedback

    def test_nothing_to_compare_scores_zero(self):
        challenge = _reference(ReferenceLayer(volume=-6.0, layer_id="sub"))
        result = evaluate_reference_match(challenge, _mix(LayerState(id="keys")))
        assert result.overall == 0
        assert result.breakdown.layer_scores == ()


# ---------------------------------------------------------------------------
# Goal
# ---------------------------------------------------------------------------


class TestGoal:
    def test_all_conditions_met(self):
        challenge = _goal(LevelOrder("kick", "hihat"), LayerActive("snare", True))
        result = evaluate_goal(
            challenge,
            _mix(
                LayerState(id="kick", volume=-3.0),
                LayerState(id="hihat", volume=-12.0),
                LayerState(id="snare", volume=-6.0),
            ),
        )
        assert result.overall == 100
        assert result.passed
        assert result.feedback == ("All goals met!",)

    def test_half_the_conditions_met(self):
        challenge = _goal(LevelOrder("kick", "hihat"), LayerActive("snare", True))
        result = evaluate_goal(
            challenge,
            _mix(
                LayerState(id="kick", volume=-3.0),
                LayerState(id="hihat", volume=-12.0),
                LayerState(id="snare", volume=-6.0, muted=True),
            ),
        )
        assert result.overall == 50
        assert not result.passed
        assert result.feedback[1:] == ("Not met: snare is playing",)

    def test_condition_results_in_breakdown(self):
        challenge = _goal(LevelOrder("kick", "hihat"))
        result = evaluate_goal(challenge, _mix(LayerState(id="kick")))
        assert result.breakdown.type == "goal"
        (cr,) = result.breakdown.condition_results
        assert cr.description == "kick louder than hihat"
        assert not cr.passed

    def test_multitrack_type_tag(self):
        challenge = _goal(LayerActive("snare", True))
        result = evaluate_goal(
            challenge, _mix(LayerState(id="snare")), challenge_type=ChallengeType.MULTITRACK_GOAL
        )
        assert result.breakdown.type == "multitrack-goal"

    def test_no_conditions_scores_zero(self):
        result = evaluate_goal(_goal(), _mix(LayerState(id="kick")))
        assert result.overall == 0


# ---------------------------------------------------------------------------
# Target of the wrong kind
# ---------------------------------------------------------------------------


class TestTargetMismatch:
    def test_reference_match_with_goal_target(self):
        challenge = _goal(LayerActive("snare", True))
        result = evaluate_reference_match(challenge, _mix(LayerState(id="snare")))
        assert result.overall == 0
        assert not result.passed
        assert result.breakdown.type == "reference-match"
        assert result.feedback == (TARGET_MISMATCH_MESSAGE,)

    def test_goal_with_reference_target(self):
        challenge = _reference(ReferenceLayer(volume=-6.0))
        result = evaluate_goal(
            challenge, _mix(LayerState(id="kick")), challenge_type=ChallengeType.MULTITRACK_GOAL
        )
        assert result.overall == 0
        assert result.breakdown.type == "multitrack-goal"
        assert result.feedback == (TARGET_MISMATCH_MESSAGE,)
