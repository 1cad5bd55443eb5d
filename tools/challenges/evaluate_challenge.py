"""
evaluate_challenge tool — score a learner's attempt at a bundled challenge.

Pure computation: no network, no persistence.
Given a challenge id and exactly one learner state (sampler, channel, mix
or drums), returns the serialized ScoreResult: overall score, stars, pass/fail,
per-type breakdown and feedback with the headline first.
"""

import logging
from typing import Any

from core.challenge_eval import evaluate_challenge, load_challenge
from core.challenge_eval.router import snapshot_kind
from core.challenge_eval.snapshots import SNAPSHOT_KINDS, snapshot_from_dict
from tools.base import ChallengeTool, ToolParameter, ToolResult

logger = logging.getLogger(__name__)


class EvaluateChallenge(ChallengeTool):
    """
    Evaluate one attempt at a catalogue challenge.

    The state argument must match the challenge family: ``sampler`` for
    sampling challenges, ``channel`` for single-channel EQ/compressor
    challenges, ``mix`` for production and multitrack challenges, ``drums`` for
    drum-sequencing challenges.
    """

    @property
    def name(self) -> str:
        return "evaluate_challenge"

    @property
    def description(self) -> str:
        return (
            "Score a learner's attempt at a sampling, production, mixing or drum challenge. "
            "Pass the challenge_id and exactly one state object: 'sampler' "
            "(pitch, time_stretch, start_point, end_point, slices, fades, sample_url), "
            "'channel' (eq and compressor settings), 'mix' (layers and optional bus) or "
            "'drums' (tracks of steps, tempo and swing). "
            "Returns overall score 0-100, stars 1-3, passed, breakdown and feedback."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="challenge_id",
                type=str,
                description="Catalogue id, e.g. 'sm4-01-slice-breaks'.",
            ),
            ToolParameter(
                name="sampler",
                type=dict,
                description="Sampler state for sampling challenges.",
                required=False,
            ),
            ToolParameter(
                name="channel",
                type=dict,
                description="EQ and compressor state for single-channel mixing challenges.",
                required=False,
            ),
            ToolParameter(
                name="mix",
                type=dict,
                description="Layer states (and optional bus) for multi-layer challenges.",
                required=False,
            ),
            ToolParameter(
                name="drums",
                type=dict,
                description="Step-sequencer pattern for drum-sequencing challenges.",
                required=False,
            ),
        ]

    def execute(self, **kwargs: Any) -> ToolResult:
        challenge_id: str = kwargs["challenge_id"].strip()
        states = {kind: kwargs[kind] for kind in SNAPSHOT_KINDS if kwargs.get(kind) is not None}
        if len(states) != 1:
            return ToolResult(
                success=False,
                error=f"Provide exactly one of: {', '.join(SNAPSHOT_KINDS)}. Got: {sorted(states)}",
            )
        kind, data = next(iter(states.items()))

        try:
            challenge = load_challenge(challenge_id)
            snapshot = snapshot_from_dict(kind, data)
        except ValueError as e:
            return ToolResult(success=False, error=str(e))

        expected = snapshot_kind(challenge.challenge_type)
        if expected is not None and not isinstance(snapshot, expected):
            logger.info(
                "Challenge %s expects %s state, got %s", challenge_id, expected.__name__, kind
            )

        result = evaluate_challenge(challenge, snapshot)
        return ToolResult(
            success=True,
            data=result.as_dict(),
            metadata={"challenge_id": challenge.id, "challenge_type": challenge.challenge_type},
        )
