"""
get_challenge_hints tool — reveal a challenge's hints progressively.

Pure computation: reads the bundled catalogue only.
"""

from typing import Any

from core.challenge_eval import hints_for, load_challenge
from tools.base import ChallengeTool, ToolParameter, ToolResult


class GetChallengeHints(ChallengeTool):
    """Return the first N hints of a challenge, plus how many exist."""

    @property
    def name(self) -> str:
        return "get_challenge_hints"

    @property
    def description(self) -> str:
        return (
            "Reveal hints for a sampling, production, mixing or drum challenge one at a time. "
            "Pass the challenge_id and how many hints to reveal (default 1). "
            "Returns the revealed hints in order and the total number available."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="challenge_id",
                type=str,
                description="Catalogue id, e.g. 'p3-01-build-the-drop'.",
            ),
            ToolParameter(
                name="revealed",
                type=int,
                description="Number of hints to reveal. Clamped to the available count.",
                required=False,
                default=1,
            ),
        ]

    def execute(self, **kwargs: Any) -> ToolResult:
        challenge_id: str = kwargs["challenge_id"].strip()
        revealed: int = kwargs.get("revealed")
        if revealed is None:
            revealed = 1

        try:
            challenge = load_challenge(challenge_id)
        except ValueError as e:
            return ToolResult(success=False, error=str(e))

        hints = hints_for(challenge, revealed)
        return ToolResult(
            success=True,
            data={
                "challenge_id": challenge.id,
                "hints": list(hints),
                "revealed": len(hints),
                "total": len(challenge.hints),
            },
        )
