"""
core/challenge_eval/hints.py — Progressive hint reveal.
"""

from __future__ import annotations

from core.challenge_eval.types import Challenge


def hints_for(challenge: Challenge, revealed: int) -> tuple[str, ...]:
    """Return the first ``revealed`` hints, clamped to what the challenge has.

    Negative counts reveal nothing.
    """
    count = max(0, min(revealed, len(challenge.hints)))
    return challenge.hints[:count]
