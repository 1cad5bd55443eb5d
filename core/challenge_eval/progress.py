"""
core/challenge_eval/progress.py — Per-challenge progress records.

Pure transforms over immutable ``ChallengeProgress`` values. The engine never
stores progress; callers persist whatever these functions return.

Merge strategy ("best wins"):
    best_score, stars, attempts → max of both sides
    completed                   → either side
    The merge is commutative and idempotent, so a local record and a
    remote record can be merged in any order, any number of times.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from core.challenge_eval.types import ScoreResult


@dataclass(frozen=True)
class ChallengeProgress:
    """Best result and attempt count for one challenge."""

    challenge_id: str
    best_score: int = 0
    stars: int = 0
    """0 until the challenge has been passed, then 1–3."""

    attempts: int = 0
    completed: bool = False

    def __post_init__(self) -> None:
        """Validate ranges."""
        if not 0 <= self.best_score <= 100:
            raise ValueError(f"best_score must be in [0, 100], got {self.best_score}")
        if self.stars not in (0, 1, 2, 3):
            raise ValueError(f"stars must be 0-3, got {self.stars}")
        if self.attempts < 0:
            raise ValueError(f"attempts must be non-negative, got {self.attempts}")

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict."""
        return {
            "challenge_id": self.challenge_id,
            "best_score": self.best_score,
            "stars": self.stars,
            "attempts": self.attempts,
            "completed": self.completed,
        }


def record_attempt(
    previous: ChallengeProgress | None, result: ScoreResult, challenge_id: str
) -> ChallengeProgress:
    """Fold one evaluation result into the progress for ``challenge_id``.

    A failed attempt counts as an attempt and can raise ``best_score``, but
    never awards stars.
    """
    base = previous if previous is not None else ChallengeProgress(challenge_id=challenge_id)
    earned_stars = result.stars if result.passed else 0
    return ChallengeProgress(
        challenge_id=challenge_id,
        best_score=max(base.best_score, result.overall),
        stars=max(base.stars, earned_stars),
        attempts=base.attempts + 1,
        completed=base.completed or result.passed,
    )


def _merge_one(
    challenge_id: str, a: ChallengeProgress, b: ChallengeProgress
) -> ChallengeProgress:
    return ChallengeProgress(
        challenge_id=challenge_id,
        best_score=max(a.best_score, b.best_score),
        stars=max(a.stars, b.stars),
        attempts=max(a.attempts, b.attempts),
        completed=a.completed or b.completed,
    )


def merge_progress(
    local: Mapping[str, ChallengeProgress], cloud: Mapping[str, ChallengeProgress]
) -> dict[str, ChallengeProgress]:
    """Merge two progress maps keyed by challenge id, keeping the best of each."""
    merged: dict[str, ChallengeProgress] = {}
    for challenge_id in sorted(set(local) | set(cloud)):
        mine, theirs = local.get(challenge_id), cloud.get(challenge_id)
        if mine is not None and theirs is not None:
            merged[challenge_id] = _merge_one(challenge_id, mine, theirs)
        else:
            merged[challenge_id] = mine if mine is not None else theirs  # type: ignore[assignment]
    return merged
