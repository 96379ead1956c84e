"""Random question selection performed once at session start."""
from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

from question_bank.models import Difficulty, Round

from .models import SelectionMap, TierSelection


def sample_tier(round_: Round, difficulty: Difficulty, count: int, rng: random.Random) -> list[str]:
    """Sample up to ``count`` distinct ids of one tier; the whole pool when smaller."""

    pool = [question.question_id for question in round_.pool(difficulty)]
    if len(pool) <= count:
        return rng.sample(pool, len(pool))
    return rng.sample(pool, count)


def select_questions(
    rounds: Sequence[Round],
    *,
    per_tier: int = 2,
    rng: Optional[random.Random] = None,
) -> SelectionMap:
    """Build the frozen per-round, per-tier selection map for a new session."""

    if per_tier < 1:
        raise ValueError("per_tier must be at least 1")
    chooser = rng or random.SystemRandom()
    selected: Dict[str, TierSelection] = {}
    for round_ in rounds:
        selected[round_.round_id] = TierSelection(
            easy=sample_tier(round_, Difficulty.EASY, per_tier, chooser),
            medium=sample_tier(round_, Difficulty.MEDIUM, per_tier, chooser),
            hard=sample_tier(round_, Difficulty.HARD, per_tier, chooser),
        )
    return SelectionMap(selected)


__all__ = ["sample_tier", "select_questions"]
