from __future__ import annotations

import random

import pytest

from interview_session import SelectionMap, select_questions
from question_bank import Difficulty, Question, Round


def _round(round_id: str, per_tier: dict) -> Round:
    questions = []
    for difficulty, count in per_tier.items():
        for index in range(count):
            questions.append(
                Question(
                    question_id=f"{round_id}-{difficulty.value}-{index}",
                    round_id=round_id,
                    text=f"{difficulty.value} question {index}",
                    difficulty=difficulty,
                )
            )
    return Round(round_id=round_id, template_id="t1", name=round_id, order=1, questions=questions)


def test_selects_two_distinct_ids_per_tier_from_the_pool():
    round_ = _round("r1", {Difficulty.EASY: 6, Difficulty.MEDIUM: 6, Difficulty.HARD: 6})
    selection = select_questions([round_], per_tier=2, rng=random.Random(3))
    tiers = selection.for_round("r1")
    for difficulty in Difficulty:
        chosen = tiers.for_tier(difficulty)
        pool = {question.question_id for question in round_.pool(difficulty)}
        assert len(chosen) == 2
        assert len(set(chosen)) == 2
        assert set(chosen) <= pool


def test_small_pools_are_taken_whole():
    round_ = _round("r1", {Difficulty.EASY: 1, Difficulty.MEDIUM: 0, Difficulty.HARD: 3})
    tiers = select_questions([round_], per_tier=2).for_round("r1")
    assert tiers.easy == ["r1-EASY-0"]
    assert tiers.medium == []
    assert len(tiers.hard) == 2


def test_ordered_concatenates_easy_medium_hard():
    round_ = _round("r1", {Difficulty.EASY: 2, Difficulty.MEDIUM: 2, Difficulty.HARD: 2})
    tiers = select_questions([round_], per_tier=2, rng=random.Random(11)).for_round("r1")
    ordered = tiers.ordered()
    assert [item.split("-")[1] for item in ordered] == ["EASY", "EASY", "MEDIUM", "MEDIUM", "HARD", "HARD"]


def test_every_round_gets_an_entry():
    rounds = [_round("r1", {Difficulty.EASY: 1}), _round("r2", {})]
    selection = select_questions(rounds)
    assert set(selection.root) == {"r1", "r2"}
    assert selection.for_round("r2").ordered() == []


def test_selection_map_json_round_trip():
    round_ = _round("r1", {Difficulty.EASY: 3, Difficulty.HARD: 3})
    selection = select_questions([round_], rng=random.Random(5))
    assert SelectionMap.from_json(selection.to_json()) == selection


def test_per_tier_must_be_positive():
    with pytest.raises(ValueError):
        select_questions([], per_tier=0)
