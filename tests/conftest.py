import os
import random
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from errors import EvaluationFailed, QuestionGenerationFailed, ReportGenerationFailed
from evaluation import AnswerEvaluation, FinalReport
from interview_session import SessionEngine
from question_bank import RoundDraft, TemplateDraft
from storage.migrate import migrate
from storage.sessions import SessionStore
from storage.templates import TemplateStore


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


class FakeGenerator:
    """Returns numbered questions; tiers listed in ``failing`` raise."""

    def __init__(self) -> None:
        self.failing = set()
        self.calls = []

    def generate(self, *, job_role, skills, round_name, difficulty, count, job_description=None):
        self.calls.append((round_name, difficulty.value, count))
        if (round_name, difficulty.value) in self.failing:
            raise QuestionGenerationFailed(f"provider down for {round_name}/{difficulty.value}")
        return [f"{round_name} {difficulty.value.lower()} question {index + 1}" for index in range(count)]


class FakeEvaluator:
    def __init__(self) -> None:
        self.fail = False
        self.score = 7.0
        self.follow_up = None
        self.contexts = []

    def evaluate(self, question, answer, context):
        self.contexts.append(context)
        if self.fail:
            raise EvaluationFailed("evaluator unavailable")
        return AnswerEvaluation(
            score=self.score,
            feedback=f"Feedback for: {answer}",
            strengths=["clear"],
            weaknesses=["brief"],
            follow_up_question=self.follow_up,
        )


class FakeReporter:
    def __init__(self) -> None:
        self.fail = False
        self.calls = 0
        self.seen = []

    def generate(self, context, answers):
        self.calls += 1
        self.seen = list(answers)
        if self.fail:
            raise ReportGenerationFailed("report provider unavailable")
        average = sum(item.score for item in answers) / len(answers) if answers else 0.0
        return FinalReport(
            overall_score=average,
            summary=f"{len(answers)} answers reviewed",
            detailed_feedback="Solid fundamentals.",
            recommendations=["Practice system design"],
        )


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def fake_evaluator():
    return FakeEvaluator()


@pytest.fixture
def fake_reporter():
    return FakeReporter()


@pytest.fixture
def engine(tmp_db, fake_generator, fake_evaluator, fake_reporter):
    return SessionEngine(
        templates=TemplateStore(),
        sessions=SessionStore(),
        generator=fake_generator,
        evaluator=fake_evaluator,
        reporter=fake_reporter,
        questions_per_tier=1,
        selected_per_tier=2,
        rng=random.Random(7),
    )


@pytest.fixture
def backend_draft():
    return TemplateDraft(
        title="Backend Engineer Interview",
        job_role="Backend Engineer",
        skills=["Python", "SQL"],
        job_description="Build and operate APIs.",
        rounds=[
            RoundDraft(name="Technical", order=2),
            RoundDraft(name="Intro", order=1),
        ],
    )
