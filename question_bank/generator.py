from __future__ import annotations  # LLM-backed interview question generation

import json
import logging
import re
from pathlib import Path
from textwrap import dedent
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from config import LlmRoute, load_app_registry
from errors import QuestionGenerationFailed
from llm_gateway import HttpClient, LlmGatewayError, call

from .models import Difficulty

GENERATE_KEY = "question_bank.generate_questions"

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class GeneratedQuestions(BaseModel):  # LLM payload holding question strings
    questions: List[str] = Field(min_length=1)

    @classmethod
    def from_raw_content(cls, content: str) -> "GeneratedQuestions":  # Accept a bare JSON array inside free-form text
        match = _ARRAY_RE.search(content)
        if not match:
            raise ValueError("no JSON array found in model output")
        items = json.loads(match.group(0))
        if not isinstance(items, list):
            raise ValueError("model output is not a list")
        return cls(questions=[str(item) for item in items])


class QuestionGenerator:  # Produces question texts for one (round, difficulty) tier
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client

    @classmethod
    def from_config(cls, config_path: Path, *, client: Optional[HttpClient] = None) -> "QuestionGenerator":
        registry = load_app_registry(config_path, {GENERATE_KEY: GeneratedQuestions})
        route, _ = registry[GENERATE_KEY]
        return cls(route, client=client)

    def generate(
        self,
        *,
        job_role: str,
        skills: Sequence[str],
        round_name: str,
        difficulty: Difficulty,
        count: int,
        job_description: Optional[str] = None,
    ) -> List[str]:
        task = _build_task(job_role, skills, round_name, difficulty, count, job_description)
        try:
            result = call(task, GeneratedQuestions, cfg=self._route, client=self._client)
        except LlmGatewayError as exc:
            raise QuestionGenerationFailed(
                f"Failed to generate {difficulty.value} questions for '{round_name}': {exc}"
            ) from exc
        questions = _clean(result.questions)[:count]
        if not questions:
            raise QuestionGenerationFailed(f"Model returned no usable questions for '{round_name}'")
        if len(questions) < count:
            logger.warning(
                "Question generator returned %d of %d %s questions for round=%s",
                len(questions),
                count,
                difficulty.value,
                round_name,
            )
        return questions


def _clean(items: Sequence[str]) -> List[str]:  # Drop blanks and duplicates, keep order
    seen: set[str] = set()
    cleaned: List[str] = []
    for item in items:
        text = item.strip()
        key = text.lower()
        if not text or key in seen:
            continue
        seen.add(key)
        cleaned.append(text)
    return cleaned


def _build_task(
    job_role: str,
    skills: Sequence[str],
    round_name: str,
    difficulty: Difficulty,
    count: int,
    job_description: Optional[str],
) -> str:
    skills_text = ", ".join(skills)
    description = f"Job description: {job_description.strip()}\n" if job_description and job_description.strip() else ""
    return dedent(
        f"""
        You are an expert interviewer. Write {count} {difficulty.value} interview questions for the "{round_name}" round.

        Job role: {job_role}
        Required skills: {skills_text}
        {description}
        Requirements:
        - Match the {difficulty.value} difficulty level.
        - Focus on what a "{round_name}" round is meant to assess.
        - Probe the candidate's knowledge of: {skills_text}.
        - Keep questions practical and tied to the job role; each must be answerable verbally.
        - Behavioural and situational questions suit HR rounds; concepts and design suit technical rounds.

        Respond with a JSON object: {{"questions": ["question 1", "question 2", ...]}}
        Return only JSON without markdown fences or commentary.
        """
    ).strip()


__all__ = ["GENERATE_KEY", "GeneratedQuestions", "QuestionGenerator"]
