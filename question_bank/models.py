from __future__ import annotations  # Template, round, and question domain models

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Difficulty(str, Enum):  # Question tier; declaration order is the in-round asking order
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


TIER_ORDER: List[Difficulty] = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


class Question(BaseModel):  # Generated question; never mutated
    question_id: str
    round_id: str
    text: str
    difficulty: Difficulty
    category: Optional[str] = None


class Round(BaseModel):  # Ordered interview phase
    round_id: str
    template_id: str
    name: str
    order: int
    description: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)

    def pool(self, difficulty: Difficulty) -> List[Question]:
        return [question for question in self.questions if question.difficulty == difficulty]


class InterviewTemplate(BaseModel):  # Company-owned interview definition
    template_id: str
    company_id: str
    title: str
    job_role: str
    skills: List[str] = Field(default_factory=list)
    job_description: Optional[str] = None
    rounds: List[Round] = Field(default_factory=list)
    created_at: str

    def question_index(self) -> Dict[str, Question]:
        return {question.question_id: question for round_ in self.rounds for question in round_.questions}


class RoundDraft(BaseModel):  # Round definition supplied at template creation
    name: str = Field(min_length=1)
    order: int
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> str:
        return str(value).strip() if value is not None else ""


class TemplateDraft(BaseModel):  # Template definition supplied by a company
    title: str = Field(min_length=1)
    job_role: str = Field(min_length=1)
    skills: List[str] = Field(min_length=1)
    job_description: Optional[str] = None
    rounds: List[RoundDraft] = Field(min_length=1)

    @field_validator("skills", mode="after")
    @classmethod
    def _clean_skills(cls, value: List[str]) -> List[str]:
        cleaned = [item.strip() for item in value if item and item.strip()]
        if not cleaned:
            raise ValueError("at least one skill is required")
        return cleaned


class GenerationOutcome(BaseModel):  # Result of generating one (round, difficulty) tier
    round_id: str
    round_name: str
    difficulty: Difficulty
    requested: int
    generated: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TemplateCreation(BaseModel):  # Template with the per-tier generation report
    template: InterviewTemplate
    outcomes: List[GenerationOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> List[GenerationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


__all__ = [
    "Difficulty",
    "GenerationOutcome",
    "InterviewTemplate",
    "Question",
    "Round",
    "RoundDraft",
    "TIER_ORDER",
    "TemplateCreation",
    "TemplateDraft",
]
