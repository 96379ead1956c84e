from __future__ import annotations  # Evaluation and report payload models

import json
import re
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _object_from_text(content: str) -> Any:  # Pull the outermost JSON object out of free-form text
    match = _OBJECT_RE.search(content)
    if not match:
        raise ValueError("no JSON object found in model output")
    return json.loads(match.group(0))


def _clamp_score(value: object) -> float:
    try:
        numeric = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"score must be numeric, got {value!r}") from exc
    return max(0.0, min(10.0, round(numeric, 1)))


def _string_list(value: object) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of strings")
    return [str(item).strip() for item in value if str(item).strip()]


class QAPair(BaseModel):  # Prior question and the student's answer
    question: str
    answer: str


class InterviewContext(BaseModel):  # Template context handed to every LLM call
    job_role: str
    skills: List[str] = Field(default_factory=list)
    job_description: Optional[str] = None
    current_round: str = ""
    previous_qa: List[QAPair] = Field(default_factory=list)


class AnswerEvaluation(BaseModel):  # Evaluator verdict for one answer
    score: float
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    follow_up_question: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("follow_up_question", "followUpQuestion"),
    )

    @field_validator("score", mode="before")
    @classmethod
    def _bound_score(cls, value: object) -> float:
        return _clamp_score(value)

    @field_validator("strengths", "weaknesses", mode="before")
    @classmethod
    def _coerce_lists(cls, value: object) -> List[str]:
        return _string_list(value)

    @field_validator("follow_up_question", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @classmethod
    def from_raw_content(cls, content: str) -> "AnswerEvaluation":
        return cls.model_validate(_object_from_text(content))


class ScoredAnswer(BaseModel):  # Stored answer flattened for report generation
    question: str
    answer: str
    score: float
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


class FinalReport(BaseModel):  # Aggregated interview verdict
    overall_score: float = Field(validation_alias=AliasChoices("overall_score", "overallScore"))
    summary: str
    detailed_feedback: str = Field(validation_alias=AliasChoices("detailed_feedback", "detailedFeedback"))
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("overall_score", mode="before")
    @classmethod
    def _bound_score(cls, value: object) -> float:
        return _clamp_score(value)

    @field_validator("recommendations", mode="before")
    @classmethod
    def _coerce_recommendations(cls, value: object) -> List[str]:
        return _string_list(value)

    @classmethod
    def from_raw_content(cls, content: str) -> "FinalReport":
        return cls.model_validate(_object_from_text(content))


class ChatMessage(BaseModel):  # One line of interviewer/student conversation
    role: Literal["interviewer", "student"]
    text: str


__all__ = [
    "AnswerEvaluation",
    "ChatMessage",
    "FinalReport",
    "InterviewContext",
    "QAPair",
    "ScoredAnswer",
]
