from __future__ import annotations  # Session, selection map, transcript, and answer models

import json
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, RootModel

from evaluation.models import AnswerEvaluation, FinalReport
from question_bank.models import Difficulty, Question


class SessionStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TierSelection(BaseModel):  # Question ids chosen for one round, per tier
    easy: List[str] = Field(default_factory=list)
    medium: List[str] = Field(default_factory=list)
    hard: List[str] = Field(default_factory=list)

    def for_tier(self, difficulty: Difficulty) -> List[str]:
        return getattr(self, difficulty.value.lower())

    def ordered(self) -> List[str]:  # Asking order within a round: easy, then medium, then hard
        return [*self.easy, *self.medium, *self.hard]


class SelectionMap(RootModel[Dict[str, TierSelection]]):  # Round id -> tier selection, frozen at start
    def for_round(self, round_id: str) -> Optional[TierSelection]:
        return self.root.get(round_id)

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, payload: str) -> "SelectionMap":
        return cls.model_validate_json(payload)


class Cursor(BaseModel):  # (round index, question index into the round's ordered ids)
    round_index: int = Field(default=0, ge=0)
    question_index: int = Field(default=0, ge=0)


class TranscriptEntry(BaseModel):
    role: Literal["interviewer", "student"]
    text: str
    timestamp: str


def transcript_to_json(entries: List[TranscriptEntry]) -> str:
    return json.dumps([entry.model_dump() for entry in entries], ensure_ascii=False)


def transcript_from_json(payload: str) -> List[TranscriptEntry]:
    return [TranscriptEntry.model_validate(item) for item in json.loads(payload or "[]")]


class InterviewSession(BaseModel):
    session_id: str
    template_id: str
    student_id: str
    company_id: str
    status: SessionStatus
    selection: SelectionMap
    cursor: Cursor = Field(default_factory=Cursor)
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    overall_score: Optional[float] = None
    final_report: Optional[FinalReport] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    updated_at: str

    @property
    def is_open(self) -> bool:
        return self.status in (SessionStatus.PENDING, SessionStatus.IN_PROGRESS)


class FollowUp(BaseModel):  # Follow-up suggested by the evaluator; answer is not collected
    question: str
    answer: str = ""


class Answer(BaseModel):  # One evaluated answer per (session, question)
    answer_id: str
    session_id: str
    question_id: str
    answer_text: str
    audio_ref: Optional[str] = None
    score: float
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    follow_ups: List[FollowUp] = Field(default_factory=list)
    evaluated_at: str
    created_at: str


class CurrentQuestion(BaseModel):  # Resolved question plus positional metadata, never stored
    question: Question
    round_id: str
    round_name: str
    question_number: int
    total_in_round: int
    round_number: int
    total_rounds: int


class InterviewComplete(BaseModel):  # Sentinel: every round has been exhausted
    session_id: str
    rounds_completed: int


class SubmissionResult(BaseModel):
    answer_id: str
    evaluation: AnswerEvaluation
    follow_up_question: Optional[str] = None


__all__ = [
    "Answer",
    "Cursor",
    "CurrentQuestion",
    "FollowUp",
    "InterviewComplete",
    "InterviewSession",
    "SelectionMap",
    "SessionStatus",
    "SubmissionResult",
    "TierSelection",
    "TranscriptEntry",
    "transcript_from_json",
    "transcript_to_json",
]
