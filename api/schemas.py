"""Pydantic schemas for the interview HTTP API."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):  # camelCase on the wire, snake_case in code
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoundIn(CamelModel):
    name: str
    order: int
    description: Optional[str] = None


class CreateTemplateReq(CamelModel):
    company_id: str = Field(min_length=1)
    title: str
    job_role: str
    skills: List[str]
    job_description: Optional[str] = None
    rounds: List[RoundIn]


class QuestionOut(CamelModel):
    id: str
    round_id: str
    text: str
    difficulty: str
    category: Optional[str] = None


class RoundOut(CamelModel):
    id: str
    name: str
    order: int
    description: Optional[str] = None
    questions: List[QuestionOut] = Field(default_factory=list)


class GenerationOutcomeOut(CamelModel):
    round_id: str
    round_name: str
    difficulty: str
    requested: int
    generated: int
    error: Optional[str] = None


class TemplateOut(CamelModel):
    id: str
    company_id: str
    title: str
    job_role: str
    skills: List[str]
    job_description: Optional[str] = None
    rounds: List[RoundOut]
    created_at: str


class CreateTemplateResp(CamelModel):
    template: TemplateOut
    generation: List[GenerationOutcomeOut] = Field(default_factory=list)


class StartSessionReq(CamelModel):
    template_id: str
    student_id: str = Field(min_length=1)
    company_id: str = Field(min_length=1)


class TranscriptEntryOut(CamelModel):
    role: str
    text: str
    timestamp: str


class FinalReportOut(CamelModel):
    overall_score: float
    summary: str
    detailed_feedback: str
    recommendations: List[str] = Field(default_factory=list)


class SessionOut(CamelModel):
    id: str
    template_id: str
    student_id: str
    company_id: str
    status: str
    current_round_index: int
    current_question_index: int
    transcript: List[TranscriptEntryOut] = Field(default_factory=list)
    overall_score: Optional[float] = None
    final_report: Optional[FinalReportOut] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None


class CurrentQuestionOut(CamelModel):
    id: str
    text: str
    difficulty: str
    round_id: str
    round_name: str
    question_number: int
    total_in_round: int
    round_number: int
    total_rounds: int


class CurrentQuestionResp(CamelModel):
    completed: bool
    current_question: Optional[CurrentQuestionOut] = None
    message: Optional[str] = None


class SubmitAnswerReq(CamelModel):
    question_id: str
    answer_text: str
    audio_ref: Optional[str] = None


class EvaluationOut(CamelModel):
    score: float
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


class SubmitAnswerResp(CamelModel):
    answer_id: str
    evaluation: EvaluationOut
    follow_up_question: Optional[str] = None


class FollowUpOut(CamelModel):
    question: str
    answer: str = ""


class AnswerOut(CamelModel):
    id: str
    question_id: str
    answer_text: str
    audio_ref: Optional[str] = None
    score: float
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    follow_ups: List[FollowUpOut] = Field(default_factory=list)
    evaluated_at: str


class CompleteResp(CamelModel):
    session_id: str
    status: str
    final_report: FinalReportOut


class TranscribeResp(CamelModel):
    transcript: str


class SynthesizeReq(CamelModel):
    text: str


class SynthesizeResp(CamelModel):
    audio: str
    mime_type: str


class ChatMessageIn(CamelModel):
    role: Literal["interviewer", "student"]
    text: str


class RespondReq(CamelModel):
    session_id: str
    message: str
    history: List[ChatMessageIn] = Field(default_factory=list)


class RespondResp(CamelModel):
    reply: str
