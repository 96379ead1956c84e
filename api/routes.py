"""FastAPI routes for interview templates, sessions, and speech."""
from __future__ import annotations

import base64
import logging
import re
from contextlib import contextmanager
from typing import Iterator, List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import ValidationError

from api.dependencies import get_conversation, get_engine, get_stt, get_tts
from api.schemas import (
    AnswerOut,
    CompleteResp,
    CreateTemplateReq,
    CreateTemplateResp,
    CurrentQuestionOut,
    CurrentQuestionResp,
    EvaluationOut,
    FinalReportOut,
    FollowUpOut,
    GenerationOutcomeOut,
    QuestionOut,
    RespondReq,
    RespondResp,
    RoundOut,
    SessionOut,
    StartSessionReq,
    SubmitAnswerReq,
    SubmitAnswerResp,
    SynthesizeReq,
    SynthesizeResp,
    TemplateOut,
    TranscribeResp,
    TranscriptEntryOut,
)
from errors import (
    ConflictError,
    InputValidationError,
    InterviewError,
    NotFoundError,
    UpstreamProviderError,
)
from evaluation import ChatMessage, FinalReport, InterviewerConversation
from interview_session import Answer, InterviewComplete, InterviewSession, SessionEngine, SessionStatus
from question_bank import InterviewTemplate, RoundDraft, TemplateDraft
from session_reports import generate_session_report_pdf
from speech import SpeechToText, TextToSpeech


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview")

COMPLETED_MESSAGE = "Interview completed"


def _status_for(exc: InterviewError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, InputValidationError):
        return 400
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, UpstreamProviderError):
        return 502
    return 500


@contextmanager
def _http_errors(action: str) -> Iterator[None]:  # Map the error taxonomy onto HTTP status codes
    try:
        yield
    except InterviewError as exc:
        status = _status_for(exc)
        if status >= 500:
            logger.exception("%s failed: %s", action, exc)
        else:
            logger.info("%s rejected status=%d: %s", action, status, exc)
        raise HTTPException(status_code=status, detail=str(exc)) from exc


def _template_out(template: InterviewTemplate) -> TemplateOut:
    return TemplateOut(
        id=template.template_id,
        company_id=template.company_id,
        title=template.title,
        job_role=template.job_role,
        skills=template.skills,
        job_description=template.job_description,
        created_at=template.created_at,
        rounds=[
            RoundOut(
                id=round_.round_id,
                name=round_.name,
                order=round_.order,
                description=round_.description,
                questions=[
                    QuestionOut(
                        id=question.question_id,
                        round_id=question.round_id,
                        text=question.text,
                        difficulty=question.difficulty.value,
                        category=question.category,
                    )
                    for question in round_.questions
                ],
            )
            for round_ in template.rounds
        ],
    )


def _report_out(report: FinalReport) -> FinalReportOut:
    return FinalReportOut(
        overall_score=report.overall_score,
        summary=report.summary,
        detailed_feedback=report.detailed_feedback,
        recommendations=report.recommendations,
    )


def _session_out(session: InterviewSession) -> SessionOut:
    return SessionOut(
        id=session.session_id,
        template_id=session.template_id,
        student_id=session.student_id,
        company_id=session.company_id,
        status=session.status.value,
        current_round_index=session.cursor.round_index,
        current_question_index=session.cursor.question_index,
        transcript=[
            TranscriptEntryOut(role=entry.role, text=entry.text, timestamp=entry.timestamp)
            for entry in session.transcript
        ],
        overall_score=session.overall_score,
        final_report=_report_out(session.final_report) if session.final_report else None,
        started_at=session.started_at,
        completed_at=session.completed_at,
    )


def _answer_out(answer: Answer) -> AnswerOut:
    return AnswerOut(
        id=answer.answer_id,
        question_id=answer.question_id,
        answer_text=answer.answer_text,
        audio_ref=answer.audio_ref,
        score=answer.score,
        feedback=answer.feedback,
        strengths=answer.strengths,
        weaknesses=answer.weaknesses,
        follow_ups=[FollowUpOut(question=item.question, answer=item.answer) for item in answer.follow_ups],
        evaluated_at=answer.evaluated_at,
    )


def _safe_slug(value: str) -> str:  # Sanitize value for filenames
    return re.sub(r"[^A-Za-z0-9]+", "-", value).strip("-").lower()


@router.post("/templates", response_model=CreateTemplateResp, status_code=201)
def create_template(payload: CreateTemplateReq, engine: SessionEngine = Depends(get_engine)) -> CreateTemplateResp:
    try:
        draft = TemplateDraft(
            title=payload.title,
            job_role=payload.job_role,
            skills=payload.skills,
            job_description=payload.job_description,
            rounds=[
                RoundDraft(name=item.name, order=item.order, description=item.description)
                for item in payload.rounds
            ],
        )
    except ValidationError as exc:
        detail = exc.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(status_code=400, detail=detail) from exc
    with _http_errors("create_template"):
        created = engine.create_template(payload.company_id, draft)
    return CreateTemplateResp(
        template=_template_out(created.template),
        generation=[
            GenerationOutcomeOut(
                round_id=item.round_id,
                round_name=item.round_name,
                difficulty=item.difficulty.value,
                requested=item.requested,
                generated=item.generated,
                error=item.error,
            )
            for item in created.outcomes
        ],
    )


@router.get("/templates/{template_id}", response_model=TemplateOut)
def get_template(template_id: str, engine: SessionEngine = Depends(get_engine)) -> TemplateOut:
    with _http_errors("get_template"):
        template = engine.get_template(template_id)
    return _template_out(template)


@router.post("/sessions", response_model=SessionOut, status_code=201)
def start_session(payload: StartSessionReq, engine: SessionEngine = Depends(get_engine)) -> SessionOut:
    with _http_errors("start_session"):
        session = engine.start_session(payload.template_id, payload.student_id, payload.company_id)
    return _session_out(session)


@router.get("/sessions/{session_id}", response_model=SessionOut)
def get_session(session_id: str, engine: SessionEngine = Depends(get_engine)) -> SessionOut:
    with _http_errors("get_session"):
        session = engine.get_session(session_id)
    return _session_out(session)


@router.get("/sessions/{session_id}/current-question", response_model=CurrentQuestionResp)
def current_question(session_id: str, engine: SessionEngine = Depends(get_engine)) -> CurrentQuestionResp:
    with _http_errors("current_question"):
        result = engine.current_question(session_id)
    if isinstance(result, InterviewComplete):
        return CurrentQuestionResp(completed=True, message=COMPLETED_MESSAGE)
    return CurrentQuestionResp(
        completed=False,
        current_question=CurrentQuestionOut(
            id=result.question.question_id,
            text=result.question.text,
            difficulty=result.question.difficulty.value,
            round_id=result.round_id,
            round_name=result.round_name,
            question_number=result.question_number,
            total_in_round=result.total_in_round,
            round_number=result.round_number,
            total_rounds=result.total_rounds,
        ),
    )


@router.post("/sessions/{session_id}/answers", response_model=SubmitAnswerResp)
def submit_answer(
    session_id: str,
    payload: SubmitAnswerReq,
    engine: SessionEngine = Depends(get_engine),
) -> SubmitAnswerResp:
    with _http_errors("submit_answer"):
        result = engine.submit_answer(
            session_id,
            payload.question_id,
            payload.answer_text,
            audio_ref=payload.audio_ref,
        )
    evaluation = result.evaluation
    return SubmitAnswerResp(
        answer_id=result.answer_id,
        evaluation=EvaluationOut(
            score=evaluation.score,
            feedback=evaluation.feedback,
            strengths=evaluation.strengths,
            weaknesses=evaluation.weaknesses,
        ),
        follow_up_question=result.follow_up_question,
    )


@router.get("/sessions/{session_id}/answers", response_model=List[AnswerOut])
def list_answers(session_id: str, engine: SessionEngine = Depends(get_engine)) -> List[AnswerOut]:
    with _http_errors("list_answers"):
        answers = engine.list_answers(session_id)
    return [_answer_out(answer) for answer in answers]


@router.post("/sessions/{session_id}/complete", response_model=CompleteResp)
def complete_session(session_id: str, engine: SessionEngine = Depends(get_engine)) -> CompleteResp:
    with _http_errors("complete_session"):
        report = engine.complete(session_id)
    return CompleteResp(
        session_id=session_id,
        status=SessionStatus.COMPLETED.value,
        final_report=_report_out(report),
    )


@router.post("/sessions/{session_id}/cancel", response_model=SessionOut)
def cancel_session(session_id: str, engine: SessionEngine = Depends(get_engine)) -> SessionOut:
    with _http_errors("cancel_session"):
        session = engine.cancel(session_id)
    return _session_out(session)


@router.get("/sessions/{session_id}/report.pdf")
def session_report_pdf(session_id: str, engine: SessionEngine = Depends(get_engine)) -> Response:
    with _http_errors("session_report_pdf"):
        session = engine.get_session(session_id)
        if session.status != SessionStatus.COMPLETED:
            raise ConflictError(f"Session '{session_id}' is {session.status.value}; no report yet")
        template = engine.get_template(session.template_id)
        answers = engine.list_answers(session_id)
    payload = generate_session_report_pdf(template, session, answers)
    filename = f"{_safe_slug(template.job_role) or 'interview'}-{session.session_id}.pdf"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=payload, media_type="application/pdf", headers=headers)


@router.post("/transcribe", response_model=TranscribeResp)
def transcribe(audio: UploadFile = File(...), stt: SpeechToText = Depends(get_stt)) -> TranscribeResp:
    # Read one byte past the limit so validate() sees the overflow
    data = audio.file.read(stt.max_bytes + 1)
    with _http_errors("transcribe"):
        transcript = stt.transcribe(data, filename=audio.filename or "audio.webm", content_type=audio.content_type)
    return TranscribeResp(transcript=transcript)


@router.post("/synthesize", response_model=SynthesizeResp)
def synthesize(payload: SynthesizeReq, tts: TextToSpeech = Depends(get_tts)) -> SynthesizeResp:
    with _http_errors("synthesize"):
        audio = tts.synthesize(payload.text)
    return SynthesizeResp(audio=base64.b64encode(audio).decode("ascii"), mime_type=tts.mime_type)


@router.post("/respond", response_model=RespondResp)
def respond(
    payload: RespondReq,
    engine: SessionEngine = Depends(get_engine),
    conversation: InterviewerConversation = Depends(get_conversation),
) -> RespondResp:
    history = [ChatMessage(role=item.role, text=item.text) for item in payload.history]
    with _http_errors("respond"):
        context = engine.context_for(payload.session_id)
        reply = conversation.respond(context, payload.message, history)
    return RespondResp(reply=reply)


__all__ = ["router"]
