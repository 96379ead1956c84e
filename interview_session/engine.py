"""Session progression engine.

Owns the lifecycle of an interview session: question selection at start,
current-question resolution with lazy round rollover, answer submission with
cursor advance, and completion. Every operation reloads state from the
stores; collaborators are injected so tests can substitute fakes.
"""
from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence, Tuple, Union

from config.settings import settings
from errors import ConflictError, DataIntegrityError, NotFoundError, SessionClosedError
from evaluation.models import AnswerEvaluation, FinalReport, InterviewContext, QAPair, ScoredAnswer
from observability import log_event, span
from question_bank.models import InterviewTemplate, TemplateCreation, TemplateDraft
from question_bank.templates import QuestionSource, create_template

from .models import (
    Answer,
    CurrentQuestion,
    InterviewComplete,
    InterviewSession,
    SessionStatus,
    SubmissionResult,
)
from .selection import select_questions

if TYPE_CHECKING:
    from storage.sessions import SessionStore
    from storage.templates import TemplateStore

logger = logging.getLogger(__name__)

Resolution = Union[CurrentQuestion, InterviewComplete]


class Evaluator(Protocol):
    def evaluate(self, question: str, answer: str, context: InterviewContext) -> AnswerEvaluation: ...


class ReportSource(Protocol):
    def generate(self, context: InterviewContext, answers: Sequence[ScoredAnswer]) -> FinalReport: ...


class SessionEngine:
    def __init__(
        self,
        *,
        templates: TemplateStore,
        sessions: SessionStore,
        generator: QuestionSource,
        evaluator: Evaluator,
        reporter: ReportSource,
        questions_per_tier: Optional[int] = None,
        selected_per_tier: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._templates = templates
        self._sessions = sessions
        self._generator = generator
        self._evaluator = evaluator
        self._reporter = reporter
        self._questions_per_tier = questions_per_tier if questions_per_tier is not None else settings.QUESTIONS_PER_TIER
        self._selected_per_tier = selected_per_tier if selected_per_tier is not None else settings.SELECTED_PER_TIER
        self._rng = rng

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def create_template(self, company_id: str, draft: TemplateDraft) -> TemplateCreation:
        return create_template(
            company_id,
            draft,
            store=self._templates,
            generator=self._generator,
            questions_per_tier=self._questions_per_tier,
        )

    def get_template(self, template_id: str) -> InterviewTemplate:
        return self._templates.load(template_id)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def start_session(self, template_id: str, student_id: str, company_id: str) -> InterviewSession:
        template = self._templates.load(template_id)
        selection = select_questions(template.rounds, per_tier=self._selected_per_tier, rng=self._rng)
        session = self._sessions.create(
            template_id=template_id,
            student_id=student_id,
            company_id=company_id,
            selection=selection,
        )
        log_event(
            "session_started",
            session.session_id,
            status=session.status.value,
            template_id=template_id,
            rounds=len(template.rounds),
            questions=sum(len(item.ordered()) for item in selection.root.values()),
        )
        return session

    def get_session(self, session_id: str) -> InterviewSession:
        return self._sessions.load(session_id)

    def list_answers(self, session_id: str) -> List[Answer]:
        self._sessions.load(session_id)
        return self._sessions.list_answers(session_id)

    def current_question(self, session_id: str) -> Resolution:
        session = self._sessions.load(session_id)
        template = self._templates.load(session.template_id)
        result, _ = self._resolve(session, template)
        if isinstance(result, CurrentQuestion):
            log_event(
                "question_resolved",
                session_id,
                round=result.round_number,
                question=result.question_number,
                difficulty=result.question.difficulty.value,
            )
        return result

    def submit_answer(
        self,
        session_id: str,
        question_id: str,
        answer_text: str,
        *,
        audio_ref: Optional[str] = None,
    ) -> SubmissionResult:
        session = self._sessions.load(session_id)
        if not session.is_open:
            raise SessionClosedError(f"Session '{session_id}' is {session.status.value}")
        question = self._templates.get_question(question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        template = self._templates.load(session.template_id)
        current, session = self._resolve(session, template)
        if isinstance(current, InterviewComplete):
            raise ConflictError("All rounds are finished; no question is awaiting an answer")
        if current.question.question_id != question_id:
            raise ConflictError(
                f"Question '{question_id}' is not the current question '{current.question.question_id}'"
            )

        history = self._sessions.answer_history(session_id)
        context = InterviewContext(
            job_role=template.job_role,
            skills=template.skills,
            job_description=template.job_description,
            current_round=question.category or current.round_name,
            previous_qa=[QAPair(question=text, answer=answer.answer_text) for text, answer in history],
        )
        with span("evaluate_answer", session_id, question=current.question_number):
            evaluation = self._evaluator.evaluate(question.text, answer_text, context)

        answer = self._sessions.record_answer(
            session_id,
            session.cursor,
            question_id=question_id,
            question_text=question.text,
            answer_text=answer_text,
            evaluation=evaluation,
            audio_ref=audio_ref,
        )
        log_event(
            "answer_recorded",
            session_id,
            round=current.round_number,
            question=current.question_number,
            score=evaluation.score,
        )
        return SubmissionResult(
            answer_id=answer.answer_id,
            evaluation=evaluation,
            follow_up_question=evaluation.follow_up_question,
        )

    def complete(self, session_id: str) -> FinalReport:
        """Generate and store the final report.

        A session that is already COMPLETED returns its stored report without
        calling the report generator again.
        """

        session = self._sessions.load(session_id)
        if session.status == SessionStatus.COMPLETED and session.final_report is not None:
            return session.final_report
        if session.status == SessionStatus.CANCELLED:
            raise SessionClosedError(f"Session '{session_id}' was cancelled")
        template = self._templates.load(session.template_id)
        scored = [
            ScoredAnswer(
                question=text,
                answer=answer.answer_text,
                score=answer.score,
                feedback=answer.feedback,
                strengths=answer.strengths,
                weaknesses=answer.weaknesses,
            )
            for text, answer in self._sessions.answer_history(session_id)
        ]
        context = InterviewContext(
            job_role=template.job_role,
            skills=template.skills,
            job_description=template.job_description,
        )
        with span("final_report", session_id, answers=len(scored)):
            report = self._reporter.generate(context, scored)

        if not self._sessions.complete(session_id, report):
            latest = self._sessions.load(session_id)
            if latest.status == SessionStatus.COMPLETED and latest.final_report is not None:
                return latest.final_report
            raise SessionClosedError(f"Session '{session_id}' is {latest.status.value}")
        log_event(
            "session_completed",
            session_id,
            status=SessionStatus.COMPLETED.value,
            score=report.overall_score,
            answers=len(scored),
        )
        return report

    def cancel(self, session_id: str) -> InterviewSession:
        if not self._sessions.cancel(session_id):
            session = self._sessions.load(session_id)
            if session.status == SessionStatus.COMPLETED:
                raise SessionClosedError(f"Session '{session_id}' is already completed")
            return session
        log_event("session_cancelled", session_id, status=SessionStatus.CANCELLED.value)
        return self._sessions.load(session_id)

    def context_for(self, session_id: str) -> InterviewContext:
        """Template context with the current round label, for conversational replies."""

        session = self._sessions.load(session_id)
        template = self._templates.load(session.template_id)
        current_round = ""
        if session.is_open:
            result, _ = self._resolve(session, template)
            if isinstance(result, CurrentQuestion):
                current_round = result.round_name
        return InterviewContext(
            job_role=template.job_role,
            skills=template.skills,
            job_description=template.job_description,
            current_round=current_round,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _resolve(
        self, session: InterviewSession, template: InterviewTemplate
    ) -> Tuple[Resolution, InterviewSession]:
        """Resolve the question under the cursor, rolling over exhausted rounds.

        Each rollover strictly increases the round index, so the loop needs at
        most one pass per round plus the final lookup.
        """

        rounds = template.rounds
        questions = template.question_index()
        for _ in range(len(rounds) + 1):
            if session.status == SessionStatus.COMPLETED:
                return InterviewComplete(session_id=session.session_id, rounds_completed=len(rounds)), session
            if session.status == SessionStatus.CANCELLED:
                raise SessionClosedError(f"Session '{session.session_id}' was cancelled")

            cursor = session.cursor
            if cursor.round_index >= len(rounds):
                return InterviewComplete(session_id=session.session_id, rounds_completed=len(rounds)), session

            round_ = rounds[cursor.round_index]
            selected = session.selection.for_round(round_.round_id)
            if selected is None:
                raise DataIntegrityError(
                    f"Session '{session.session_id}' has no selection for round '{round_.round_id}'"
                )
            ordered = selected.ordered()

            if cursor.question_index >= len(ordered):
                if self._sessions.advance_round(session.session_id, cursor):
                    log_event(
                        "round_advanced",
                        session.session_id,
                        round=cursor.round_index + 2,
                        outcome="exhausted" if ordered else "empty",
                    )
                else:
                    logger.debug("Round advance lost to a concurrent writer session=%s", session.session_id)
                session = self._sessions.load(session.session_id)
                continue

            question_id = ordered[cursor.question_index]
            question = questions.get(question_id)
            if question is None or question.round_id != round_.round_id:
                raise DataIntegrityError(
                    f"Selected question '{question_id}' is missing from round '{round_.name}'"
                )
            current = CurrentQuestion(
                question=question,
                round_id=round_.round_id,
                round_name=round_.name,
                question_number=cursor.question_index + 1,
                total_in_round=len(ordered),
                round_number=cursor.round_index + 1,
                total_rounds=len(rounds),
            )
            return current, session
        raise ConflictError(f"Session '{session.session_id}' kept advancing while resolving its question")


__all__ = ["Evaluator", "ReportSource", "Resolution", "SessionEngine"]
