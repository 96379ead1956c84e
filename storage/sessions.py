"""Persistence for interview sessions and their answers.

Every progress mutation is a compare-and-swap on the stored cursor and
status, so two requests racing on the same session cannot both advance it.
"""
from __future__ import annotations

import json
import sqlite3
from typing import List, Optional, Sequence, Tuple
from uuid import uuid4

from errors import ConflictError, NotFoundError, SessionClosedError
from evaluation.models import AnswerEvaluation, FinalReport
from interview_session.models import (
    Answer,
    Cursor,
    FollowUp,
    InterviewSession,
    SelectionMap,
    SessionStatus,
    TranscriptEntry,
    transcript_from_json,
    transcript_to_json,
)

from .sqlite import get_conn, utc_now

_SESSION_COLUMNS = """
    session_id, template_id, student_id, company_id, status, selection_json,
    current_round_index, current_question_index, transcript_json, overall_score,
    final_report_json, started_at, completed_at, updated_at
"""

_OPEN_STATUSES = (SessionStatus.PENDING.value, SessionStatus.IN_PROGRESS.value)

_ANSWER_COLUMNS = """
    a.answer_id, a.session_id, a.question_id, a.answer_text, a.audio_ref, a.score, a.feedback,
    a.strengths_json, a.weaknesses_json, a.follow_ups_json, a.evaluated_at, a.created_at
"""


class SessionStore:  # SQLite-backed session and answer storage
    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path

    def create(
        self,
        *,
        template_id: str,
        student_id: str,
        company_id: str,
        selection: SelectionMap,
    ) -> InterviewSession:
        now = utc_now()
        session = InterviewSession(
            session_id=uuid4().hex,
            template_id=template_id,
            student_id=student_id,
            company_id=company_id,
            status=SessionStatus.IN_PROGRESS,
            selection=selection,
            started_at=now,
            updated_at=now,
        )
        with get_conn(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO interview_sessions (
                    session_id, template_id, student_id, company_id, status, selection_json,
                    current_round_index, current_question_index, transcript_json, started_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, 0, 0, '[]', ?, ?)
                """,
                (
                    session.session_id,
                    template_id,
                    student_id,
                    company_id,
                    session.status.value,
                    selection.to_json(),
                    now,
                    now,
                ),
            )
        return session

    def load(self, session_id: str) -> InterviewSession:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                f"SELECT {_SESSION_COLUMNS} FROM interview_sessions WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("Session", session_id)
        return _session_from_row(row)

    def list_recent(self, limit: int = 20) -> List[InterviewSession]:
        with get_conn(self._db_path) as conn:
            rows = conn.execute(
                f"SELECT {_SESSION_COLUMNS} FROM interview_sessions ORDER BY updated_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_session_from_row(row) for row in rows]

    def advance_round(self, session_id: str, expected: Cursor) -> bool:
        """Move to the start of the next round if the cursor is still ``expected``."""

        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """
                UPDATE interview_sessions
                SET current_round_index = ?, current_question_index = 0, updated_at = ?
                WHERE session_id = ?
                  AND status IN (?, ?)
                  AND current_round_index = ?
                  AND current_question_index = ?
                """,
                (
                    expected.round_index + 1,
                    utc_now(),
                    session_id,
                    SessionStatus.PENDING.value,
                    SessionStatus.IN_PROGRESS.value,
                    expected.round_index,
                    expected.question_index,
                ),
            )
            return cur.rowcount == 1

    def record_answer(
        self,
        session_id: str,
        expected: Cursor,
        *,
        question_id: str,
        question_text: str,
        answer_text: str,
        evaluation: AnswerEvaluation,
        audio_ref: Optional[str] = None,
    ) -> Answer:
        """Insert the answer, append the transcript pair, and advance the cursor by one.

        All three writes commit together or not at all. Raises ConflictError
        when the session moved away from ``expected`` or was closed.
        """

        now = utc_now()
        follow_ups = [FollowUp(question=evaluation.follow_up_question)] if evaluation.follow_up_question else []
        answer = Answer(
            answer_id=uuid4().hex,
            session_id=session_id,
            question_id=question_id,
            answer_text=answer_text,
            audio_ref=audio_ref,
            score=evaluation.score,
            feedback=evaluation.feedback,
            strengths=list(evaluation.strengths),
            weaknesses=list(evaluation.weaknesses),
            follow_ups=follow_ups,
            evaluated_at=now,
            created_at=now,
        )
        with get_conn(self._db_path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                """
                SELECT status, current_round_index, current_question_index, transcript_json
                FROM interview_sessions
                WHERE session_id = ?
                """,
                (session_id,),
            ).fetchone()
            if row is None:
                raise NotFoundError("Session", session_id)
            if row["status"] not in _OPEN_STATUSES:
                raise SessionClosedError(f"Session '{session_id}' is {row['status']}")
            if (row["current_round_index"], row["current_question_index"]) != (
                expected.round_index,
                expected.question_index,
            ):
                raise ConflictError(f"Session '{session_id}' was advanced concurrently")
            transcript = transcript_from_json(row["transcript_json"])
            transcript.append(TranscriptEntry(role="interviewer", text=question_text, timestamp=now))
            transcript.append(TranscriptEntry(role="student", text=answer_text, timestamp=utc_now()))
            next_seq = conn.execute(
                "SELECT COALESCE(MAX(seq), 0) + 1 FROM answers WHERE session_id = ?",
                (session_id,),
            ).fetchone()[0]
            try:
                conn.execute(
                    """
                    INSERT INTO answers (
                        answer_id, seq, session_id, question_id, answer_text, audio_ref, score, feedback,
                        strengths_json, weaknesses_json, follow_ups_json, evaluated_at, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        answer.answer_id,
                        int(next_seq),
                        session_id,
                        question_id,
                        answer_text,
                        audio_ref,
                        answer.score,
                        answer.feedback,
                        json.dumps(answer.strengths),
                        json.dumps(answer.weaknesses),
                        json.dumps([item.model_dump() for item in answer.follow_ups]),
                        answer.evaluated_at,
                        answer.created_at,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise ConflictError(f"Question '{question_id}' was already answered in this session") from exc
            conn.execute(
                """
                UPDATE interview_sessions
                SET status = ?,
                    current_question_index = current_question_index + 1,
                    transcript_json = ?,
                    updated_at = ?
                WHERE session_id = ?
                """,
                (SessionStatus.IN_PROGRESS.value, transcript_to_json(transcript), now, session_id),
            )
        return answer

    def complete(self, session_id: str, report: FinalReport) -> bool:
        """Stamp the final report on an open session; False when it was already closed."""

        now = utc_now()
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """
                UPDATE interview_sessions
                SET status = ?, overall_score = ?, final_report_json = ?, completed_at = ?, updated_at = ?
                WHERE session_id = ? AND status IN (?, ?)
                """,
                (
                    SessionStatus.COMPLETED.value,
                    report.overall_score,
                    report.model_dump_json(),
                    now,
                    now,
                    session_id,
                    SessionStatus.PENDING.value,
                    SessionStatus.IN_PROGRESS.value,
                ),
            )
            return cur.rowcount == 1

    def cancel(self, session_id: str) -> bool:
        with get_conn(self._db_path) as conn:
            cur = conn.execute(
                """
                UPDATE interview_sessions
                SET status = ?, updated_at = ?
                WHERE session_id = ? AND status IN (?, ?)
                """,
                (
                    SessionStatus.CANCELLED.value,
                    utc_now(),
                    session_id,
                    SessionStatus.PENDING.value,
                    SessionStatus.IN_PROGRESS.value,
                ),
            )
            return cur.rowcount == 1

    def answer_history(self, session_id: str) -> List[Tuple[str, Answer]]:
        """Return (question text, answer) pairs in creation order."""

        with get_conn(self._db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT {_ANSWER_COLUMNS}, q.text AS question_text
                FROM answers a
                JOIN questions q ON q.question_id = a.question_id
                WHERE a.session_id = ?
                ORDER BY a.seq ASC
                """,
                (session_id,),
            ).fetchall()
        return [(row["question_text"], _answer_from_row(row)) for row in rows]

    def list_answers(self, session_id: str) -> List[Answer]:
        return [answer for _, answer in self.answer_history(session_id)]


def _session_from_row(row: sqlite3.Row) -> InterviewSession:
    report_json = row["final_report_json"]
    return InterviewSession(
        session_id=row["session_id"],
        template_id=row["template_id"],
        student_id=row["student_id"],
        company_id=row["company_id"],
        status=SessionStatus(row["status"]),
        selection=SelectionMap.from_json(row["selection_json"]),
        cursor=Cursor(
            round_index=row["current_round_index"],
            question_index=row["current_question_index"],
        ),
        transcript=transcript_from_json(row["transcript_json"]),
        overall_score=row["overall_score"],
        final_report=FinalReport.model_validate_json(report_json) if report_json else None,
        started_at=row["started_at"],
        completed_at=row["completed_at"],
        updated_at=row["updated_at"],
    )


def _answer_from_row(row: sqlite3.Row) -> Answer:
    return Answer(
        answer_id=row["answer_id"],
        session_id=row["session_id"],
        question_id=row["question_id"],
        answer_text=row["answer_text"],
        audio_ref=row["audio_ref"],
        score=row["score"],
        feedback=row["feedback"],
        strengths=_json_list(row["strengths_json"]),
        weaknesses=_json_list(row["weaknesses_json"]),
        follow_ups=[FollowUp.model_validate(item) for item in _json_list(row["follow_ups_json"])],
        evaluated_at=row["evaluated_at"],
        created_at=row["created_at"],
    )


def _json_list(payload: Optional[str]) -> Sequence:
    return json.loads(payload) if payload else []


__all__ = ["SessionStore", "utc_now"]
