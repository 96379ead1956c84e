"""Persistence for interview templates, rounds, and generated questions."""
from __future__ import annotations

import json
import sqlite3
from typing import Dict, Iterable, List, Optional
from uuid import uuid4

from errors import NotFoundError
from question_bank.models import Difficulty, InterviewTemplate, Question, Round, TemplateDraft

from .sqlite import get_conn, utc_now


class TemplateStore:  # SQLite-backed template storage
    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path

    def create(self, company_id: str, draft: TemplateDraft) -> InterviewTemplate:
        """Insert a template and its rounds; questions are added afterwards."""

        template_id = uuid4().hex
        now = utc_now()
        rounds = [
            Round(
                round_id=uuid4().hex,
                template_id=template_id,
                name=item.name,
                order=item.order,
                description=item.description,
            )
            for item in sorted(draft.rounds, key=lambda item: item.order)
        ]
        with get_conn(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO interview_templates
                    (template_id, company_id, title, job_role, skills_json, job_description, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    template_id,
                    company_id,
                    draft.title,
                    draft.job_role,
                    json.dumps(draft.skills),
                    draft.job_description,
                    now,
                ),
            )
            conn.executemany(
                """
                INSERT INTO interview_rounds (round_id, template_id, name, round_order, description)
                VALUES (?, ?, ?, ?, ?)
                """,
                [(r.round_id, template_id, r.name, r.order, r.description) for r in rounds],
            )
        return InterviewTemplate(
            template_id=template_id,
            company_id=company_id,
            title=draft.title,
            job_role=draft.job_role,
            skills=list(draft.skills),
            job_description=draft.job_description,
            rounds=rounds,
            created_at=now,
        )

    def add_questions(
        self,
        round_id: str,
        difficulty: Difficulty,
        texts: Iterable[str],
        *,
        category: Optional[str] = None,
    ) -> List[Question]:
        """Bulk-insert generated questions for one round and tier."""

        now = utc_now()
        questions = [
            Question(
                question_id=uuid4().hex,
                round_id=round_id,
                text=text,
                difficulty=difficulty,
                category=category,
            )
            for text in texts
        ]
        with get_conn(self._db_path) as conn:
            conn.executemany(
                """
                INSERT INTO questions (question_id, round_id, text, difficulty, category, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [(q.question_id, q.round_id, q.text, q.difficulty.value, q.category, now) for q in questions],
            )
        return questions

    def load(self, template_id: str) -> InterviewTemplate:
        """Load a template with rounds in ascending order and their questions."""

        with get_conn(self._db_path) as conn:
            header = conn.execute(
                """
                SELECT template_id, company_id, title, job_role, skills_json, job_description, created_at
                FROM interview_templates
                WHERE template_id = ?
                """,
                (template_id,),
            ).fetchone()
            if header is None:
                raise NotFoundError("Template", template_id)
            round_rows = conn.execute(
                """
                SELECT round_id, template_id, name, round_order, description
                FROM interview_rounds
                WHERE template_id = ?
                ORDER BY round_order ASC, rowid ASC
                """,
                (template_id,),
            ).fetchall()
            question_rows = conn.execute(
                """
                SELECT q.question_id, q.round_id, q.text, q.difficulty, q.category
                FROM questions q
                JOIN interview_rounds r ON r.round_id = q.round_id
                WHERE r.template_id = ?
                ORDER BY q.rowid ASC
                """,
                (template_id,),
            ).fetchall()
        by_round: Dict[str, List[Question]] = {}
        for row in question_rows:
            by_round.setdefault(row["round_id"], []).append(_question_from_row(row))
        rounds = [
            Round(
                round_id=row["round_id"],
                template_id=row["template_id"],
                name=row["name"],
                order=row["round_order"],
                description=row["description"],
                questions=by_round.get(row["round_id"], []),
            )
            for row in round_rows
        ]
        return InterviewTemplate(
            template_id=header["template_id"],
            company_id=header["company_id"],
            title=header["title"],
            job_role=header["job_role"],
            skills=json.loads(header["skills_json"]),
            job_description=header["job_description"],
            rounds=rounds,
            created_at=header["created_at"],
        )

    def get_question(self, question_id: str) -> Optional[Question]:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                "SELECT question_id, round_id, text, difficulty, category FROM questions WHERE question_id = ?",
                (question_id,),
            ).fetchone()
        return _question_from_row(row) if row is not None else None


def _question_from_row(row: sqlite3.Row) -> Question:
    return Question(
        question_id=row["question_id"],
        round_id=row["round_id"],
        text=row["text"],
        difficulty=Difficulty(row["difficulty"]),
        category=row["category"],
    )


__all__ = ["TemplateStore"]
