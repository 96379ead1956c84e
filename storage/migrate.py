"""SQLite schema migrations."""
from __future__ import annotations

from typing import Iterable, Optional

from .sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_templates (
  template_id TEXT PRIMARY KEY,
  company_id TEXT NOT NULL,
  title TEXT NOT NULL,
  job_role TEXT NOT NULL,
  skills_json TEXT NOT NULL,
  job_description TEXT,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_rounds (
  round_id TEXT PRIMARY KEY,
  template_id TEXT NOT NULL,
  name TEXT NOT NULL,
  round_order INTEGER NOT NULL,
  description TEXT,
  FOREIGN KEY(template_id) REFERENCES interview_templates(template_id) ON DELETE CASCADE
);
""",
    """
CREATE TABLE IF NOT EXISTS questions (
  question_id TEXT PRIMARY KEY,
  round_id TEXT NOT NULL,
  text TEXT NOT NULL,
  difficulty TEXT NOT NULL CHECK (difficulty IN ('EASY', 'MEDIUM', 'HARD')),
  category TEXT,
  created_at TEXT NOT NULL,
  FOREIGN KEY(round_id) REFERENCES interview_rounds(round_id) ON DELETE CASCADE
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  session_id TEXT PRIMARY KEY,
  template_id TEXT NOT NULL,
  student_id TEXT NOT NULL,
  company_id TEXT NOT NULL,
  status TEXT NOT NULL,
  selection_json TEXT NOT NULL,
  current_round_index INTEGER NOT NULL DEFAULT 0,
  current_question_index INTEGER NOT NULL DEFAULT 0,
  transcript_json TEXT NOT NULL,
  overall_score REAL,
  final_report_json TEXT,
  started_at TEXT,
  completed_at TEXT,
  updated_at TEXT NOT NULL,
  FOREIGN KEY(template_id) REFERENCES interview_templates(template_id)
);
""",
    """
CREATE TABLE IF NOT EXISTS answers (
  answer_id TEXT PRIMARY KEY,
  seq INTEGER NOT NULL,
  session_id TEXT NOT NULL,
  question_id TEXT NOT NULL,
  answer_text TEXT NOT NULL,
  audio_ref TEXT,
  score REAL NOT NULL,
  feedback TEXT NOT NULL,
  strengths_json TEXT NOT NULL,
  weaknesses_json TEXT NOT NULL,
  follow_ups_json TEXT NOT NULL,
  evaluated_at TEXT NOT NULL,
  created_at TEXT NOT NULL,
  UNIQUE(session_id, question_id),
  FOREIGN KEY(session_id) REFERENCES interview_sessions(session_id) ON DELETE CASCADE,
  FOREIGN KEY(question_id) REFERENCES questions(question_id)
);
""",
    "CREATE INDEX IF NOT EXISTS idx_rounds_template ON interview_rounds(template_id, round_order);",
    "CREATE INDEX IF NOT EXISTS idx_questions_round ON questions(round_id, difficulty);",
    "CREATE INDEX IF NOT EXISTS idx_answers_session ON answers(session_id, seq);",
]


def migrate(db_path: Optional[str] = None) -> None:
    """Apply schema migrations to the SQLite database."""

    with get_conn(db_path) as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)


if __name__ == "__main__":
    migrate()
