"""Lightweight CLI helpers for inspecting interview sessions and answers."""
from __future__ import annotations

import argparse

from config.settings import settings
from storage.sessions import SessionStore


def tail_sessions(limit: int = 20) -> None:
    store = SessionStore(settings.DB_PATH)
    for session in store.list_recent(limit):
        cursor = session.cursor
        score = "-" if session.overall_score is None else f"{session.overall_score:.1f}"
        print(
            f"[{session.updated_at}] {session.session_id} student={session.student_id} "
            f"status={session.status.value} cursor={cursor.round_index}:{cursor.question_index} score={score}"
        )


def show_answers(session_id: str) -> None:
    store = SessionStore(settings.DB_PATH)
    for question_text, answer in store.answer_history(session_id):
        print(f"[{answer.created_at}] score={answer.score:.1f} q={question_text!r}")
        print(f"    answer={answer.answer_text!r}")
        if answer.feedback:
            print(f"    feedback={answer.feedback!r}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the most recently updated sessions")
    parser.add_argument("--answers", metavar="SESSION_ID", help="Show the answers recorded for a session")
    args = parser.parse_args()

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.answers:
        show_answers(args.answers)


if __name__ == "__main__":
    main()
