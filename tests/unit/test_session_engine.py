from __future__ import annotations

import json
import sqlite3

import pytest

from errors import ConflictError, DataIntegrityError, NotFoundError, SessionClosedError
from interview_session import CurrentQuestion, InterviewComplete, SessionEngine, SessionStatus
from storage.sessions import SessionStore
from storage.templates import TemplateStore


def _start(engine, draft):
    created = engine.create_template("company-1", draft)
    session = engine.start_session(created.template.template_id, "student-1", "company-1")
    return created.template, session


def _answer_current(engine, session_id, text="My answer"):
    current = engine.current_question(session_id)
    assert isinstance(current, CurrentQuestion)
    return current, engine.submit_answer(session_id, current.question.question_id, text)


def _rewrite_selection(db_path, session_id, change):
    conn = sqlite3.connect(db_path)
    try:
        row = conn.execute(
            "SELECT selection_json FROM interview_sessions WHERE session_id = ?", (session_id,)
        ).fetchone()
        selection = json.loads(row[0])
        change(selection)
        conn.execute(
            "UPDATE interview_sessions SET selection_json = ? WHERE session_id = ?",
            (json.dumps(selection), session_id),
        )
        conn.commit()
    finally:
        conn.close()


def test_backend_engineer_scenario(engine, backend_draft):
    template, session = _start(engine, backend_draft)
    assert [round_.name for round_ in template.rounds] == ["Intro", "Technical"]
    assert session.status == SessionStatus.IN_PROGRESS

    first = engine.current_question(session.session_id)
    assert isinstance(first, CurrentQuestion)
    assert first.round_name == "Intro"
    assert (first.question_number, first.total_in_round) == (1, 3)
    assert (first.round_number, first.total_rounds) == (1, 2)

    for _ in range(3):
        _answer_current(engine, session.session_id)

    technical = engine.current_question(session.session_id)
    assert isinstance(technical, CurrentQuestion)
    assert technical.round_name == "Technical"
    assert technical.round_number == 2
    assert technical.question_number == 1

    for _ in range(3):
        _answer_current(engine, session.session_id)

    done = engine.current_question(session.session_id)
    assert isinstance(done, InterviewComplete)
    assert done.rounds_completed == 2
    assert engine.get_session(session.session_id).cursor.round_index == 2


def test_round_asks_easy_then_medium_then_hard(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    seen = []
    for _ in range(3):
        current, _ = _answer_current(engine, session.session_id)
        seen.append(current.question.difficulty.value)
    assert seen == ["EASY", "MEDIUM", "HARD"]


def test_repeated_resolution_is_stable(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    first = engine.current_question(session.session_id)
    second = engine.current_question(session.session_id)
    assert first.question.question_id == second.question.question_id
    assert engine.get_session(session.session_id).cursor.question_index == 0


def test_questions_follow_the_frozen_selection(engine, backend_draft):
    template, session = _start(engine, backend_draft)
    expected = []
    for round_ in template.rounds:
        expected.extend(session.selection.for_round(round_.round_id).ordered())
    asked = []
    for _ in range(len(expected)):
        current, _ = _answer_current(engine, session.session_id)
        asked.append(current.question.question_id)
    assert asked == expected
    assert len(set(asked)) == len(asked)


def test_transcript_alternates_interviewer_and_student(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    for index in range(4):
        _answer_current(engine, session.session_id, text=f"answer {index}")
    transcript = engine.get_session(session.session_id).transcript
    assert len(transcript) == 8
    assert [entry.role for entry in transcript] == ["interviewer", "student"] * 4
    assert transcript[-1].text == "answer 3"


def test_submit_returns_evaluation_and_stores_follow_up(engine, backend_draft, fake_evaluator):
    _, session = _start(engine, backend_draft)
    fake_evaluator.score = 8.5
    fake_evaluator.follow_up = "Can you elaborate on indexing?"
    _, result = _answer_current(engine, session.session_id)
    assert result.evaluation.score == 8.5
    assert result.follow_up_question == "Can you elaborate on indexing?"

    answers = engine.list_answers(session.session_id)
    assert len(answers) == 1
    assert answers[0].follow_ups[0].question == "Can you elaborate on indexing?"
    assert answers[0].follow_ups[0].answer == ""


def test_evaluation_context_carries_history(engine, backend_draft, fake_evaluator):
    _, session = _start(engine, backend_draft)
    _answer_current(engine, session.session_id, text="first")
    _answer_current(engine, session.session_id, text="second")
    context = fake_evaluator.contexts[-1]
    assert context.job_role == "Backend Engineer"
    assert context.current_round == "intro"
    assert [pair.answer for pair in context.previous_qa] == ["first"]


def test_submitting_a_stale_question_conflicts(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    current, _ = _answer_current(engine, session.session_id)
    with pytest.raises(ConflictError):
        engine.submit_answer(session.session_id, current.question.question_id, "again")
    assert len(engine.list_answers(session.session_id)) == 1


def test_unknown_question_is_not_found(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    with pytest.raises(NotFoundError):
        engine.submit_answer(session.session_id, "missing-question", "text")


def test_unknown_session_and_template(engine):
    with pytest.raises(NotFoundError):
        engine.current_question("missing-session")
    with pytest.raises(NotFoundError):
        engine.start_session("missing-template", "student-1", "company-1")


def test_submit_after_all_rounds_conflicts(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    last = None
    for _ in range(6):
        last, _ = _answer_current(engine, session.session_id)
    with pytest.raises(ConflictError):
        engine.submit_answer(session.session_id, last.question.question_id, "late")


def test_evaluator_failure_writes_nothing(engine, backend_draft, fake_evaluator):
    from errors import EvaluationFailed

    _, session = _start(engine, backend_draft)
    current = engine.current_question(session.session_id)
    fake_evaluator.fail = True
    with pytest.raises(EvaluationFailed):
        engine.submit_answer(session.session_id, current.question.question_id, "answer")
    reloaded = engine.get_session(session.session_id)
    assert reloaded.cursor.question_index == 0
    assert reloaded.transcript == []
    assert engine.list_answers(session.session_id) == []


def test_complete_stores_report(engine, backend_draft, fake_evaluator, fake_reporter):
    _, session = _start(engine, backend_draft)
    fake_evaluator.score = 6.0
    for _ in range(2):
        _answer_current(engine, session.session_id)

    report = engine.complete(session.session_id)
    assert report.overall_score == 6.0
    assert [item.answer for item in fake_reporter.seen] == ["My answer", "My answer"]

    stored = engine.get_session(session.session_id)
    assert stored.status == SessionStatus.COMPLETED
    assert stored.overall_score == 6.0
    assert stored.final_report.summary == "2 answers reviewed"
    assert stored.completed_at is not None
    assert isinstance(engine.current_question(session.session_id), InterviewComplete)


def test_complete_twice_returns_stored_report(engine, backend_draft, fake_reporter):
    _, session = _start(engine, backend_draft)
    first = engine.complete(session.session_id)
    second = engine.complete(session.session_id)
    assert second == first
    assert fake_reporter.calls == 1


def test_report_failure_keeps_session_open(engine, backend_draft, fake_reporter):
    from errors import ReportGenerationFailed

    _, session = _start(engine, backend_draft)
    _answer_current(engine, session.session_id)
    fake_reporter.fail = True
    with pytest.raises(ReportGenerationFailed):
        engine.complete(session.session_id)
    stored = engine.get_session(session.session_id)
    assert stored.status == SessionStatus.IN_PROGRESS
    assert stored.overall_score is None


def test_answers_rejected_after_completion(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    current = engine.current_question(session.session_id)
    engine.complete(session.session_id)
    with pytest.raises(SessionClosedError):
        engine.submit_answer(session.session_id, current.question.question_id, "late")


def test_cancel_closes_session(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    cancelled = engine.cancel(session.session_id)
    assert cancelled.status == SessionStatus.CANCELLED
    assert engine.cancel(session.session_id).status == SessionStatus.CANCELLED
    with pytest.raises(SessionClosedError):
        engine.current_question(session.session_id)
    with pytest.raises(SessionClosedError):
        engine.complete(session.session_id)


def test_cancel_after_completion_conflicts(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    engine.complete(session.session_id)
    with pytest.raises(SessionClosedError):
        engine.cancel(session.session_id)


def test_rounds_without_questions_are_skipped(engine, backend_draft, fake_generator):
    fake_generator.failing = {("Intro", "EASY"), ("Intro", "MEDIUM"), ("Intro", "HARD")}
    template, session = _start(engine, backend_draft)
    assert template.rounds[0].questions == []
    current = engine.current_question(session.session_id)
    assert current.round_name == "Technical"
    assert current.round_number == 2


def test_context_for_reports_current_round(engine, backend_draft):
    _, session = _start(engine, backend_draft)
    context = engine.context_for(session.session_id)
    assert context.job_role == "Backend Engineer"
    assert context.current_round == "Intro"


def test_selected_question_missing_from_storage_is_integrity_error(engine, backend_draft, tmp_db):
    template, session = _start(engine, backend_draft)
    first_round = template.rounds[0].round_id

    def point_at_unknown_question(selection):
        selection[first_round]["easy"][0] = "ghost"

    _rewrite_selection(tmp_db, session.session_id, point_at_unknown_question)
    with pytest.raises(DataIntegrityError, match="ghost"):
        engine.current_question(session.session_id)
    assert engine.get_session(session.session_id).cursor.question_index == 0


def test_round_missing_from_selection_is_integrity_error(engine, backend_draft, tmp_db):
    template, session = _start(engine, backend_draft)
    first_round = template.rounds[0].round_id
    _rewrite_selection(tmp_db, session.session_id, lambda selection: selection.pop(first_round))
    with pytest.raises(DataIntegrityError, match="no selection"):
        engine.current_question(session.session_id)
    assert engine.get_session(session.session_id).cursor.round_index == 0


def test_explicit_zero_per_tier_is_not_replaced_by_default(
    tmp_db, fake_generator, fake_evaluator, fake_reporter, backend_draft
):
    zero = SessionEngine(
        templates=TemplateStore(),
        sessions=SessionStore(),
        generator=fake_generator,
        evaluator=fake_evaluator,
        reporter=fake_reporter,
        questions_per_tier=1,
        selected_per_tier=0,
    )
    created = zero.create_template("company-1", backend_draft)
    with pytest.raises(ValueError):
        zero.start_session(created.template.template_id, "student-1", "company-1")
