from __future__ import annotations

import sqlite3

import pytest

from config.settings import settings
from errors import ConflictError, NotFoundError, SessionClosedError
from evaluation import AnswerEvaluation, FinalReport
from interview_session import Cursor, SelectionMap, SessionStatus, TierSelection
from question_bank import Difficulty, RoundDraft, TemplateDraft
from storage.migrate import migrate
from storage.sessions import SessionStore
from storage.templates import TemplateStore


def _template_with_questions():
    store = TemplateStore()
    draft = TemplateDraft(
        title="Data Engineer",
        job_role="Data Engineer",
        skills=["Spark"],
        rounds=[RoundDraft(name="Technical", order=1)],
    )
    template = store.create("company-1", draft)
    round_id = template.rounds[0].round_id
    easy = store.add_questions(round_id, Difficulty.EASY, ["What is a DAG?"], category="technical")
    medium = store.add_questions(round_id, Difficulty.MEDIUM, ["Explain shuffles."], category="technical")
    return store.load(template.template_id), easy + medium


def _evaluation(score: float = 5.0) -> AnswerEvaluation:
    return AnswerEvaluation(score=score, feedback="ok")


def test_migrate_creates_tables():
    migrate()
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    finally:
        conn.close()
    assert {"interview_templates", "interview_rounds", "questions", "interview_sessions", "answers"} <= names


def test_migrate_is_idempotent():
    migrate()
    migrate()


def test_template_round_trip_orders_rounds():
    store = TemplateStore()
    draft = TemplateDraft(
        title="Backend",
        job_role="Backend Engineer",
        skills=[" Python ", ""],
        rounds=[RoundDraft(name="HR", order=3), RoundDraft(name="Intro", order=1)],
    )
    template = store.create("company-1", draft)
    loaded = store.load(template.template_id)
    assert [round_.name for round_ in loaded.rounds] == ["Intro", "HR"]
    assert loaded.skills == ["Python"]


def test_missing_template_raises_not_found():
    with pytest.raises(NotFoundError):
        TemplateStore().load("nope")


def test_record_answer_advances_cursor_and_transcript():
    template, questions = _template_with_questions()
    sessions = SessionStore()
    selection = SelectionMap(
        {template.rounds[0].round_id: TierSelection(easy=[questions[0].question_id], medium=[questions[1].question_id])}
    )
    session = sessions.create(template_id=template.template_id, student_id="s1", company_id="company-1", selection=selection)

    answer = sessions.record_answer(
        session.session_id,
        Cursor(),
        question_id=questions[0].question_id,
        question_text=questions[0].text,
        answer_text="A directed acyclic graph",
        evaluation=_evaluation(6.5),
    )

    reloaded = sessions.load(session.session_id)
    assert reloaded.cursor == Cursor(round_index=0, question_index=1)
    assert [entry.text for entry in reloaded.transcript] == ["What is a DAG?", "A directed acyclic graph"]
    assert reloaded.selection == selection
    history = sessions.answer_history(session.session_id)
    assert history[0][0] == "What is a DAG?"
    assert history[0][1].answer_id == answer.answer_id
    assert history[0][1].score == 6.5


def test_stale_cursor_write_is_rejected():
    template, questions = _template_with_questions()
    sessions = SessionStore()
    selection = SelectionMap({template.rounds[0].round_id: TierSelection(easy=[questions[0].question_id])})
    session = sessions.create(template_id=template.template_id, student_id="s1", company_id="c1", selection=selection)
    sessions.record_answer(
        session.session_id,
        Cursor(),
        question_id=questions[0].question_id,
        question_text=questions[0].text,
        answer_text="first",
        evaluation=_evaluation(),
    )

    with pytest.raises(ConflictError):
        sessions.record_answer(
            session.session_id,
            Cursor(),
            question_id=questions[1].question_id,
            question_text=questions[1].text,
            answer_text="racing writer",
            evaluation=_evaluation(),
        )
    assert len(sessions.list_answers(session.session_id)) == 1
    assert len(sessions.load(session.session_id).transcript) == 2


def test_advance_round_is_compare_and_swap():
    template, questions = _template_with_questions()
    sessions = SessionStore()
    selection = SelectionMap({template.rounds[0].round_id: TierSelection()})
    session = sessions.create(template_id=template.template_id, student_id="s1", company_id="c1", selection=selection)

    assert sessions.advance_round(session.session_id, Cursor()) is True
    assert sessions.advance_round(session.session_id, Cursor()) is False
    assert sessions.load(session.session_id).cursor == Cursor(round_index=1, question_index=0)


def test_closed_session_rejects_writes():
    template, questions = _template_with_questions()
    sessions = SessionStore()
    selection = SelectionMap({template.rounds[0].round_id: TierSelection(easy=[questions[0].question_id])})
    session = sessions.create(template_id=template.template_id, student_id="s1", company_id="c1", selection=selection)
    report = FinalReport(overall_score=4, summary="short", detailed_feedback="more practice")

    assert sessions.complete(session.session_id, report) is True
    assert sessions.complete(session.session_id, report) is False
    assert sessions.cancel(session.session_id) is False
    with pytest.raises(SessionClosedError):
        sessions.record_answer(
            session.session_id,
            Cursor(),
            question_id=questions[0].question_id,
            question_text=questions[0].text,
            answer_text="late",
            evaluation=_evaluation(),
        )
    stored = sessions.load(session.session_id)
    assert stored.status == SessionStatus.COMPLETED
    assert stored.final_report == report
    assert stored.overall_score == 4.0


def test_list_recent_respects_limit():
    template, _ = _template_with_questions()
    sessions = SessionStore()
    selection = SelectionMap({template.rounds[0].round_id: TierSelection()})
    first = sessions.create(template_id=template.template_id, student_id="s1", company_id="c1", selection=selection)
    second = sessions.create(template_id=template.template_id, student_id="s2", company_id="c1", selection=selection)
    recent = sessions.list_recent(limit=2)
    assert {item.session_id for item in recent} == {first.session_id, second.session_id}
    assert len(sessions.list_recent(limit=1)) == 1


def test_stores_share_timestamp_format():
    template, _ = _template_with_questions()
    sessions = SessionStore()
    selection = SelectionMap({template.rounds[0].round_id: TierSelection()})
    session = sessions.create(template_id=template.template_id, student_id="s1", company_id="c1", selection=selection)

    stamps = [TemplateStore().load(template.template_id).created_at, session.started_at, session.updated_at]
    for stamp in stamps:
        assert stamp.endswith("+00:00")
        assert len(stamp.split(".")[1]) == len("123+00:00")
