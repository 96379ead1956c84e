from __future__ import annotations

from session_reports import generate_session_report_pdf


def test_pdf_renders_completed_session(engine, backend_draft, fake_evaluator):
    created = engine.create_template("company-1", backend_draft)
    session = engine.start_session(created.template.template_id, "student-1", "company-1")
    fake_evaluator.follow_up = "Why that trade-off?"
    for index in range(2):
        current = engine.current_question(session.session_id)
        engine.submit_answer(session.session_id, current.question.question_id, f"Answer {index} with “quotes” • bullets")
    engine.complete(session.session_id)

    payload = generate_session_report_pdf(
        engine.get_template(session.template_id),
        engine.get_session(session.session_id),
        engine.list_answers(session.session_id),
    )
    assert isinstance(payload, bytes)
    assert payload.startswith(b"%PDF")
    assert len(payload) > 1000


def test_pdf_renders_without_answers(engine, backend_draft):
    created = engine.create_template("company-1", backend_draft)
    session = engine.start_session(created.template.template_id, "student-1", "company-1")
    engine.complete(session.session_id)
    payload = generate_session_report_pdf(created.template, engine.get_session(session.session_id), [])
    assert payload.startswith(b"%PDF")
