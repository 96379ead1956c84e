from __future__ import annotations  # LLM-backed answer evaluation

from pathlib import Path
from textwrap import dedent
from typing import Optional

from config import LlmRoute, load_app_registry
from errors import EvaluationFailed
from llm_gateway import HttpClient, LlmGatewayError, call

from .models import AnswerEvaluation, InterviewContext

EVALUATE_KEY = "evaluation.evaluate_answer"


class AnswerEvaluator:  # Scores one answer on a 0-10 scale
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client

    @classmethod
    def from_config(cls, config_path: Path, *, client: Optional[HttpClient] = None) -> "AnswerEvaluator":
        registry = load_app_registry(config_path, {EVALUATE_KEY: AnswerEvaluation})
        route, _ = registry[EVALUATE_KEY]
        return cls(route, client=client)

    def evaluate(self, question: str, answer: str, context: InterviewContext) -> AnswerEvaluation:
        task = _build_task(question, answer, context)
        try:
            return call(task, AnswerEvaluation, cfg=self._route, client=self._client)
        except LlmGatewayError as exc:
            raise EvaluationFailed(f"Failed to evaluate answer: {exc}") from exc


def _history_block(context: InterviewContext) -> str:
    if not context.previous_qa:
        return "(first question of the interview)"
    return "\n".join(
        f"Q{index}: {pair.question}\nA{index}: {pair.answer}"
        for index, pair in enumerate(context.previous_qa, start=1)
    )


def _build_task(question: str, answer: str, context: InterviewContext) -> str:
    prompt = dedent(
        """
        You are an expert interviewer evaluating a candidate's answer.

        Job role: %(job_role)s
        Required skills: %(skills)s
        Current round: %(round)s
        %(description)s
        Earlier in this interview:
        %(history)s

        Question: %(question)s
        Candidate's answer: %(answer)s

        Evaluate the answer and provide:
        1. score: number from 0 to 10 for quality, correctness, and completeness.
        2. feedback: what was good and what could be improved.
        3. strengths: two or three specific strengths.
        4. weaknesses: two or three specific areas for improvement.
        5. follow_up_question: optional, only when the answer needs clarification or depth.

        Respond with a single JSON object:
        {"score": 7.5, "feedback": "...", "strengths": ["..."], "weaknesses": ["..."], "follow_up_question": "..."}
        Return only JSON without markdown fences or commentary.
        """
    ).strip()
    description = f"Job description: {context.job_description}" if context.job_description else ""
    return prompt % {
        "job_role": context.job_role,
        "skills": ", ".join(context.skills),
        "round": context.current_round or "general",
        "description": description,
        "history": _history_block(context),
        "question": question,
        "answer": answer,
    }


__all__ = ["AnswerEvaluator", "EVALUATE_KEY"]
