from __future__ import annotations  # LLM-backed final interview report

from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence

from config import LlmRoute, load_app_registry
from errors import ReportGenerationFailed
from llm_gateway import HttpClient, LlmGatewayError, call

from .models import FinalReport, InterviewContext, ScoredAnswer

REPORT_KEY = "evaluation.final_report"


class ReportGenerator:  # Aggregates every scored answer into one report
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client

    @classmethod
    def from_config(cls, config_path: Path, *, client: Optional[HttpClient] = None) -> "ReportGenerator":
        registry = load_app_registry(config_path, {REPORT_KEY: FinalReport})
        route, _ = registry[REPORT_KEY]
        return cls(route, client=client)

    def generate(self, context: InterviewContext, answers: Sequence[ScoredAnswer]) -> FinalReport:
        task = _build_task(context, answers)
        try:
            return call(task, FinalReport, cfg=self._route, client=self._client)
        except LlmGatewayError as exc:
            raise ReportGenerationFailed(f"Failed to generate report: {exc}") from exc


def _answers_block(answers: Sequence[ScoredAnswer]) -> str:
    if not answers:
        return "(the candidate did not answer any question)"
    blocks = []
    for index, item in enumerate(answers, start=1):
        lines = [
            f"Q{index}: {item.question}",
            f"A: {item.answer}",
            f"Score: {item.score}/10",
            f"Feedback: {item.feedback}",
        ]
        if item.strengths:
            lines.append("Strengths: " + "; ".join(item.strengths))
        if item.weaknesses:
            lines.append("Weaknesses: " + "; ".join(item.weaknesses))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _build_task(context: InterviewContext, answers: Sequence[ScoredAnswer]) -> str:
    prompt = dedent(
        """
        You are an expert interviewer writing the final evaluation report.

        Job role: %(job_role)s
        Required skills: %(skills)s

        Interview answers and evaluations:
        %(answers)s

        Produce:
        1. overall_score: 0 to 10, weighted across all answers.
        2. summary: two or three sentences on overall performance.
        3. detailed_feedback: in-depth analysis of strengths and areas to improve.
        4. recommendations: three to five specific recommendations for the candidate.

        Respond with a single JSON object:
        {"overall_score": 7.5, "summary": "...", "detailed_feedback": "...", "recommendations": ["..."]}
        Return only JSON without markdown fences or commentary.
        """
    ).strip()
    return prompt % {
        "job_role": context.job_role,
        "skills": ", ".join(context.skills),
        "answers": _answers_block(answers),
    }


__all__ = ["REPORT_KEY", "ReportGenerator"]
