from __future__ import annotations  # Template creation with per-tier question generation

import logging
from typing import TYPE_CHECKING, List, Protocol, Sequence

from errors import UpstreamProviderError
from observability import log_event

from .models import Difficulty, GenerationOutcome, TIER_ORDER, TemplateCreation, TemplateDraft

if TYPE_CHECKING:
    from storage.templates import TemplateStore

logger = logging.getLogger(__name__)


class QuestionSource(Protocol):  # Anything that can produce question texts for one tier
    def generate(
        self,
        *,
        job_role: str,
        skills: Sequence[str],
        round_name: str,
        difficulty: Difficulty,
        count: int,
        job_description: str | None = None,
    ) -> List[str]: ...


def create_template(
    company_id: str,
    draft: TemplateDraft,
    *,
    store: TemplateStore,
    generator: QuestionSource,
    questions_per_tier: int,
) -> TemplateCreation:
    """Persist the template and generate questions tier by tier.

    A failing (round, difficulty) pair is logged and recorded in the returned
    outcomes; the remaining pairs are still generated.
    """

    template = store.create(company_id, draft)
    outcomes: List[GenerationOutcome] = []
    for round_ in template.rounds:
        for difficulty in TIER_ORDER:
            outcome = GenerationOutcome(
                round_id=round_.round_id,
                round_name=round_.name,
                difficulty=difficulty,
                requested=questions_per_tier,
            )
            try:
                texts = generator.generate(
                    job_role=draft.job_role,
                    skills=draft.skills,
                    round_name=round_.name,
                    difficulty=difficulty,
                    count=questions_per_tier,
                    job_description=draft.job_description,
                )
                stored = store.add_questions(
                    round_.round_id,
                    difficulty,
                    texts,
                    category=round_.name.lower(),
                )
                outcome.generated = len(stored)
            except UpstreamProviderError as exc:
                logger.error(
                    "Question generation failed template=%s round=%s difficulty=%s: %s",
                    template.template_id,
                    round_.name,
                    difficulty.value,
                    exc,
                )
                outcome.error = str(exc)
                log_event(
                    "generation_tier_failed",
                    template.template_id,
                    round=round_.name,
                    difficulty=difficulty.value,
                    error=str(exc),
                )
            outcomes.append(outcome)
    creation = TemplateCreation(template=store.load(template.template_id), outcomes=outcomes)
    logger.info(
        "Template created template=%s rounds=%d failed_tiers=%d",
        template.template_id,
        len(template.rounds),
        len(creation.failed),
    )
    return creation


__all__ = ["QuestionSource", "create_template"]
