from __future__ import annotations  # Re-export question_bank public API

from .generator import GENERATE_KEY, GeneratedQuestions, QuestionGenerator
from .models import (
    Difficulty,
    GenerationOutcome,
    InterviewTemplate,
    Question,
    Round,
    RoundDraft,
    TIER_ORDER,
    TemplateCreation,
    TemplateDraft,
)
from .templates import QuestionSource, create_template

__all__ = [
    "Difficulty",
    "GENERATE_KEY",
    "GeneratedQuestions",
    "GenerationOutcome",
    "InterviewTemplate",
    "Question",
    "QuestionGenerator",
    "QuestionSource",
    "Round",
    "RoundDraft",
    "TIER_ORDER",
    "TemplateCreation",
    "TemplateDraft",
    "create_template",
]
