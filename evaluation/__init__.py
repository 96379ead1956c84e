from __future__ import annotations  # Re-export evaluation public API

from .conversation import CONVERSATION_KEY, InterviewerConversation
from .evaluator import EVALUATE_KEY, AnswerEvaluator
from .models import AnswerEvaluation, ChatMessage, FinalReport, InterviewContext, QAPair, ScoredAnswer
from .report import REPORT_KEY, ReportGenerator

__all__ = [
    "AnswerEvaluation",
    "AnswerEvaluator",
    "CONVERSATION_KEY",
    "ChatMessage",
    "EVALUATE_KEY",
    "FinalReport",
    "InterviewContext",
    "InterviewerConversation",
    "QAPair",
    "REPORT_KEY",
    "ReportGenerator",
    "ScoredAnswer",
]
