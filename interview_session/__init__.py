from __future__ import annotations  # Re-export interview_session public API

from .engine import Evaluator, ReportSource, Resolution, SessionEngine
from .models import (
    Answer,
    Cursor,
    CurrentQuestion,
    FollowUp,
    InterviewComplete,
    InterviewSession,
    SelectionMap,
    SessionStatus,
    SubmissionResult,
    TierSelection,
    TranscriptEntry,
)
from .selection import sample_tier, select_questions

__all__ = [
    "Answer",
    "Cursor",
    "CurrentQuestion",
    "Evaluator",
    "FollowUp",
    "InterviewComplete",
    "InterviewSession",
    "ReportSource",
    "Resolution",
    "SelectionMap",
    "SessionEngine",
    "SessionStatus",
    "SubmissionResult",
    "TierSelection",
    "TranscriptEntry",
    "sample_tier",
    "select_questions",
]
