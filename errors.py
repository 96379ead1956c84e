"""Error taxonomy shared by the interview services."""
from __future__ import annotations


class InterviewError(RuntimeError):  # Base error for interview operations
    pass


class NotFoundError(InterviewError):  # Template, session, or question absent
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} '{identifier}' not found")
        self.kind = kind
        self.identifier = identifier


class InputValidationError(InterviewError):  # Caller supplied unusable input
    pass


class AudioValidationError(InputValidationError):  # Audio rejected before upload
    pass


class ConflictError(InterviewError):  # Session state moved under the caller
    pass


class SessionClosedError(ConflictError):  # Session is completed or cancelled
    pass


class DataIntegrityError(InterviewError):  # Stored template/session data is inconsistent
    pass


class UpstreamProviderError(InterviewError):  # LLM or speech provider failed
    pass


class QuestionGenerationFailed(UpstreamProviderError):
    pass


class EvaluationFailed(UpstreamProviderError):
    pass


class ReportGenerationFailed(UpstreamProviderError):
    pass


class ConversationFailed(UpstreamProviderError):
    pass


class SpeechProviderError(UpstreamProviderError):
    pass


__all__ = [
    "AudioValidationError",
    "ConflictError",
    "ConversationFailed",
    "DataIntegrityError",
    "EvaluationFailed",
    "InputValidationError",
    "InterviewError",
    "NotFoundError",
    "QuestionGenerationFailed",
    "ReportGenerationFailed",
    "SessionClosedError",
    "SpeechProviderError",
    "UpstreamProviderError",
]
