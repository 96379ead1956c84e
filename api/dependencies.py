"""Collaborator factories injected into the HTTP routes.

Each factory builds its object once per process from ``app_config.json``;
tests replace them through ``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from config.settings import settings
from evaluation import AnswerEvaluator, InterviewerConversation, ReportGenerator
from interview_session import SessionEngine
from question_bank import QuestionGenerator
from speech import SpeechToText, TextToSpeech
from storage.migrate import migrate
from storage.sessions import SessionStore
from storage.templates import TemplateStore

ROOT = Path(__file__).resolve().parents[1]


def config_path() -> Path:
    path = Path(settings.APP_CONFIG_PATH)
    return path if path.is_absolute() else ROOT / path


@lru_cache(maxsize=1)
def get_engine() -> SessionEngine:
    migrate(settings.DB_PATH)
    path = config_path()
    return SessionEngine(
        templates=TemplateStore(settings.DB_PATH),
        sessions=SessionStore(settings.DB_PATH),
        generator=QuestionGenerator.from_config(path),
        evaluator=AnswerEvaluator.from_config(path),
        reporter=ReportGenerator.from_config(path),
    )


@lru_cache(maxsize=1)
def get_stt() -> SpeechToText:
    return SpeechToText.from_config(config_path())


@lru_cache(maxsize=1)
def get_tts() -> TextToSpeech:
    return TextToSpeech.from_config(config_path())


@lru_cache(maxsize=1)
def get_conversation() -> InterviewerConversation:
    return InterviewerConversation.from_config(config_path())


__all__ = ["config_path", "get_conversation", "get_engine", "get_stt", "get_tts"]
