import json
from pathlib import Path

import pytest

from config import load_app_registry, load_config
from config.settings import Settings
from evaluation import EVALUATE_KEY, AnswerEvaluation, AnswerEvaluator
from question_bank import GENERATE_KEY, GeneratedQuestions
from speech import SpeechToText, TextToSpeech

EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "app_config.example.json"


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.QUESTIONS_PER_TIER == 6
    assert settings.SELECTED_PER_TIER == 2
    assert settings.MAX_AUDIO_BYTES == 25 * 1024 * 1024
    assert settings.TTS_CHUNK_CHARS == 500


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SELECTED_PER_TIER", "3")
    assert Settings(_env_file=None).SELECTED_PER_TIER == 3


def test_example_config_resolves_every_registry_key():
    cfg = load_config(EXAMPLE_CONFIG)
    assert set(cfg.registry) == {
        "question_bank.generate_questions",
        "evaluation.evaluate_answer",
        "evaluation.final_report",
        "evaluation.conversation",
    }
    assert cfg.speech.stt is not None and cfg.speech.tts is not None
    registry = load_app_registry(EXAMPLE_CONFIG, {GENERATE_KEY: GeneratedQuestions})
    route, schema = registry[GENERATE_KEY]
    assert schema is GeneratedQuestions
    assert route.max_retries == 0


def test_components_build_from_config():
    AnswerEvaluator.from_config(EXAMPLE_CONFIG)
    assert SpeechToText.from_config(EXAMPLE_CONFIG) is not None
    assert TextToSpeech.from_config(EXAMPLE_CONFIG).mime_type == "audio/mpeg"


def test_missing_registry_entry_raises(tmp_path):
    path = tmp_path / "app_config.json"
    path.write_text(json.dumps({"llm_routes": {}, "registry": {}}), encoding="utf-8")
    with pytest.raises(KeyError):
        load_app_registry(path, {EVALUATE_KEY: AnswerEvaluation})
