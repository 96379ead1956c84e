"""Speech-to-text adapter for OpenAI-compatible Whisper endpoints."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from config import SpeechRoute, load_config
from config.settings import settings
from errors import AudioValidationError, SpeechProviderError

from .transport import SpeechHttpClient, post


logger = logging.getLogger(__name__)

SUPPORTED_AUDIO_TYPES = frozenset(
    {
        "audio/webm",
        "video/webm",
        "audio/ogg",
        "audio/wav",
        "audio/x-wav",
        "audio/wave",
        "audio/mpeg",
        "audio/mp3",
        "audio/mp4",
        "audio/m4a",
        "audio/x-m4a",
        "audio/flac",
    }
)


class SpeechToText:  # Transcribes recorded answers
    def __init__(
        self,
        route: SpeechRoute,
        *,
        client: Optional[SpeechHttpClient] = None,
        max_bytes: Optional[int] = None,
    ) -> None:
        self._route = route
        self._client = client
        self._max_bytes = max_bytes if max_bytes is not None else settings.MAX_AUDIO_BYTES

    @classmethod
    def from_config(cls, config_path: Path, *, client: Optional[SpeechHttpClient] = None) -> "SpeechToText":
        cfg = load_config(config_path)
        if cfg.speech.stt is None:
            raise KeyError("Speech config missing 'stt' route")
        return cls(cfg.speech.stt, client=client)

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def validate(self, audio: bytes, content_type: Optional[str] = None) -> None:
        """Reject audio that the provider would refuse, without any network call."""

        if not audio:
            raise AudioValidationError("Audio file is empty")
        if len(audio) > self._max_bytes:
            limit_mb = self._max_bytes // (1024 * 1024)
            raise AudioValidationError(f"Audio file too large (max {limit_mb}MB)")
        if content_type:
            mime = content_type.split(";", 1)[0].strip().lower()
            if mime not in SUPPORTED_AUDIO_TYPES:
                raise AudioValidationError(f"Unsupported audio format '{mime}'")

    def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: Optional[str] = None,
    ) -> str:
        self.validate(audio, content_type)
        files = {"file": (filename, audio, content_type or "audio/webm")}
        data = {
            "model": self._route.model,
            "language": self._route.language,
            "response_format": self._route.response_format,
            "temperature": "0",
        }
        try:
            response = post(self._route, self._client, data=data, files=files)
        except Exception as exc:  # noqa: BLE001
            logger.error("STT transport failure model=%s: %s", self._route.model, exc)
            raise SpeechProviderError(f"Speech-to-text failed: {exc}") from exc
        if response.status_code >= 400:
            logger.error("STT error status=%s", response.status_code)
            raise SpeechProviderError(f"Speech-to-text failed: provider returned {response.status_code}")
        if self._route.response_format != "json":
            return response.text.strip()
        try:
            payload = response.json()
        except ValueError as exc:
            raise SpeechProviderError("Speech-to-text failed: payload was not JSON") from exc
        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise SpeechProviderError("Speech-to-text failed: response missing text")
        logger.info("STT done bytes=%d chars=%d", len(audio), len(text))
        return text.strip()


__all__ = ["SUPPORTED_AUDIO_TYPES", "SpeechToText"]
