"""Text-to-speech adapter for OpenAI-compatible ``/audio/speech`` endpoints."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List, Optional

from config import SpeechRoute, load_config
from config.settings import settings
from errors import InputValidationError, SpeechProviderError

from .transport import SpeechHttpClient, post


logger = logging.getLogger(__name__)

AUDIO_MIME_TYPE = "audio/mpeg"

_SENTENCE = re.compile(r"[^.!?]+[.!?]+")


def split_text_into_chunks(text: str, max_length: int) -> List[str]:
    """Group whole sentences into chunks no longer than ``max_length``.

    A single sentence longer than the limit is split on word boundaries.
    Text without terminal punctuation is treated as one sentence.
    """

    if max_length < 1:
        raise ValueError("max_length must be a positive number of characters")
    sentences = _SENTENCE.findall(text)
    consumed = sum(len(item) for item in sentences)
    tail = text[consumed:] if sentences else text
    if tail.strip():
        sentences.append(tail)

    chunks: List[str] = []
    current = ""
    for sentence in sentences:
        for piece in _fit(sentence.strip(), max_length):
            candidate = f"{current} {piece}" if current else piece
            if len(candidate) > max_length:
                chunks.append(current)
                current = piece
            else:
                current = candidate
    if current:
        chunks.append(current)
    return chunks


def _fit(sentence: str, max_length: int) -> List[str]:  # Word-wrap an oversized sentence
    if len(sentence) <= max_length:
        return [sentence] if sentence else []
    pieces: List[str] = []
    current = ""
    for word in sentence.split():
        while len(word) > max_length:
            if current:
                pieces.append(current)
                current = ""
            pieces.append(word[:max_length])
            word = word[max_length:]
        candidate = f"{current} {word}" if current else word
        if len(candidate) > max_length:
            pieces.append(current)
            current = word
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces


class TextToSpeech:  # Voices interviewer prompts
    mime_type = AUDIO_MIME_TYPE

    def __init__(
        self,
        route: SpeechRoute,
        *,
        client: Optional[SpeechHttpClient] = None,
        chunk_chars: Optional[int] = None,
    ) -> None:
        self._route = route
        self._client = client
        self._chunk_chars = chunk_chars if chunk_chars is not None else settings.TTS_CHUNK_CHARS

    @classmethod
    def from_config(cls, config_path: Path, *, client: Optional[SpeechHttpClient] = None) -> "TextToSpeech":
        cfg = load_config(config_path)
        if cfg.speech.tts is None:
            raise KeyError("Speech config missing 'tts' route")
        return cls(cfg.speech.tts, client=client)

    def synthesize(self, text: str) -> bytes:
        if not text or not text.strip():
            raise InputValidationError("Text is required for speech synthesis")
        payload = {
            "model": self._route.model,
            "voice": self._route.voice,
            "input": text.strip(),
            "response_format": "mp3",
        }
        try:
            response = post(self._route, self._client, json=payload)
        except Exception as exc:  # noqa: BLE001
            logger.error("TTS transport failure model=%s: %s", self._route.model, exc)
            raise SpeechProviderError(f"Text-to-speech failed: {exc}") from exc
        if response.status_code >= 400:
            logger.error("TTS error status=%s", response.status_code)
            raise SpeechProviderError(f"Text-to-speech failed: provider returned {response.status_code}")
        audio = response.content
        if not audio:
            raise SpeechProviderError("Text-to-speech failed: provider returned no audio")
        logger.info("TTS done chars=%d bytes=%d", len(text), len(audio))
        return audio

    def synthesize_stream(self, text: str) -> Iterator[bytes]:
        if not text or not text.strip():
            raise InputValidationError("Text is required for speech synthesis")
        for chunk in split_text_into_chunks(text, self._chunk_chars):
            yield self.synthesize(chunk)


__all__ = ["AUDIO_MIME_TYPE", "TextToSpeech", "split_text_into_chunks"]
