from __future__ import annotations  # Re-export speech adapters

from .stt import SUPPORTED_AUDIO_TYPES, SpeechToText
from .transport import SpeechHttpClient
from .tts import AUDIO_MIME_TYPE, TextToSpeech, split_text_into_chunks

__all__ = [
    "AUDIO_MIME_TYPE",
    "SUPPORTED_AUDIO_TYPES",
    "SpeechHttpClient",
    "SpeechToText",
    "TextToSpeech",
    "split_text_into_chunks",
]
