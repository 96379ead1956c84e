"""Configuration package for the interview services."""
from .routing import (
    AppConfig,
    LlmRoute,
    SpeechConfig,
    SpeechRoute,
    load_app_registry,
    load_config,
    resolve_registry,
)
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "SpeechConfig",
    "SpeechRoute",
    "load_app_registry",
    "load_config",
    "resolve_registry",
    "Settings",
    "settings",
]
