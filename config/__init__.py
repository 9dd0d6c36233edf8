"""Configuration package for the interview orchestrator."""
from .routes import (
    AppConfig,
    InterviewSettings,
    LlmRoute,
    load_config,
    resolve_registry,
    resolve_route,
)
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "InterviewSettings",
    "LlmRoute",
    "load_config",
    "resolve_registry",
    "resolve_route",
    "Settings",
    "settings",
]
