"""Observability utilities for the interview orchestrator."""
from .logger import log_event
from .tracing import span

__all__ = ["log_event", "span"]
