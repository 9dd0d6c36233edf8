from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import HttpClient, HttpResponse, LlmGatewayError, call, chat, runnable, transcribe

__all__ = ["HttpClient", "HttpResponse", "LlmGatewayError", "call", "chat", "runnable", "transcribe"]
