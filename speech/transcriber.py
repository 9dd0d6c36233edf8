from __future__ import annotations  # Audio validation and speech-to-text collaborator

import logging
from typing import Optional

from config import LlmRoute
from config.settings import settings
from interview_flow.errors import ExternalServiceFailure, InputValidationError, UnsupportedAudioFormat
from llm_gateway import HttpClient, LlmGatewayError, transcribe

logger = logging.getLogger(__name__)

TRANSCRIBER_KEY = "speech.transcriber"  # Registry key for the transcription route

SUPPORTED_AUDIO_TYPES = {  # Content type to upload file extension
    "audio/webm": "webm",
    "audio/mp4": "mp4",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
}


def normalize_content_type(content_type: Optional[str]) -> str:  # "audio/webm;codecs=opus" -> "audio/webm"
    return (content_type or "").split(";", 1)[0].strip().lower()


def validate_audio(data: bytes, content_type: Optional[str], max_bytes: Optional[int] = None) -> str:
    """Check size and format of an uploaded recording and return its bare content type."""

    limit = max_bytes if max_bytes is not None else settings.MAX_AUDIO_BYTES
    if not data:
        raise InputValidationError("No audio file provided", details={"field": "audio"})
    if len(data) > limit:
        raise InputValidationError(
            f"File too large. Maximum size is {limit // (1024 * 1024)}MB",
            details={"field": "audio", "bytes": len(data), "max_bytes": limit},
        )
    kind = normalize_content_type(content_type)
    if kind not in SUPPORTED_AUDIO_TYPES:
        raise UnsupportedAudioFormat(
            "Invalid file type. Supported formats: webm, mp4, mpeg, wav, ogg",
            details={"content_type": content_type or ""},
        )
    return kind


class AudioTranscriber:  # Whisper-style transcription over an OpenAI-compatible route
    def __init__(
        self,
        route: LlmRoute,
        *,
        client: Optional[HttpClient] = None,
        language: Optional[str] = "en",
        max_bytes: Optional[int] = None,
    ) -> None:
        self._route = route
        self._client = client
        self._language = language
        self._max_bytes = max_bytes

    def transcribe(self, audio: bytes, *, content_type: str) -> str:
        kind = validate_audio(audio, content_type, self._max_bytes)
        try:
            text = transcribe(
                audio,
                filename=f"recording.{SUPPORTED_AUDIO_TYPES[kind]}",
                content_type=kind,
                cfg=self._route,
                client=self._client,
                language=self._language,
            )
        except LlmGatewayError as exc:
            logger.error("Transcription failed route=%s: %s", self._route.name, exc)
            raise ExternalServiceFailure("Failed to transcribe audio", details={"reason": str(exc)}) from exc
        logger.info("Transcription done route=%s chars=%d", self._route.name, len(text))
        return text


__all__ = ["AudioTranscriber", "SUPPORTED_AUDIO_TYPES", "TRANSCRIBER_KEY", "normalize_content_type", "validate_audio"]
