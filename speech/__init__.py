"""Speech-to-text collaborator for recorded answers."""
from .transcriber import AudioTranscriber, SUPPORTED_AUDIO_TYPES, TRANSCRIBER_KEY, validate_audio

__all__ = ["AudioTranscriber", "SUPPORTED_AUDIO_TYPES", "TRANSCRIBER_KEY", "validate_audio"]
