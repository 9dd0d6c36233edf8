from __future__ import annotations  # Error taxonomy surfaced by the interview orchestrator

from typing import Any, Dict, Optional


class InterviewError(Exception):  # Base error carrying a stable kind and a user-facing message
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def to_payload(self) -> Dict[str, Any]:  # Serializable error body for transports
        return {"error": self.kind, "message": self.message, "details": self.details}


class InputValidationError(InterviewError):  # Missing or malformed caller input
    kind = "validation_error"
    status_code = 422


class NotFound(InterviewError):  # Unknown session, question or role
    kind = "not_found"
    status_code = 404


class PermissionDenied(InterviewError):  # Caller does not own the resource it tried to change
    kind = "forbidden"
    status_code = 403


class InvalidTransition(InterviewError):  # Lifecycle or scheduler invariant violated
    kind = "invalid_transition"
    status_code = 409


class NoActiveQuestion(InvalidTransition):  # Answer submitted without a pending question
    kind = "no_active_question"


class NoAnswersYet(InvalidTransition):  # Report requested before any answer was recorded
    kind = "no_answers_yet"


class ExternalServiceFailure(InterviewError):  # Generator, evaluator, narrator or transcriber failed
    kind = "external_service_failure"
    status_code = 502


class QuestionGenerationFailed(ExternalServiceFailure):
    kind = "question_generation_failed"


class InvalidEvaluationShape(ExternalServiceFailure):
    kind = "invalid_evaluation_shape"


class FeedbackGenerationFailed(ExternalServiceFailure):
    kind = "feedback_generation_failed"


class ReportGenerationFailed(ExternalServiceFailure):
    kind = "report_generation_failed"


class UnsupportedAudioFormat(InterviewError):  # Audio codec or container the transcriber cannot read
    kind = "unsupported_audio_format"
    status_code = 415


class ConcurrencyConflict(InterviewError):  # Lost the per-session lock or version race
    kind = "concurrency_conflict"
    status_code = 409


__all__ = [
    "ConcurrencyConflict",
    "ExternalServiceFailure",
    "FeedbackGenerationFailed",
    "InputValidationError",
    "InterviewError",
    "InvalidEvaluationShape",
    "InvalidTransition",
    "NoActiveQuestion",
    "NoAnswersYet",
    "NotFound",
    "PermissionDenied",
    "QuestionGenerationFailed",
    "ReportGenerationFailed",
    "UnsupportedAudioFormat",
]
