"""Interview session orchestration: scheduling, evaluation, memory, lifecycle and reporting."""
from .errors import (
    ConcurrencyConflict,
    ExternalServiceFailure,
    FeedbackGenerationFailed,
    InputValidationError,
    InterviewError,
    InvalidEvaluationShape,
    InvalidTransition,
    NoActiveQuestion,
    NoAnswersYet,
    NotFound,
    PermissionDenied,
    QuestionGenerationFailed,
    ReportGenerationFailed,
    UnsupportedAudioFormat,
)
from .models import (
    Bookmark,
    EvaluationBlock,
    EvaluationRubric,
    EvaluationScores,
    FeedbackBlock,
    FinalReportBlock,
    InterviewComplete,
    InterviewSession,
    MemorySummary,
    NoPendingQuestion,
    PendingQuestion,
    QAEntry,
    QuestionBlock,
    RoleBlock,
)
from .orchestrator import InterviewOrchestrator

__all__ = [
    "Bookmark",
    "ConcurrencyConflict",
    "EvaluationBlock",
    "EvaluationRubric",
    "EvaluationScores",
    "ExternalServiceFailure",
    "FeedbackBlock",
    "FeedbackGenerationFailed",
    "FinalReportBlock",
    "InputValidationError",
    "InterviewComplete",
    "InterviewError",
    "InterviewOrchestrator",
    "InterviewSession",
    "InvalidEvaluationShape",
    "InvalidTransition",
    "MemorySummary",
    "NoActiveQuestion",
    "NoAnswersYet",
    "NoPendingQuestion",
    "NotFound",
    "PermissionDenied",
    "PendingQuestion",
    "QAEntry",
    "QuestionBlock",
    "QuestionGenerationFailed",
    "ReportGenerationFailed",
    "RoleBlock",
    "UnsupportedAudioFormat",
]
