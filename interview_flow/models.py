from __future__ import annotations  # Interview session domain models

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Difficulty = Literal["easy", "medium", "hard"]
Category = Literal["technical", "behavioral", "hr", "custom"]
SessionStatus = Literal["in_progress", "paused", "completed"]

DIFFICULTY_TIERS: tuple[Difficulty, ...] = ("easy", "medium", "hard")
CRITERIA = ("correctness", "clarity", "depth", "relevance")

_CATEGORY_ALIASES = {"other": "custom"}


class EvaluationRubric(BaseModel):  # Per-criterion maximum scores
    model_config = ConfigDict(frozen=True)

    correctness: int = Field(default=5, gt=0)
    clarity: int = Field(default=5, gt=0)
    depth: int = Field(default=5, gt=0)
    relevance: int = Field(default=5, gt=0)

    def maximum(self, criterion: str) -> int:  # Max score for one named criterion
        return int(getattr(self, criterion))


class RoleBlock(BaseModel):  # Immutable interview configuration
    model_config = ConfigDict(frozen=True)

    role_name: str = Field(min_length=1)
    skills: List[str] = Field(default_factory=list)
    difficulty: Difficulty = "medium"
    evaluation_rubric: EvaluationRubric = Field(default_factory=EvaluationRubric)
    categories: List[Category] = Field(min_length=1)
    custom_category: Optional[str] = None
    total_questions: int = Field(ge=1)

    @field_validator("skills", mode="before")
    @classmethod
    def _dedupe_skills(cls, value: Any) -> List[str]:  # Strip blanks, keep first occurrence order
        if not isinstance(value, (list, tuple)):
            return value
        return _unique([str(item).strip() for item in value if str(item).strip()])

    @field_validator("categories", mode="before")
    @classmethod
    def _normalize_categories(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        normalized = [_CATEGORY_ALIASES.get(str(item).strip().lower(), str(item).strip().lower()) for item in value]
        return _unique(normalized)

    @model_validator(mode="after")
    def _custom_label_required(self) -> "RoleBlock":
        if "custom" in self.categories and not (self.custom_category or "").strip():
            raise ValueError("custom_category must be specified when the custom category is selected")
        return self


class QuestionBlock(BaseModel):  # One generated question
    model_config = ConfigDict(frozen=True)

    intro: str = ""
    question: str = Field(min_length=1)
    skill: str = Field(min_length=1)
    difficulty: Difficulty
    category: Category


class EvaluationScores(BaseModel):  # Four rubric sub-scores
    model_config = ConfigDict(frozen=True)

    correctness: float = Field(ge=0.0)
    clarity: float = Field(ge=0.0)
    depth: float = Field(ge=0.0)
    relevance: float = Field(ge=0.0)


class EvaluationBlock(BaseModel):  # Scoring result for one answer
    model_config = ConfigDict(frozen=True)

    scores: EvaluationScores
    overall_score: float = Field(ge=0.0, le=10.0)
    weaknesses: List[str] = Field(default_factory=list)
    notes: str = ""
    needs_followup: bool = False
    followup_reason: Optional[str] = None


class FeedbackBlock(BaseModel):  # Post-hoc coaching for one answer
    model_config = ConfigDict(frozen=True)

    ideal_answer: str
    mistakes: List[str] = Field(default_factory=list)
    improvement_tips: List[str] = Field(default_factory=list)


class MemorySummary(BaseModel):  # Rolling compressed candidate state
    model_config = ConfigDict(frozen=True)

    question_count: int = Field(default=0, ge=0)
    weak_skills: List[str] = Field(default_factory=list)
    strong_skills: List[str] = Field(default_factory=list)
    last_score: float = 0.0
    difficulty: Difficulty = "medium"
    prev_answer_summary: str = ""
    needs_followup: bool = False


class QAEntry(BaseModel):  # One completed turn
    question_number: int = Field(ge=1)
    question: QuestionBlock
    answer_text: str
    answer_audio_url: Optional[str] = None
    evaluation: EvaluationBlock
    feedback: Optional[FeedbackBlock] = None
    question_started_at: datetime
    answer_submitted_at: datetime
    time_spent_seconds: int = Field(ge=0)


class Bookmark(BaseModel):  # Candidate-saved question for later review
    question_number: int = Field(ge=1)
    question: str
    answer: str = ""
    note: str = ""
    bookmarked_at: datetime


class NoPendingQuestion(BaseModel):  # No question awaiting an answer
    kind: Literal["none"] = "none"


class PendingQuestion(BaseModel):  # Question issued and awaiting an answer
    kind: Literal["pending"] = "pending"
    question: QuestionBlock
    question_number: int = Field(ge=1)
    issued_at: datetime


PendingState = Annotated[Union[NoPendingQuestion, PendingQuestion], Field(discriminator="kind")]


class FinalReportBlock(BaseModel):  # Narrative plus locally computed aggregates
    model_config = ConfigDict(frozen=True)

    summary: str
    strengths: List[str] = Field(default_factory=list)
    weak_areas: List[str] = Field(default_factory=list)
    skill_scores: Dict[str, int] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
    overall_performance: int = Field(ge=0, le=10)


class InterviewSession(BaseModel):  # Aggregate root owning every nested block
    session_id: str
    user_id: Optional[str] = None
    role_block: RoleBlock
    status: SessionStatus = "in_progress"
    current_question_number: int = Field(default=0, ge=0)
    memory: MemorySummary = Field(default_factory=MemorySummary)
    qa_history: List[QAEntry] = Field(default_factory=list)
    type_targets: Dict[str, int] = Field(default_factory=dict)
    asked_type_count: Dict[str, int] = Field(default_factory=dict)
    pending: PendingState = Field(default_factory=NoPendingQuestion)
    started_at: datetime
    completed_at: Optional[datetime] = None
    paused_at: Optional[datetime] = None
    pause_duration_seconds: int = Field(default=0, ge=0)
    pause_count: int = Field(default=0, ge=0)
    bookmarks: List[Bookmark] = Field(default_factory=list)
    final_report: Optional[FinalReportBlock] = None
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=0, ge=0)

    def find_entry(self, question_number: int) -> Optional[QAEntry]:  # QA entry by 1-based number
        for entry in self.qa_history:
            if entry.question_number == question_number:
                return entry
        return None

    def questions_remaining(self) -> int:
        return max(0, self.role_block.total_questions - self.current_question_number)


class InterviewComplete(BaseModel):  # Returned instead of a question once the plan is exhausted
    session_id: str
    questions_answered: int
    total_questions: int


__all__ = [
    "Bookmark",
    "CRITERIA",
    "Category",
    "DIFFICULTY_TIERS",
    "Difficulty",
    "EvaluationBlock",
    "EvaluationRubric",
    "EvaluationScores",
    "FeedbackBlock",
    "FinalReportBlock",
    "InterviewComplete",
    "InterviewSession",
    "MemorySummary",
    "NoPendingQuestion",
    "PendingQuestion",
    "PendingState",
    "QAEntry",
    "QuestionBlock",
    "RoleBlock",
    "SessionStatus",
]


def _unique(items: List[str]) -> List[str]:  # Order-preserving de-duplication
    seen: set[str] = set()
    result: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
