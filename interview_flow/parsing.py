"""Validation of collaborator payloads before they enter the session model.

Question, evaluation, feedback, narrative and role payloads arrive as plain
mappings. Each parser checks the shape field by field and returns either
``ParseOk`` carrying a model instance or ``ParseError`` with a reason that is
safe to show to callers.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, Sequence, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError

from .models import (
    CRITERIA,
    DIFFICULTY_TIERS,
    EvaluationBlock,
    EvaluationRubric,
    EvaluationScores,
    FeedbackBlock,
    QuestionBlock,
    RoleBlock,
)

T = TypeVar("T")

_CATEGORY_NAMES = ("technical", "behavioral", "hr", "custom")


@dataclass(frozen=True)
class ParseOk(Generic[T]):  # Validated payload
    data: T


@dataclass(frozen=True)
class ParseError:  # Rejected payload with a caller-safe reason
    reason: str


ParseResult = Union[ParseOk[T], ParseError]


class ReportNarrative(BaseModel):  # Prose fields accepted from the narrator
    summary: str
    strengths: List[str] = Field(default_factory=list)
    weak_areas: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


def parse_question(raw: Any, *, fallback_category: str) -> ParseResult[QuestionBlock]:
    if not isinstance(raw, Mapping):
        return ParseError("question payload is not an object")
    question = _text(raw.get("question"))
    if not question:
        return ParseError("question text is missing")
    skill = _text(raw.get("skill"))
    if not skill:
        return ParseError("question skill is missing")
    difficulty = _text(raw.get("difficulty")).lower()
    if difficulty not in DIFFICULTY_TIERS:
        return ParseError(f"question difficulty {raw.get('difficulty')!r} is not one of easy, medium, hard")
    category = _text(raw.get("category")).lower()
    if category == "other":
        category = "custom"
    if category not in _CATEGORY_NAMES:
        category = fallback_category
    return ParseOk(
        QuestionBlock(
            intro=_text(raw.get("intro")),
            question=question,
            skill=skill,
            difficulty=difficulty,
            category=category,
        )
    )


def parse_evaluation(raw: Any, rubric: EvaluationRubric) -> ParseResult[EvaluationBlock]:
    """Validate evaluator output and clamp scores into rubric bounds."""

    if not isinstance(raw, Mapping):
        return ParseError("evaluation payload is not an object")
    scores_raw = raw.get("scores")
    if not isinstance(scores_raw, Mapping):
        return ParseError("evaluation scores are missing")
    scores = {}
    for criterion in CRITERIA:
        value = _number(scores_raw.get(criterion))
        if value is None:
            return ParseError(f"evaluation score {criterion!r} is missing or not numeric")
        scores[criterion] = _clamp(value, 0.0, float(rubric.maximum(criterion)))
    overall = _number(raw.get("overall_score"))
    if overall is None:
        return ParseError("overall_score is missing or not numeric")
    needs_followup = raw.get("needs_followup", False)
    if not isinstance(needs_followup, bool):
        return ParseError("needs_followup must be a boolean")
    reason = _text(raw.get("followup_reason")) or None
    return ParseOk(
        EvaluationBlock(
            scores=EvaluationScores(**scores),
            overall_score=_clamp(overall, 0.0, 10.0),
            weaknesses=_string_list(raw.get("weaknesses")),
            notes=_text(raw.get("notes")),
            needs_followup=needs_followup,
            followup_reason=reason if needs_followup else None,
        )
    )


def parse_feedback(raw: Any) -> ParseResult[FeedbackBlock]:
    if not isinstance(raw, Mapping):
        return ParseError("feedback payload is not an object")
    ideal = _text(raw.get("ideal_answer"))
    if not ideal:
        return ParseError("feedback ideal_answer is missing")
    return ParseOk(
        FeedbackBlock(
            ideal_answer=ideal,
            mistakes=_string_list(raw.get("mistakes")),
            improvement_tips=_string_list(raw.get("improvement_tips")),
        )
    )


def parse_report_narrative(raw: Any) -> ParseResult[ReportNarrative]:
    # numeric fields in the payload are ignored; aggregates are computed locally
    if not isinstance(raw, Mapping):
        return ParseError("report payload is not an object")
    summary = _text(raw.get("summary"))
    if not summary:
        return ParseError("report summary is missing")
    return ParseOk(
        ReportNarrative(
            summary=summary,
            strengths=_string_list(raw.get("strengths")),
            weak_areas=_string_list(raw.get("weak_areas")),
            recommendations=_string_list(raw.get("recommendations")),
        )
    )


def parse_role_block(
    raw: Any,
    *,
    categories: Sequence[str],
    total_questions: int,
    custom_category: Optional[str] = None,
) -> ParseResult[RoleBlock]:
    """Build a role block from generated fields plus the caller's category plan."""

    if not isinstance(raw, Mapping):
        return ParseError("role payload is not an object")
    role_name = _text(raw.get("role_name"))
    if not role_name:
        return ParseError("role_name is missing")
    skills = _string_list(raw.get("skills"))
    if not skills:
        return ParseError("role skills are missing")
    difficulty = _text(raw.get("difficulty")).lower() or "medium"
    rubric_raw = raw.get("evaluation_rubric")
    rubric = {}
    if isinstance(rubric_raw, Mapping):
        for criterion in CRITERIA:
            value = _number(rubric_raw.get(criterion))
            if value is not None and value >= 1:
                rubric[criterion] = int(value)
    try:
        block = RoleBlock(
            role_name=role_name,
            skills=skills,
            difficulty=difficulty,
            evaluation_rubric=EvaluationRubric(**rubric),
            categories=list(categories),
            custom_category=custom_category,
            total_questions=total_questions,
        )
    except ValidationError as exc:
        return ParseError(_first_error(exc))
    return ParseOk(block)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return " ".join(value.split())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _number(value: Any) -> Optional[float]:  # Finite float from a numeric or numeric-string field
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [text for text in (_text(item) for item in value) if text]


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid role payload"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


__all__ = [
    "ParseError",
    "ParseOk",
    "ParseResult",
    "ReportNarrative",
    "parse_evaluation",
    "parse_feedback",
    "parse_question",
    "parse_report_narrative",
    "parse_role_block",
]
