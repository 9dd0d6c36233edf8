from __future__ import annotations  # Final report aggregation over the QA history

from collections import OrderedDict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, NamedTuple, Sequence

from observability import log_event

from .contracts import ReportNarrator
from .errors import NoAnswersYet, ReportGenerationFailed
from .lifecycle import complete, elapsed_seconds
from .models import FinalReportBlock, InterviewSession, NoPendingQuestion, QAEntry
from .parsing import ParseError, parse_report_narrative


class ReportOutcome(NamedTuple):  # Report plus the session state that carries it
    report: FinalReportBlock
    session: InterviewSession


def round_half_up(value: float) -> int:  # 7.5 -> 8, 7.49 -> 7
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def skill_averages(history: Sequence[QAEntry]) -> Dict[str, int]:
    grouped: "OrderedDict[str, List[float]]" = OrderedDict()
    for entry in history:
        grouped.setdefault(entry.question.skill, []).append(entry.evaluation.overall_score)
    return {skill: round_half_up(sum(scores) / len(scores)) for skill, scores in grouped.items()}


def overall_performance(history: Sequence[QAEntry]) -> int:
    if not history:
        return 0
    return round_half_up(sum(entry.evaluation.overall_score for entry in history) / len(history))


def collect_notes(history: Sequence[QAEntry]) -> List[str]:  # Non-empty notes labelled by question number
    return [f"Q{entry.question_number}: {entry.evaluation.notes}" for entry in history if entry.evaluation.notes.strip()]


def report_statistics(session: InterviewSession, now: datetime) -> Dict[str, Any]:
    history = session.qa_history
    scores = [entry.evaluation.overall_score for entry in history]
    return {
        "role_name": session.role_block.role_name,
        "questions_answered": len(history),
        "total_questions": session.role_block.total_questions,
        "average_score": round(sum(scores) / len(scores), 2) if scores else 0.0,
        "highest_score": max(scores) if scores else 0.0,
        "lowest_score": min(scores) if scores else 0.0,
        "final_difficulty": session.memory.difficulty,
        "strong_skills": list(session.memory.strong_skills),
        "weak_skills": list(session.memory.weak_skills),
        "elapsed_seconds": elapsed_seconds(session, now),
    }


def build_report(session: InterviewSession, narrator: ReportNarrator, now: datetime) -> ReportOutcome:
    """Produce the final report once and complete the session.

    A session that already carries a report is returned unchanged. Numeric
    fields are always computed from the QA history; the narrator supplies
    prose only.
    """

    if session.final_report is not None:
        return ReportOutcome(report=session.final_report, session=session)
    if not session.qa_history:
        raise NoAnswersYet("No answers have been recorded yet", details={"session_id": session.session_id})

    averages = skill_averages(session.qa_history)
    overall = overall_performance(session.qa_history)
    raw = narrator.generate(session.role_block, report_statistics(session, now), averages, collect_notes(session.qa_history))
    parsed = parse_report_narrative(raw)
    if isinstance(parsed, ParseError):
        log_event("report_rejected", session.session_id, reason=parsed.reason)
        raise ReportGenerationFailed("The report narrator returned an unusable result", details={"reason": parsed.reason})

    narrative = parsed.data
    report = FinalReportBlock(
        summary=narrative.summary,
        strengths=narrative.strengths,
        weak_areas=narrative.weak_areas,
        skill_scores=averages,
        recommendations=narrative.recommendations,
        overall_performance=overall,
    )
    working = complete(session, now)
    working.pending = NoPendingQuestion()
    working.final_report = report
    return ReportOutcome(report=report, session=working)


__all__ = [
    "ReportOutcome",
    "build_report",
    "collect_notes",
    "overall_performance",
    "report_statistics",
    "round_half_up",
    "skill_averages",
]
