from __future__ import annotations  # Portable export payload for a stored interview

from datetime import datetime
from typing import Any, Dict

from .lifecycle import elapsed_seconds
from .models import InterviewSession


def format_duration(seconds: int) -> str:  # 3725 -> "1h 2m 5s", 65 -> "1m 5s", 5 -> "5s"
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def build_export(session: InterviewSession, now: datetime) -> Dict[str, Any]:
    """Flatten a session into a JSON-ready document for download or PDF rendering."""

    total_seconds = elapsed_seconds(session, now)
    report = session.final_report
    return {
        "interview_id": session.session_id,
        "role": session.role_block.role_name,
        "difficulty": session.role_block.difficulty,
        "categories": list(session.role_block.categories),
        "custom_category": session.role_block.custom_category,
        "date": session.created_at.isoformat(),
        "started_at": session.started_at.isoformat(),
        "completed_at": session.completed_at.isoformat() if session.completed_at else None,
        "total_time_seconds": total_seconds,
        "total_time_formatted": format_duration(total_seconds),
        "status": session.status,
        "total_questions": len(session.qa_history),
        "planned_questions": session.role_block.total_questions,
        "pause_count": session.pause_count,
        "pause_duration_seconds": session.pause_duration_seconds,
        "questions": [
            {
                "number": entry.question_number,
                "question": entry.question.question,
                "answer": entry.answer_text,
                "category": entry.question.category,
                "skill": entry.question.skill,
                "difficulty": entry.question.difficulty,
                "evaluation": entry.evaluation.model_dump(mode="json"),
                "feedback": entry.feedback.model_dump(mode="json") if entry.feedback else None,
                "time_spent_seconds": entry.time_spent_seconds,
            }
            for entry in session.qa_history
        ],
        "bookmarks": [bookmark.model_dump(mode="json") for bookmark in session.bookmarks],
        "overall_score": report.overall_performance if report else None,
        "report": report.model_dump(mode="json") if report else None,
    }


__all__ = ["build_export", "format_duration"]
