from datetime import timedelta

from conftest import T0
from interview_flow.export import build_export, format_duration
from interview_flow.models import (
    Bookmark,
    EvaluationBlock,
    EvaluationScores,
    FeedbackBlock,
    FinalReportBlock,
    InterviewSession,
    QAEntry,
    QuestionBlock,
    RoleBlock,
)
from session_reports import generate_session_pdf


def _session(*, completed: bool = True) -> InterviewSession:
    entry = QAEntry(
        question_number=1,
        question=QuestionBlock(question="Describe a tricky bug — and the fix", skill="debugging", difficulty="medium", category="behavioral"),
        answer_text="We traced a race condition in the cache “warmup” path",
        evaluation=EvaluationBlock(
            scores=EvaluationScores(correctness=4, clarity=4, depth=3, relevance=5),
            overall_score=7.5,
            weaknesses=["Light on metrics"],
            notes="Good story",
        ),
        feedback=FeedbackBlock(ideal_answer="Use STAR", mistakes=["No result"], improvement_tips=["Quantify impact"]),
        question_started_at=T0,
        answer_submitted_at=T0 + timedelta(seconds=75),
        time_spent_seconds=75,
    )
    report = FinalReportBlock(
        summary="Clear communicator.",
        strengths=["Storytelling"],
        weak_areas=["Metrics"],
        skill_scores={"debugging": 8},
        recommendations=["Bring numbers"],
        overall_performance=8,
    )
    return InterviewSession(
        session_id="abc123",
        role_block=RoleBlock(role_name="Site Reliability Engineer", categories=["behavioral"], total_questions=3),
        current_question_number=1,
        qa_history=[entry],
        bookmarks=[Bookmark(question_number=1, question=entry.question.question, answer=entry.answer_text, note="revisit", bookmarked_at=T0)],
        status="completed" if completed else "in_progress",
        started_at=T0,
        completed_at=T0 + timedelta(seconds=3725 + 60) if completed else None,
        pause_count=1,
        pause_duration_seconds=60,
        final_report=report if completed else None,
        created_at=T0,
        updated_at=T0,
    )


def test_format_duration():
    assert format_duration(3725) == "1h 2m 5s"
    assert format_duration(65) == "1m 5s"
    assert format_duration(5) == "5s"
    assert format_duration(-3) == "0s"


def test_export_flattens_session():
    export = build_export(_session(), T0 + timedelta(days=1))
    assert export["interview_id"] == "abc123"
    assert export["role"] == "Site Reliability Engineer"
    assert export["total_time_seconds"] == 3725
    assert export["total_time_formatted"] == "1h 2m 5s"
    assert export["total_questions"] == 1
    assert export["planned_questions"] == 3
    assert export["overall_score"] == 8
    assert export["questions"][0]["evaluation"]["overall_score"] == 7.5
    assert export["questions"][0]["feedback"]["ideal_answer"] == "Use STAR"
    assert export["bookmarks"][0]["note"] == "revisit"
    assert export["date"] == T0.isoformat()


def test_export_of_running_session_uses_clock():
    export = build_export(_session(completed=False), T0 + timedelta(seconds=200))
    assert export["completed_at"] is None
    assert export["total_time_seconds"] == 140
    assert export["report"] is None
    assert export["overall_score"] is None


def test_pdf_renders_completed_and_running_sessions():
    for completed in (True, False):
        payload = generate_session_pdf(build_export(_session(completed=completed), T0 + timedelta(hours=2)))
        assert isinstance(payload, bytes)
        assert payload.startswith(b"%PDF")
