from datetime import datetime, timedelta

import pytest

from conftest import T0, FakeEvaluator
from interview_flow import evaluation as evaluation_module
from interview_flow.errors import InvalidEvaluationShape, NoActiveQuestion
from interview_flow.evaluation import (
    AUTO_FAIL_REASON,
    AUTO_FAIL_WEAKNESSES,
    auto_fail_evaluation,
    count_tokens,
    evaluate_answer,
    time_spent_seconds,
)
from interview_flow.models import (
    EvaluationRubric,
    InterviewSession,
    NoPendingQuestion,
    PendingQuestion,
    QuestionBlock,
    RoleBlock,
)


def _session(*, pending: bool = True, rubric: EvaluationRubric = EvaluationRubric()) -> InterviewSession:
    block = RoleBlock(
        role_name="Backend Engineer",
        skills=["recursion"],
        evaluation_rubric=rubric,
        categories=["technical"],
        total_questions=3,
    )
    question = QuestionBlock(question="Explain recursion.", skill="recursion", difficulty="medium", category="technical")
    state = PendingQuestion(question=question, question_number=1, issued_at=T0) if pending else NoPendingQuestion()
    return InterviewSession(
        session_id="s1",
        role_block=block,
        pending=state,
        type_targets={"technical": 3},
        asked_type_count={"technical": 1},
        started_at=T0,
        created_at=T0,
        updated_at=T0,
    )


def test_count_tokens_ignores_whitespace_runs():
    assert count_tokens("  one   two\tthree\n") == 3
    assert count_tokens("") == 0


def test_short_answer_auto_fails_without_calling_evaluator(monkeypatch):
    events = []
    monkeypatch.setattr(evaluation_module, "log_event", lambda kind, session_id, **fields: events.append((kind, fields)))
    evaluator = FakeEvaluator()
    turn = evaluate_answer(_session(), "I think recursion", None, None, evaluator=evaluator, now=T0 + timedelta(seconds=30))

    assert evaluator.calls == 0
    assert turn.evaluation.overall_score == 0
    assert turn.evaluation.scores.model_dump() == {"correctness": 0, "clarity": 0, "depth": 0, "relevance": 0}
    assert turn.evaluation.weaknesses == list(AUTO_FAIL_WEAKNESSES)
    assert turn.evaluation.needs_followup is True
    assert turn.evaluation.followup_reason == AUTO_FAIL_REASON
    assert "3 word(s)" in turn.evaluation.notes
    assert events[0][0] == "auto_fail"
    assert turn.session.memory.weak_skills == ["recursion"]
    assert turn.session.memory.last_score == 0


def test_whitespace_answer_auto_fails():
    turn = evaluate_answer(_session(), "   \n\t ", None, None, evaluator=FakeEvaluator(), now=T0)
    assert turn.evaluation.overall_score == 0
    assert turn.entry.answer_text == ""
    assert "0 word(s)" in turn.evaluation.notes


def test_five_token_answer_reaches_evaluator():
    evaluator = FakeEvaluator(overall=6.5)
    turn = evaluate_answer(_session(), "a function that calls itself", None, None, evaluator=evaluator, now=T0)
    assert evaluator.calls == 1
    assert turn.evaluation.overall_score == 6.5


def test_min_tokens_is_configurable():
    evaluator = FakeEvaluator()
    turn = evaluate_answer(_session(), "one two", None, None, evaluator=evaluator, now=T0, min_tokens=2)
    assert evaluator.calls == 1
    assert turn.evaluation.overall_score == 7.0


def test_scores_are_clamped_to_rubric_bounds():
    evaluator = FakeEvaluator()
    evaluator.payload = {
        "scores": {"correctness": 12, "clarity": -1, "depth": "3", "relevance": 4},
        "overall_score": 14,
        "weaknesses": [],
        "notes": "",
        "needs_followup": False,
    }
    rubric = EvaluationRubric(correctness=10, clarity=5, depth=5, relevance=5)
    turn = evaluate_answer(_session(rubric=rubric), "a long enough answer here", None, None, evaluator=evaluator, now=T0)
    assert turn.evaluation.scores.correctness == 10
    assert turn.evaluation.scores.clarity == 0
    assert turn.evaluation.scores.depth == 3
    assert turn.evaluation.overall_score == 10


def test_malformed_evaluation_raises_and_leaves_session_untouched():
    session = _session()
    snapshot = session.model_dump()
    evaluator = FakeEvaluator()
    evaluator.payload = {"scores": {"correctness": 3}, "overall_score": 5}
    with pytest.raises(InvalidEvaluationShape):
        evaluate_answer(session, "a long enough answer here", None, None, evaluator=evaluator, now=T0)
    assert session.model_dump() == snapshot


def test_no_pending_question_rejected():
    with pytest.raises(NoActiveQuestion):
        evaluate_answer(_session(pending=False), "some words in an answer", None, None, evaluator=FakeEvaluator(), now=T0)


def test_turn_builds_entry_and_advances_session():
    session = _session()
    started = T0 + timedelta(seconds=10)
    submitted = T0 + timedelta(seconds=95, milliseconds=700)
    turn = evaluate_answer(
        session,
        "  recursion is a function calling itself  ",
        "https://cdn.example.com/a.webm",
        started,
        evaluator=FakeEvaluator(),
        now=submitted,
    )

    assert turn.entry.question_number == 1
    assert turn.entry.answer_text == "recursion is a function calling itself"
    assert turn.entry.answer_audio_url == "https://cdn.example.com/a.webm"
    assert turn.entry.time_spent_seconds == 85
    assert turn.session.current_question_number == 1
    assert isinstance(turn.session.pending, NoPendingQuestion)
    assert turn.session.qa_history == [turn.entry]
    assert turn.session.memory.question_count == 1
    assert isinstance(session.pending, PendingQuestion)
    assert session.qa_history == []


def test_missing_start_time_defaults_to_submission():
    turn = evaluate_answer(_session(), "a long enough answer here", None, None, evaluator=FakeEvaluator(), now=T0)
    assert turn.entry.question_started_at == T0
    assert turn.entry.time_spent_seconds == 0


def test_offset_less_start_time_is_read_as_utc():
    started = datetime(2025, 1, 6, 8, 59, 0)
    turn = evaluate_answer(_session(), "a long enough answer here", None, started, evaluator=FakeEvaluator(), now=T0)
    assert turn.entry.time_spent_seconds == 60
    assert turn.entry.question_started_at.utcoffset() == timedelta(0)


def test_time_spent_never_negative():
    assert time_spent_seconds(T0 + timedelta(seconds=5), T0) == 0
    assert time_spent_seconds(T0, T0 + timedelta(seconds=59.9)) == 59


def test_auto_fail_evaluation_is_deterministic():
    assert auto_fail_evaluation(2) == auto_fail_evaluation(2)
