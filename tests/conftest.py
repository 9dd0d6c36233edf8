import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

from config.settings import settings
from interview_flow import InterviewOrchestrator, RoleBlock
from storage.migrate import migrate
from storage.sessions import SessionStore


T0 = datetime(2025, 1, 6, 9, 0, 0, tzinfo=timezone.utc)


class Clock:  # Manually advanced clock
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class FakeQuestionGenerator:
    def __init__(self) -> None:
        self.calls = []
        self.payload = None
        self.category_override = None
        self.error = None

    def generate(self, role_block, memory, last_qa, required_category, question_index):
        self.calls.append(
            {
                "category": required_category,
                "index": question_index,
                "difficulty": memory.difficulty,
                "last_qa": last_qa,
            }
        )
        if self.error is not None:
            raise self.error
        if self.payload is not None:
            return self.payload
        skill = role_block.skills[(question_index - 1) % len(role_block.skills)] if role_block.skills else "general"
        return {
            "intro": "Let's continue.",
            "question": f"Question {question_index}: explain {skill}?",
            "skill": skill,
            "difficulty": memory.difficulty,
            "category": self.category_override or required_category,
        }


class FakeEvaluator:
    def __init__(self, overall: float = 7.0) -> None:
        self.calls = 0
        self.overall = overall
        self.queue = []
        self.payload = None
        self.error = None

    def evaluate(self, question, rubric, answer_text):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.payload is not None:
            return self.payload
        overall = self.queue.pop(0) if self.queue else self.overall
        return {
            "scores": {"correctness": 4, "clarity": 4, "depth": 3, "relevance": 4},
            "overall_score": overall,
            "weaknesses": ["Could go deeper"],
            "notes": f"Scored {overall}",
            "needs_followup": False,
            "followup_reason": None,
        }


class FakeFeedback:
    def __init__(self) -> None:
        self.calls = 0
        self.error = None

    def generate(self, question, answer_text, evaluation):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return {
            "ideal_answer": f"An ideal answer about {question.skill}.",
            "mistakes": ["Skipped trade-offs"],
            "improvement_tips": ["Give a concrete example"],
        }


class FakeNarrator:
    def __init__(self) -> None:
        self.calls = []
        self.payload = None

    def generate(self, role_block, statistics, skill_averages, notes):
        self.calls.append({"statistics": dict(statistics), "skill_averages": dict(skill_averages), "notes": list(notes)})
        if self.payload is not None:
            return self.payload
        return {
            "summary": "Solid fundamentals with room to grow.",
            "strengths": ["Clear communication"],
            "weak_areas": ["System design depth"],
            "recommendations": ["Practice design interviews"],
            "skill_scores": {"bogus": 1},
            "overall_performance": 1,
        }


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def role_block():
    return RoleBlock(
        role_name="Backend Engineer",
        skills=["recursion", "databases", "apis"],
        difficulty="medium",
        categories=["technical", "behavioral"],
        total_questions=5,
    )


@pytest.fixture
def collaborators():
    return {
        "question_generator": FakeQuestionGenerator(),
        "answer_evaluator": FakeEvaluator(),
        "feedback_generator": FakeFeedback(),
        "report_narrator": FakeNarrator(),
    }


@pytest.fixture
def orchestrator(tmp_db, collaborators, clock):
    return InterviewOrchestrator(SessionStore(tmp_db), settings=settings, now=clock, **collaborators)
