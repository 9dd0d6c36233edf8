from interview_flow.memory import initialize_memory, next_difficulty, summarize_answer, update_memory
from interview_flow.models import EvaluationBlock, EvaluationScores, MemorySummary, QuestionBlock


def _evaluation(score: float, *, followup: bool = False) -> EvaluationBlock:
    return EvaluationBlock(
        scores=EvaluationScores(correctness=1, clarity=1, depth=1, relevance=1),
        overall_score=score,
        needs_followup=followup,
        followup_reason="gap" if followup else None,
    )


def _question(skill: str = "recursion") -> QuestionBlock:
    return QuestionBlock(question="What is recursion?", skill=skill, difficulty="medium", category="technical")


def test_initial_memory_defaults():
    memory = initialize_memory()
    assert memory.question_count == 0
    assert memory.weak_skills == []
    assert memory.strong_skills == []
    assert memory.difficulty == "medium"
    assert memory.prev_answer_summary == ""
    assert memory.needs_followup is False


def test_high_score_moves_skill_to_strong():
    current = MemorySummary(weak_skills=["recursion"])
    updated = update_memory(current, _evaluation(8), _question(), "answer text")
    assert updated.strong_skills == ["recursion"]
    assert updated.weak_skills == []
    assert updated.question_count == 1
    assert updated.last_score == 8


def test_low_score_moves_skill_to_weak():
    current = MemorySummary(strong_skills=["recursion", "apis"])
    updated = update_memory(current, _evaluation(4.9), _question(), "answer")
    assert updated.weak_skills == ["recursion"]
    assert updated.strong_skills == ["apis"]


def test_mid_score_leaves_sets_unchanged():
    current = MemorySummary(strong_skills=["recursion"], weak_skills=["apis"])
    updated = update_memory(current, _evaluation(6), _question("apis"), "answer")
    assert updated.strong_skills == ["recursion"]
    assert updated.weak_skills == ["apis"]


def test_skill_not_duplicated():
    current = MemorySummary(strong_skills=["recursion"])
    updated = update_memory(current, _evaluation(9.5), _question(), "answer")
    assert updated.strong_skills == ["recursion"]


def test_difficulty_escalates_one_tier_at_a_time():
    memory = MemorySummary(difficulty="easy")
    memory = update_memory(memory, _evaluation(9), _question(), "a")
    assert memory.difficulty == "medium"
    memory = update_memory(memory, _evaluation(9), _question(), "a")
    assert memory.difficulty == "hard"
    memory = update_memory(memory, _evaluation(9), _question(), "a")
    assert memory.difficulty == "hard"


def test_difficulty_deescalates_below_four():
    assert next_difficulty("hard", 3.9) == "medium"
    assert next_difficulty("medium", 0) == "easy"
    assert next_difficulty("easy", 0) == "easy"
    assert next_difficulty("medium", 4) == "medium"
    assert next_difficulty("medium", 8.99) == "medium"


def test_answer_summary_truncates_after_thirty_tokens():
    words = [f"w{i}" for i in range(31)]
    summary = summarize_answer("  ".join(words))
    assert summary == " ".join(words[:30]) + "..."
    exact = " ".join(words[:30])
    assert summarize_answer(exact) == exact


def test_followup_flag_copied():
    updated = update_memory(initialize_memory(), _evaluation(2, followup=True), _question(), "short")
    assert updated.needs_followup is True


def test_update_is_pure():
    current = MemorySummary(strong_skills=["apis"], weak_skills=["recursion"], difficulty="medium")
    snapshot = current.model_dump()
    first = update_memory(current, _evaluation(9), _question(), "one two three")
    second = update_memory(current, _evaluation(9), _question(), "one two three")
    assert first == second
    assert current.model_dump() == snapshot
