from __future__ import annotations  # Agent exports and registry wiring for the interview flow

from typing import NamedTuple

from config import AppConfig, resolve_registry

from .evaluator_agent import EVALUATOR_AGENT_KEY, EVALUATOR_GUIDANCE, EvaluationPlan, EvaluatorAgent
from .feedback_agent import FEEDBACK_AGENT_KEY, FEEDBACK_GUIDANCE, FeedbackAgent, FeedbackPlan
from .question_agent import QUESTION_AGENT_KEY, QUESTION_GUIDANCE, QuestionAgent, QuestionPlan
from .report_agent import REPORT_AGENT_KEY, REPORT_GUIDANCE, ReportAgent, ReportPlan
from .role_agent import ROLE_AGENT_KEY, ROLE_GUIDANCE, RoleAgent, RolePlan

AGENT_SCHEMAS = {  # Registry key to response schema for every LLM-backed collaborator
    QUESTION_AGENT_KEY: QuestionPlan,
    EVALUATOR_AGENT_KEY: EvaluationPlan,
    FEEDBACK_AGENT_KEY: FeedbackPlan,
    REPORT_AGENT_KEY: ReportPlan,
    ROLE_AGENT_KEY: RolePlan,
}


class InterviewAgents(NamedTuple):  # Collaborators ready to hand to the orchestrator
    question: QuestionAgent
    evaluator: EvaluatorAgent
    feedback: FeedbackAgent
    report: ReportAgent
    role: RoleAgent


def build_agents(cfg: AppConfig) -> InterviewAgents:  # Resolve every agent route from the app config
    registry = resolve_registry(cfg, AGENT_SCHEMAS)
    return InterviewAgents(
        question=QuestionAgent(*registry[QUESTION_AGENT_KEY]),
        evaluator=EvaluatorAgent(*registry[EVALUATOR_AGENT_KEY]),
        feedback=FeedbackAgent(*registry[FEEDBACK_AGENT_KEY]),
        report=ReportAgent(*registry[REPORT_AGENT_KEY]),
        role=RoleAgent(*registry[ROLE_AGENT_KEY]),
    )


__all__ = [
    "AGENT_SCHEMAS",
    "EVALUATOR_AGENT_KEY",
    "EVALUATOR_GUIDANCE",
    "EvaluationPlan",
    "EvaluatorAgent",
    "FEEDBACK_AGENT_KEY",
    "FEEDBACK_GUIDANCE",
    "FeedbackAgent",
    "FeedbackPlan",
    "InterviewAgents",
    "QUESTION_AGENT_KEY",
    "QUESTION_GUIDANCE",
    "QuestionAgent",
    "QuestionPlan",
    "REPORT_AGENT_KEY",
    "REPORT_GUIDANCE",
    "ROLE_AGENT_KEY",
    "ROLE_GUIDANCE",
    "ReportAgent",
    "ReportPlan",
    "RoleAgent",
    "RolePlan",
    "build_agents",
]
