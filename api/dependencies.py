from __future__ import annotations  # Service bundle shared by API routes

from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request

from config import InterviewSettings
from interview_flow import InterviewOrchestrator
from interview_flow.agents import RoleAgent
from speech import AudioTranscriber
from storage import RoleStore


@dataclass
class ApiServices:  # Collaborators wired once per application
    orchestrator: InterviewOrchestrator
    roles: RoleStore
    role_agent: Optional[RoleAgent] = None
    transcriber: Optional[AudioTranscriber] = None
    interview: InterviewSettings = field(default_factory=InterviewSettings)


def get_services(request: Request) -> ApiServices:
    return request.app.state.services


__all__ = ["ApiServices", "get_services"]
