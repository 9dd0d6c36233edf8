"""Pydantic schemas for the interview and role API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from interview_flow.models import Bookmark, QuestionBlock, RoleBlock, SessionStatus


class StartReq(BaseModel):
    role_block: Optional[Dict[str, Any]] = None
    role_id: Optional[str] = None
    user_id: Optional[str] = None


class StartResp(BaseModel):
    session_id: str
    status: SessionStatus
    total_questions: int
    type_targets: Dict[str, int]


class QuestionResp(BaseModel):
    session_id: str
    complete: bool
    question_number: Optional[int] = None
    question: Optional[QuestionBlock] = None
    questions_answered: int
    total_questions: int


class AnswerReq(BaseModel):
    answer_text: str
    audio_url: Optional[str] = None
    question_started_at: Optional[datetime] = None


class FeedbackReq(BaseModel):
    question_number: int = Field(ge=1)


class PauseReq(BaseModel):
    action: Literal["pause", "resume"]


class PauseResp(BaseModel):
    session_id: str
    status: SessionStatus
    paused_at: Optional[datetime] = None
    pause_count: int
    pause_duration_seconds: int


class BookmarkReq(BaseModel):
    question_number: int = Field(ge=1)
    note: Optional[str] = None


class UnbookmarkResp(BaseModel):
    removed: bool


class BookmarkList(BaseModel):
    bookmarks: List[Bookmark] = Field(default_factory=list)


class SessionSummary(BaseModel):
    session_id: str
    user_id: Optional[str] = None
    role_name: str
    status: SessionStatus
    questions_answered: int
    total_questions: int
    overall_performance: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TranscriptionResp(BaseModel):
    text: str


class RoleCreateReq(BaseModel):
    title: str
    description: str = ""
    role_block: RoleBlock
    user_id: str
    visibility: Literal["public", "private"] = "public"


class RoleVisibilityReq(BaseModel):
    visibility: Literal["public", "private"]
    user_id: str


class RoleGenerateReq(BaseModel):
    role: str
    experience_level: str
    interview_types: List[str] = Field(default_factory=lambda: ["technical"])
    question_count: Optional[int] = Field(default=None, ge=1, le=50)
    custom_type: Optional[str] = None
    resume_text: Optional[str] = None


class RoleGenerateResp(BaseModel):
    role_block: RoleBlock


__all__ = [
    "AnswerReq",
    "BookmarkList",
    "BookmarkReq",
    "FeedbackReq",
    "PauseReq",
    "PauseResp",
    "QuestionResp",
    "RoleCreateReq",
    "RoleGenerateReq",
    "RoleGenerateResp",
    "RoleVisibilityReq",
    "SessionSummary",
    "StartReq",
    "StartResp",
    "TranscriptionResp",
    "UnbookmarkResp",
]
