"""FastAPI routes for interview sessions and reusable roles."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.concurrency import run_in_threadpool

from api.dependencies import ApiServices, get_services
from api.schemas import (
    AnswerReq,
    BookmarkList,
    BookmarkReq,
    FeedbackReq,
    PauseReq,
    PauseResp,
    QuestionResp,
    RoleCreateReq,
    RoleGenerateReq,
    RoleGenerateResp,
    RoleVisibilityReq,
    SessionSummary,
    StartReq,
    StartResp,
    TranscriptionResp,
    UnbookmarkResp,
)
from interview_flow import (
    Bookmark,
    EvaluationBlock,
    ExternalServiceFailure,
    FeedbackBlock,
    FinalReportBlock,
    InputValidationError,
    InterviewComplete,
    InterviewSession,
)
from session_reports import generate_session_pdf
from storage import RoleRecord


interviews_router = APIRouter(prefix="/api/interviews")
roles_router = APIRouter(prefix="/api/roles")


def _summary(session: InterviewSession) -> SessionSummary:
    return SessionSummary(
        session_id=session.session_id,
        user_id=session.user_id,
        role_name=session.role_block.role_name,
        status=session.status,
        questions_answered=session.current_question_number,
        total_questions=session.role_block.total_questions,
        overall_performance=session.final_report.overall_performance if session.final_report else None,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


def _safe_slug(value: str) -> str:  # Filesystem-friendly fragment for download names
    return re.sub(r"[^A-Za-z0-9]+", "-", value).strip("-").lower()


@interviews_router.post("/start", response_model=StartResp, status_code=201)
def start(req: StartReq, services: ApiServices = Depends(get_services)) -> StartResp:
    if (req.role_block is None) == (req.role_id is None):
        raise InputValidationError("Provide exactly one of role_block or role_id", details={"fields": ["role_block", "role_id"]})
    if req.role_id is not None:
        role = services.roles.get(req.role_id)
        session_id = services.orchestrator.start_interview(role.role_block, user_id=req.user_id)
        services.roles.mark_used(req.role_id)
    else:
        session_id = services.orchestrator.start_interview(req.role_block, user_id=req.user_id)
    session = services.orchestrator.get_session(session_id)
    return StartResp(
        session_id=session_id,
        status=session.status,
        total_questions=session.role_block.total_questions,
        type_targets=session.type_targets,
    )


@interviews_router.get("", response_model=List[SessionSummary])
def list_interviews(
    user_id: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=200),
    services: ApiServices = Depends(get_services),
) -> List[SessionSummary]:
    return [_summary(item) for item in services.orchestrator.list_sessions(user_id, limit=limit)]


@interviews_router.post("/transcribe", response_model=TranscriptionResp)
async def transcribe_audio(request: Request, services: ApiServices = Depends(get_services)) -> TranscriptionResp:
    if services.transcriber is None:
        raise ExternalServiceFailure("Audio transcription is not configured")
    audio = await request.body()
    content_type = request.headers.get("content-type", "")
    text = await run_in_threadpool(services.transcriber.transcribe, audio, content_type=content_type)
    return TranscriptionResp(text=text)


@interviews_router.get("/{session_id}")
def get_interview(session_id: str, services: ApiServices = Depends(get_services)) -> Dict[str, Any]:
    return services.orchestrator.get_session(session_id).model_dump(mode="json")


@interviews_router.post("/{session_id}/question", response_model=QuestionResp)
def next_question(session_id: str, services: ApiServices = Depends(get_services)) -> QuestionResp:
    issued = services.orchestrator.issue_question(session_id)
    if isinstance(issued, InterviewComplete):
        return QuestionResp(
            session_id=session_id,
            complete=True,
            questions_answered=issued.questions_answered,
            total_questions=issued.total_questions,
        )
    total_questions = services.orchestrator.get_session(session_id).role_block.total_questions
    return QuestionResp(
        session_id=session_id,
        complete=False,
        question_number=issued.question_number,
        question=issued.question,
        questions_answered=issued.question_number - 1,
        total_questions=total_questions,
    )


@interviews_router.post("/{session_id}/answer", response_model=EvaluationBlock)
def submit_answer(session_id: str, req: AnswerReq, services: ApiServices = Depends(get_services)) -> EvaluationBlock:
    return services.orchestrator.submit_answer(
        session_id,
        req.answer_text,
        audio_url=req.audio_url,
        question_started_at=req.question_started_at,
    )


@interviews_router.post("/{session_id}/feedback", response_model=FeedbackBlock)
def request_feedback(session_id: str, req: FeedbackReq, services: ApiServices = Depends(get_services)) -> FeedbackBlock:
    return services.orchestrator.request_feedback(session_id, req.question_number)


@interviews_router.post("/{session_id}/pause", response_model=PauseResp)
def pause_or_resume(session_id: str, req: PauseReq, services: ApiServices = Depends(get_services)) -> PauseResp:
    if req.action == "pause":
        session = services.orchestrator.pause(session_id)
    else:
        session = services.orchestrator.resume(session_id)
    return PauseResp(
        session_id=session_id,
        status=session.status,
        paused_at=session.paused_at,
        pause_count=session.pause_count,
        pause_duration_seconds=session.pause_duration_seconds,
    )


@interviews_router.post("/{session_id}/report", response_model=FinalReportBlock)
def finalize_report(session_id: str, services: ApiServices = Depends(get_services)) -> FinalReportBlock:
    return services.orchestrator.finalize_report(session_id)


@interviews_router.get("/{session_id}/bookmarks", response_model=BookmarkList)
def list_bookmarks(session_id: str, services: ApiServices = Depends(get_services)) -> BookmarkList:
    return BookmarkList(bookmarks=services.orchestrator.get_session(session_id).bookmarks)


@interviews_router.post("/{session_id}/bookmarks", response_model=Bookmark)
def add_bookmark(session_id: str, req: BookmarkReq, services: ApiServices = Depends(get_services)) -> Bookmark:
    return services.orchestrator.bookmark(session_id, req.question_number, note=req.note)


@interviews_router.delete("/{session_id}/bookmarks/{question_number}", response_model=UnbookmarkResp)
def remove_bookmark(session_id: str, question_number: int, services: ApiServices = Depends(get_services)) -> UnbookmarkResp:
    return UnbookmarkResp(removed=services.orchestrator.unbookmark(session_id, question_number))


@interviews_router.get("/{session_id}/export")
def export_interview(session_id: str, services: ApiServices = Depends(get_services)) -> Dict[str, Any]:
    return services.orchestrator.export_session(session_id)


@interviews_router.get("/{session_id}/export.pdf")
def export_interview_pdf(session_id: str, services: ApiServices = Depends(get_services)) -> Response:
    export = services.orchestrator.export_session(session_id)
    payload = generate_session_pdf(export)
    filename = f"interview-{session_id}-{_safe_slug(export['role']) or 'report'}.pdf"
    headers = {"Content-Disposition": f"attachment; filename=\"{filename}\""}
    return Response(content=payload, media_type="application/pdf", headers=headers)


@roles_router.post("", response_model=RoleRecord, status_code=201)
def create_role(req: RoleCreateReq, services: ApiServices = Depends(get_services)) -> RoleRecord:
    return services.roles.create(
        title=req.title,
        description=req.description,
        role_block=req.role_block,
        creator_id=req.user_id,
        visibility=req.visibility,
    )


@roles_router.get("", response_model=List[RoleRecord])
def list_roles(
    view: Optional[str] = Query(default=None, pattern="^(my|popular|recent)$"),
    user_id: Optional[str] = None,
    search: Optional[str] = None,
    services: ApiServices = Depends(get_services),
) -> List[RoleRecord]:
    return services.roles.list_roles(view=view, user_id=user_id, search=search)


@roles_router.post("/generate", response_model=RoleGenerateResp)
def generate_role(req: RoleGenerateReq, services: ApiServices = Depends(get_services)) -> RoleGenerateResp:
    if services.role_agent is None:
        raise ExternalServiceFailure("Role generation is not configured")
    block = services.role_agent.generate(
        role_text=req.role,
        experience_level=req.experience_level,
        categories=req.interview_types,
        total_questions=req.question_count or services.interview.default_total_questions,
        custom_category=req.custom_type,
        resume_text=req.resume_text,
    )
    return RoleGenerateResp(role_block=block)


@roles_router.get("/{role_id}", response_model=RoleRecord)
def get_role(role_id: str, services: ApiServices = Depends(get_services)) -> RoleRecord:
    return services.roles.get(role_id)


@roles_router.patch("/{role_id}", response_model=RoleRecord)
def update_role_visibility(role_id: str, req: RoleVisibilityReq, services: ApiServices = Depends(get_services)) -> RoleRecord:
    return services.roles.update_visibility(role_id, visibility=req.visibility, user_id=req.user_id)


@roles_router.delete("/{role_id}", status_code=204)
def delete_role(role_id: str, user_id: str, services: ApiServices = Depends(get_services)) -> Response:
    services.roles.delete(role_id, user_id=user_id)
    return Response(status_code=204)


@roles_router.post("/{role_id}/use", response_model=RoleRecord)
def use_role(role_id: str, services: ApiServices = Depends(get_services)) -> RoleRecord:
    return services.roles.mark_used(role_id)


__all__ = ["interviews_router", "roles_router"]
