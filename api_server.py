from __future__ import annotations  # FastAPI server exposing the interview orchestrator

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import ApiServices
from api.routes import interviews_router, roles_router
from config import AppConfig, load_config, resolve_route
from config.settings import settings
from interview_flow import InterviewError, InterviewOrchestrator
from interview_flow.agents import build_agents
from speech import TRANSCRIBER_KEY, AudioTranscriber
from storage import RoleStore, SessionStore


logger = logging.getLogger(__name__)


def build_services(cfg: AppConfig, *, db_path: Optional[str] = None) -> ApiServices:  # Wire stores, agents and orchestrator
    agents = build_agents(cfg)
    orchestrator = InterviewOrchestrator(
        SessionStore(db_path),
        agents.question,
        agents.evaluator,
        agents.feedback,
        agents.report,
        settings=settings,
        interview=cfg.interview,
    )
    transcriber = None
    if TRANSCRIBER_KEY in cfg.registry:
        transcriber = AudioTranscriber(resolve_route(cfg, TRANSCRIBER_KEY), max_bytes=settings.MAX_AUDIO_BYTES)
    else:
        logger.warning("No route registered for %s; audio transcription disabled", TRANSCRIBER_KEY)
    return ApiServices(
        orchestrator=orchestrator,
        roles=RoleStore(db_path),
        role_agent=agents.role,
        transcriber=transcriber,
        interview=cfg.interview,
    )


def create_app(services: Optional[ApiServices] = None) -> FastAPI:
    """Build the FastAPI application; run with ``uvicorn api_server:create_app --factory``."""

    if services is None:
        services = build_services(load_config(Path(settings.APP_CONFIG_PATH)))

    app = FastAPI(title="Mock Interview API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.services = services
    app.include_router(interviews_router)
    app.include_router(roles_router)

    @app.exception_handler(InterviewError)
    async def _interview_error(request: Request, exc: InterviewError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s (%s)", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
        return JSONResponse(
            status_code=422,
            content={"error": "validation_error", "message": "Request validation failed", "details": {"errors": errors}},
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error during %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Internal server error", "details": {}},
        )

    return app


__all__ = ["build_services", "create_app"]
