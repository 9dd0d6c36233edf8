from __future__ import annotations  # LLM request gateway module

import json
import logging
import os
import re
import threading
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, TypeVar

import httpx
from langchain_core.messages import BaseMessage
from langchain_core.runnables import RunnableLambda
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


_MODEL_LOCKS: Dict[str, threading.Lock] = {}
_MODEL_LOCKS_GUARD = threading.Lock()

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, **kwargs: Any) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _MODEL_LOCKS_GUARD:
        lock = _MODEL_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _MODEL_LOCKS[key] = lock
    return lock


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Invoke configured LLM route and validate output
    return chat(
        [{"role": "user", "content": task}],
        schema,
        cfg=cfg,
        client=client,
        options=options,
    )


def chat(
    messages: Sequence[Dict[str, str]],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:
    def _execute() -> T:
        input_messages = _normalize_messages(messages)
        base_messages: list[Dict[str, str]] = []
        if cfg.enforce_json:
            schema_json = json.dumps(schema.model_json_schema(), indent=2)
            system_prompt = "Reply with a single JSON object matching this schema:\n" + schema_json
            base_messages.append({"role": "system", "content": system_prompt})
        base_messages.extend(input_messages)
        attempts = cfg.max_retries + 1
        last_error: Optional[Exception] = None
        last_error_text: Optional[str] = None
        preview = _preview(input_messages)
        if len(preview) > 120:
            preview = preview[:117] + "..."
        logger.info(
            "LLM request start route=%s model=%s attempts=%d preview=%s",
            cfg.name,
            cfg.model,
            attempts,
            preview,
        )
        for attempt in range(attempts):
            attempt_messages = list(base_messages)
            if attempt > 0:
                attempt_messages.append(
                    {
                        "role": "system",
                        "content": _retry_hint(last_error_text, cfg.enforce_json),
                    }
                )
            payload: Dict[str, Any] = {"model": cfg.model, "messages": attempt_messages}
            if cfg.temperature is not None:
                payload["temperature"] = cfg.temperature
            if options:
                payload.update(options)
            if cfg.response_format:
                payload["response_format"] = {"type": cfg.response_format}
            headers = {"Content-Type": "application/json", **_route_headers(cfg)}
            data = _post_json(cfg, {"json": payload, "headers": headers}, client, label="LLM")
            content = _extract_content(data)
            try:
                parsed = _validate(schema, content)
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("LLM output validation failed route=%s attempt=%d: %s", cfg.name, attempt + 1, exc)
                last_error = exc
                last_error_text = str(exc)
                continue
            logger.info(
                "LLM request done route=%s model=%s attempt=%d",
                cfg.name,
                cfg.model,
                attempt + 1,
            )
            return parsed
        raise LlmGatewayError("LLM output validation failed") from last_error

    if cfg.sequential:
        with _lock_for(cfg):
            return _execute()
    return _execute()


def runnable(route: LlmRoute, schema: Type[T]) -> RunnableLambda:  # Provide runnable interface for LangChain pipelines
    def _invoke(payload: Any) -> T:
        messages = _coerce_messages(payload)
        return chat(messages, schema, cfg=route)

    return RunnableLambda(_invoke)


def transcribe(
    audio: bytes,
    *,
    filename: str,
    content_type: str,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    language: Optional[str] = "en",
) -> str:  # Send audio to an OpenAI-compatible transcription endpoint
    form: Dict[str, str] = {"model": cfg.model, "response_format": "json", "temperature": "0"}
    if language:
        form["language"] = language
    logger.info(
        "Transcription request route=%s model=%s bytes=%d type=%s",
        cfg.name,
        cfg.model,
        len(audio),
        content_type,
    )
    request = {
        "data": form,
        "files": {"file": (filename, audio, content_type)},
        "headers": _route_headers(cfg),
    }
    data = _post_json(cfg, request, client, label="Transcription")
    text = data.get("text") if isinstance(data, dict) else None
    if not isinstance(text, str):
        raise LlmGatewayError("Transcription response missing text")
    return text.strip()


def _route_headers(cfg: LlmRoute) -> Dict[str, str]:  # Route extra headers plus a bearer token from the env var
    headers = dict(cfg.extra_headers)
    api_key = os.getenv(cfg.api_key_env) if cfg.api_key_env else None
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _post_json(cfg: LlmRoute, request: Dict[str, Any], client: Optional[HttpClient], *, label: str) -> Any:
    """POST to the route endpoint and return the decoded JSON body.

    Transport errors, HTTP error statuses and non-JSON bodies all surface as
    ``LlmGatewayError``; the underlying client is closed either way.
    """

    try:
        response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", request, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.error("%s transport failure route=%s: %s", label, cfg.name, exc)
        raise LlmGatewayError(f"{label} transport failed") from exc
    try:
        if response.status_code >= 400:
            logger.error("%s error status route=%s status=%s", label, cfg.name, response.status_code)
            raise LlmGatewayError(f"{label} returned status {response.status_code}")
        try:
            return response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("Invalid JSON payload route=%s: %s", cfg.name, exc)
            raise LlmGatewayError(f"{label} payload was not JSON") from exc
    finally:
        _close_safely(close_cb)


def _post(url: str, request: Dict[str, Any], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        response = client.post(url, timeout=timeout, **request)
        return response, None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, **request)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = str(item.get("content", ""))
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in reversed(messages):
        text = message.get("content", "").strip()
        if text:
            return text.splitlines()[0]
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    return schema.model_validate_json(_strip_code_fences(content))


def _strip_code_fences(content: str) -> str:  # Pull the JSON body out of markdown fences
    text = content.strip()
    match = _FENCED_JSON.search(text)
    if match:
        return match.group(1).strip()
    return text


def _retry_hint(error_text: Optional[str], enforce_json: bool) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    if enforce_json:
        return base + " Return a single JSON object that matches the schema."
    return base + " Follow the requested format precisely."


def _coerce_messages(payload: Any) -> Sequence[Dict[str, str]]:  # Convert LangChain payloads into dict messages
    if hasattr(payload, "to_messages"):
        payload = payload.to_messages()
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, BaseMessage):
        return [_message_dict(payload)]
    if isinstance(payload, (list, tuple)):
        if all(isinstance(item, dict) for item in payload):
            return list(payload)  # type: ignore[return-value]
        if all(isinstance(item, BaseMessage) for item in payload):
            return [_message_dict(item) for item in payload]
    raise TypeError("Unsupported message payload for LLM runnable")


def _message_dict(message: BaseMessage) -> Dict[str, str]:  # Map LangChain BaseMessage to role/content dict
    role = message.type
    if role == "human":
        role = "user"
    elif role == "ai":
        role = "assistant"
    content = message.content
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"role": role, "content": content}
