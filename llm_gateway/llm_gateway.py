from __future__ import annotations  # Blocking LLM request gateway

import json
import logging
import os
import threading
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)


_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Transport, status, or output failure
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        lock = _ROUTE_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _ROUTE_LOCKS[key] = lock
    return lock


def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Single-prompt call validated against ``schema``
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
        base_messages: list[Dict[str, str]] = []
        if cfg.enforce_json:
            schema_json = json.dumps(schema.model_json_schema(), indent=2)
            base_messages.append(
                {"role": "system", "content": "Reply with JSON matching this schema:\n" + schema_json}
            )
        base_messages.extend(_normalize_messages(messages))
        attempts = cfg.max_retries + 1
        last_error: Optional[Exception] = None
        last_error_text: Optional[str] = None
        preview = _preview(base_messages)
        logger.info(
            "LLM request start route=%s model=%s schema=%s attempts=%d preview=%s",
            cfg.name,
            cfg.model,
            schema.__name__,
            attempts,
            preview,
        )
        for attempt in range(attempts):
            attempt_messages = list(base_messages)
            if attempt > 0:
                attempt_messages.append({"role": "system", "content": _retry_hint(last_error_text)})
            content = _send(cfg, attempt_messages, options, client)
            try:
                parsed = _validate(schema, content)
            except (json.JSONDecodeError, ValidationError, ValueError) as exc:
                logger.warning(
                    "LLM output validation failed route=%s attempt=%d/%d: %s",
                    cfg.name,
                    attempt + 1,
                    attempts,
                    exc,
                )
                last_error = exc
                last_error_text = str(exc)
                continue
            logger.info("LLM request done route=%s model=%s attempt=%d", cfg.name, cfg.model, attempt + 1)
            return parsed
        raise LlmGatewayError(f"LLM output did not match {schema.__name__}") from last_error

    if cfg.sequential:
        with _lock_for(cfg):
            return _execute()
    return _execute()


def complete_text(
    messages: Sequence[Dict[str, str]],
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:  # Free-form completion without schema validation
    content = _send(cfg, _normalize_messages(messages), options, client).strip()
    if not content:
        raise LlmGatewayError("LLM returned empty content")
    return content


def _send(
    cfg: LlmRoute,
    messages: Sequence[Dict[str, str]],
    options: Optional[Dict[str, Any]],
    client: Optional[HttpClient],
) -> str:  # POST one chat-completions request and return message content
    payload: Dict[str, Any] = {"model": cfg.model, "messages": list(messages)}
    if cfg.temperature is not None:
        payload["temperature"] = cfg.temperature
    if options:
        payload.update(options)
    if cfg.response_format:
        payload["response_format"] = {"type": cfg.response_format}
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    try:
        response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.error("LLM transport failure route=%s: %s", cfg.name, exc)
        raise LlmGatewayError("LLM transport failed") from exc
    try:
        if response.status_code >= 400:
            logger.error("LLM error status route=%s status=%s", cfg.name, response.status_code)
            raise LlmGatewayError(f"LLM returned status {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Invalid JSON payload from LLM route=%s: %s", cfg.name, exc)
            raise LlmGatewayError("LLM payload was not JSON") from exc
        return _extract_content(data)
    finally:
        _close_safely(close_cb)


def _post(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    client: Optional[HttpClient],
) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:
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


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # First non-empty user-facing line, for logs
    for message in messages:
        if message.get("role") == "system":
            continue
        text = message.get("content", "").strip()
        if text:
            line = text.splitlines()[0]
            return line if len(line) <= 120 else line[:117] + "..."
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from chat-completions payload
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


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema, then the raw adapter
    cleaned = strip_code_fences(content)
    try:
        return schema.model_validate_json(cleaned)
    except (json.JSONDecodeError, ValidationError) as exc:
        adapter = getattr(schema, "from_raw_content", None)
        if not callable(adapter):
            raise
        try:
            return adapter(cleaned)  # type: ignore[return-value]
        except (json.JSONDecodeError, ValidationError, ValueError):
            raise exc


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        while lines and lines[0].strip() == "":
            lines = lines[1:]
        while lines and lines[-1].strip() == "":
            lines = lines[:-1]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _retry_hint(error_text: Optional[str]) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    return base + " Return only JSON that matches the schema."
