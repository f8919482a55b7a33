"""Blocking completion backends: an OpenAI-compatible HTTP endpoint or the Ollama CLI."""

from __future__ import annotations

import json
import os
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger

_UNSET: Any = object()

# Status codes worth another attempt: throttling and transient upstream failures.
_RETRYABLE_STATUS = frozenset({408, 409, 429, 500, 502, 503, 504})

logger = get_logger("llm.runner")


@dataclass
class CompletionRequest:
    """A single prompt with the backend settings it should be sent with."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    executable: Optional[str]
    base_url: Optional[str]
    api_key: Optional[str]
    request_timeout: Optional[float]
    max_retries: int = 0


class CompletionError(RuntimeError):
    """Raised when a backend cannot produce a completion."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


def _env(*keys: str) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


class LLMRunner:
    """Sends prompts to the configured text-generation backend.

    ``base_url=None`` selects the Ollama CLI; otherwise requests go to
    ``{base_url}/chat/completions``. Unspecified settings fall back to the
    ``CODERULES_LLM_*`` and then ``OPENAI_*`` environment variables.
    Relevance judgments should be repeatable, so the temperature defaults to zero.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MAX_RETRIES = 2

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: Optional[str] = _UNSET,
        executable: str = "ollama",
        temperature: Optional[float] = 0.0,
        max_tokens: Optional[int] = None,
        api_key: Optional[str] = _UNSET,
        request_timeout: Optional[float] = 60.0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        runner: Callable[[CompletionRequest], str] | None = None,
    ) -> None:
        self.model = model or _env("CODERULES_LLM_MODEL", "OPENAI_MODEL") or self.DEFAULT_MODEL
        if base_url is _UNSET:
            base_url = _env("CODERULES_LLM_BASE_URL", "OPENAI_BASE_URL") or self.DEFAULT_BASE_URL
        self.base_url = base_url.rstrip("/") if base_url else None
        if api_key is _UNSET:
            api_key = _env("CODERULES_LLM_API_KEY", "OPENAI_API_KEY")
        self.api_key = api_key
        self.executable = executable
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self.max_retries = max(0, max_retries)
        self._send = runner or (http_completion if self.base_url else cli_completion)

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Return the completion text for ``prompt``, retrying transient failures."""
        request = CompletionRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            executable=self.executable,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
            max_retries=self.max_retries,
        )
        attempt = 0
        while True:
            try:
                return self._send(request)
            except CompletionError as exc:
                if not exc.retryable or attempt >= request.max_retries:
                    raise
                delay = 0.5 * (2**attempt)
                attempt += 1
                logger.warning(
                    "Completion attempt %d failed (%s); retrying in %.1fs", attempt, exc, delay
                )
                time.sleep(delay)


def cli_completion(request: CompletionRequest) -> str:
    """Run ``ollama run <model>`` with the prompt on stdin."""
    executable = request.executable or "ollama"
    prompt = f"{request.system}\n\n{request.prompt}" if request.system else request.prompt
    try:
        completed = subprocess.run(
            [executable, "run", request.model],
            input=prompt,
            check=True,
            capture_output=True,
            text=True,
            timeout=request.request_timeout,
        )
    except FileNotFoundError as exc:  # pragma: no cover - depends on environment
        raise CompletionError(
            f"Unable to locate '{executable}'. Install Ollama or configure llm.base_url."
        ) from exc
    except subprocess.CalledProcessError as exc:  # pragma: no cover - depends on environment
        raise CompletionError(
            f"{executable} exited with code {exc.returncode}: {exc.stderr.strip()}"
        ) from exc
    except subprocess.TimeoutExpired as exc:  # pragma: no cover - depends on environment
        raise CompletionError(f"{executable} timed out after {exc.timeout}s", retryable=True) from exc
    return completed.stdout.strip()


def http_completion(request: CompletionRequest) -> str:
    """POST a chat completion to an OpenAI-compatible endpoint."""
    if not request.base_url:
        raise CompletionError("HTTP completion requires a base_url")

    body: Dict[str, Any] = {"model": request.model, "messages": build_messages(request)}
    if request.temperature is not None:
        body["temperature"] = request.temperature
    if request.max_tokens is not None:
        body["max_tokens"] = request.max_tokens

    headers = {"Content-Type": "application/json"}
    if request.api_key:
        headers["Authorization"] = f"Bearer {request.api_key}"
    http_request = Request(
        f"{request.base_url}/chat/completions",
        data=json.dumps(body).encode("utf-8"),
        headers=headers,
        method="POST",
    )

    try:
        with urlopen(http_request, timeout=request.request_timeout or 60.0) as response:
            raw = response.read()
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore").strip() or str(exc.reason)
        raise CompletionError(
            f"Completion endpoint returned {exc.code}: {detail}",
            retryable=exc.code in _RETRYABLE_STATUS,
        ) from exc
    except URLError as exc:
        raise CompletionError(f"Completion endpoint unreachable: {exc.reason}", retryable=True) from exc

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CompletionError("Completion endpoint returned invalid JSON") from exc
    # An empty completion is a legitimate answer when nothing is relevant.
    return completion_text(payload).strip()


def build_messages(request: CompletionRequest) -> List[Dict[str, str]]:
    messages = [{"role": "system", "content": request.system}] if request.system else []
    messages.append({"role": "user", "content": request.prompt})
    return messages


def completion_text(payload: Any) -> str:
    """Pull the first choice's text out of a chat or legacy completion payload."""
    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices:
        raise CompletionError("Completion endpoint returned no choices")
    choice = choices[0]
    if not isinstance(choice, dict):
        raise CompletionError("Completion endpoint returned a malformed choice")
    message = choice.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    text = choice.get("text")
    return text if isinstance(text, str) else ""


__all__ = [
    "CompletionError",
    "CompletionRequest",
    "LLMRunner",
    "build_messages",
    "cli_completion",
    "completion_text",
    "http_completion",
]
