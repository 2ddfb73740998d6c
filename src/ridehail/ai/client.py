"""Chat-completion client for the upstream AI API."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from ridehail import metrics
from ridehail.core.exceptions import NetworkError, ServiceUnavailableError, UpstreamError
from ridehail.core.retry import RetryConfig, with_retry
from ridehail.settings import AISettings

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1, le=4000)
    stream: bool = False


class AIUnavailableError(ServiceUnavailableError):
    """Upstream answered 5xx. Retryable."""

    code = "AI_UNAVAILABLE"


class AITimeoutError(NetworkError):
    """Upstream did not answer in time. Retryable."""

    code = "AI_TIMEOUT"


class ChatCompletionClient:
    def __init__(self, settings: AISettings) -> None:
        self.base_url = settings.base_url
        self.model = settings.model
        self.timeout = settings.timeout_seconds
        self._headers = {"Content-Type": "application/json"}
        if settings.api_key:
            self._headers["Authorization"] = f"Bearer {settings.api_key}"
        if settings.customer_id:
            self._headers["customerId"] = settings.customer_id
        self._retry = RetryConfig(
            max_attempts=settings.max_retries,
            base_delay=settings.retry_base_delay,
            multiplier=settings.retry_multiplier,
        )

    async def _post_once(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.base_url, json=payload, headers=self._headers)
        except httpx.TimeoutException as e:
            raise AITimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.NetworkError as e:
            raise AIUnavailableError(f"Network error: {e}") from e

        if response.status_code >= 500:
            details: dict[str, Any] = {"status": response.status_code}
            retry_after = response.headers.get("Retry-After", "")
            if retry_after.isdigit():
                details["retry_after"] = int(retry_after)
            raise AIUnavailableError(
                f"HTTP {response.status_code}: {response.reason_phrase}", details=details
            )
        if response.status_code >= 400:
            raise UpstreamError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                details={"status": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Upstream returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise UpstreamError(
                "Upstream returned an unexpected body", details={"type": type(data).__name__}
            )
        return data

    async def chat(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 1000,
        model: str | None = None,
    ) -> str | None:
        """Send a chat completion and return the first choice's content."""
        request = ChatRequest(
            model=model or self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        payload = request.model_dump()

        try:
            data = await with_retry(
                lambda: self._post_once(payload),
                config=self._retry,
                operation_name="AI chat completion",
            )
        except Exception:
            metrics.ai_requests.add(1, {"outcome": "error"})
            raise

        metrics.ai_requests.add(1, {"outcome": "ok"})
        choices = data.get("choices") or []
        if not choices:
            return None
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise UpstreamError("Upstream returned malformed choices")
        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise UpstreamError("Upstream returned a malformed message")
        content = message.get("content")
        return content if isinstance(content, str) and content.strip() else None
