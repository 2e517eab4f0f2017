"""Gemini client implementation.

This module provides the GeminiClient class for the generateContent REST API
with error classification and telemetry. Rounds are never retried here; a
failed round is surfaced to the orchestrator, which decides what to do.
"""

import json
import time
from typing import Any

import httpx

from automation_agent.config import get_settings
from automation_agent.llm_client.adapters import (
    adapt_generate_response,
    build_generate_request,
    is_unsupported_tools_error,
    parse_model_list,
)
from automation_agent.llm_client.types import (
    GenerateRequest,
    GenerateResponse,
    GenerationError,
    QuotaExceeded,
    ResponseParseError,
    ServiceError,
    UnsupportedOperation,
)
from automation_agent.telemetry import get_logger
from automation_agent.telemetry.events import (
    MODEL_CALL_COMPLETED,
    MODEL_CALL_ERROR,
    MODEL_CALL_STARTED,
)
from automation_agent.telemetry.trace import TraceContext

log = get_logger(__name__)

# Bodies of failed calls are logged for diagnosis, capped at this many characters
_LOGGED_BODY_LIMIT = 4000


class GeminiClient:
    """Client for one Gemini model.

    Each tier of the orchestrator owns one instance; the instances only differ
    in the model they target.

    Attributes:
        model: Model identifier (e.g. "gemini-2.5-flash").
        base_url: Base URL of the REST API.
        timeout_seconds: Read timeout for a generation request.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the GeminiClient.

        Args:
            api_key: Gemini API key.
            model: Model identifier.
            base_url: Base URL. If None, uses settings.gemini_base_url.
            timeout_seconds: Request timeout. If None, uses settings.llm_timeout_seconds.
        """
        settings = get_settings() if base_url is None or timeout_seconds is None else None
        self._api_key = api_key
        self.model = model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout_seconds = float(
            timeout_seconds if timeout_seconds is not None else settings.llm_timeout_seconds
        )

    @property
    def model_name(self) -> str:
        """Identifier of the backing model."""
        return self.model

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(connect=10.0, read=self.timeout_seconds, write=10.0, pool=10.0)

    def _classify_status(self, status_code: int, body: str) -> GenerationError:
        if status_code == 429:
            return QuotaExceeded(
                "Gemini API quota exceeded (429). Check your plan or try again later."
            )
        if status_code == 400 and is_unsupported_tools_error(body):
            return UnsupportedOperation(
                f"The current model ({self.model}) does not support function calling. "
                "Switch to a model with tool support (e.g. gemini-2.5-flash)."
            )
        return ServiceError(f"Gemini API error: {status_code}\n{body}", status_code=status_code, body=body)

    async def generate(
        self, request: GenerateRequest, trace_ctx: TraceContext | None = None
    ) -> GenerateResponse:
        """Run one generateContent round-trip.

        Args:
            request: Transcript contents, tool declarations and system instruction.
            trace_ctx: Trace context for telemetry correlation.

        Returns:
            GenerateResponse with the model turn and usage stats.

        Raises:
            QuotaExceeded: On HTTP 429.
            UnsupportedOperation: On HTTP 400 rejecting function calling.
            ServiceError: On other non-2xx answers or network failures.
            ResponseParseError: If the response body is malformed.
        """
        if trace_ctx is None:
            trace_ctx = TraceContext.new_trace()
        _, span_id = trace_ctx.new_span()

        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = build_generate_request(request)

        start_time = time.time()
        log.info(
            MODEL_CALL_STARTED,
            model_id=self.model,
            turn_count=len(request.contents),
            tools_count=len(request.tools),
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )

        try:
            async with httpx.AsyncClient(timeout=self._timeout()) as client:
                response = await client.post(url, params={"key": self._api_key}, json=payload)
        except httpx.TimeoutException as e:
            error: GenerationError = ServiceError(
                f"Request to {self.model} timed out after {self.timeout_seconds}s: {e}"
            )
            self._log_failure(error, start_time, trace_ctx, span_id)
            raise error from e
        except httpx.RequestError as e:
            error = ServiceError(f"Request error: {e}")
            self._log_failure(error, start_time, trace_ctx, span_id)
            raise error from e

        if not 200 <= response.status_code < 300:
            body = response.text
            error = self._classify_status(response.status_code, body)
            self._log_failure(
                error,
                start_time,
                trace_ctx,
                span_id,
                status_code=response.status_code,
                request_body=json.dumps(payload)[:_LOGGED_BODY_LIMIT],
                response_body=body[:_LOGGED_BODY_LIMIT],
            )
            raise error

        try:
            turn, usage = adapt_generate_response(response.json())
        except ResponseParseError as e:
            self._log_failure(
                e,
                start_time,
                trace_ctx,
                span_id,
                status_code=response.status_code,
                response_body=response.text[:_LOGGED_BODY_LIMIT],
            )
            raise
        except ValueError as e:
            error = ResponseParseError(f"Invalid JSON: {e}")
            self._log_failure(
                error,
                start_time,
                trace_ctx,
                span_id,
                status_code=response.status_code,
                response_body=response.text[:_LOGGED_BODY_LIMIT],
            )
            raise error from e

        duration_ms = int((time.time() - start_time) * 1000)
        log.info(
            MODEL_CALL_COMPLETED,
            model_id=self.model,
            latency_ms=duration_ms,
            prompt_tokens=usage.prompt_tokens,
            response_tokens=usage.response_tokens,
            tool_calls=len(turn.tool_calls),
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )
        return GenerateResponse(turn=turn, usage=usage, model_name=self.model)

    def _log_failure(
        self,
        error: Exception,
        start_time: float,
        trace_ctx: TraceContext,
        span_id: str,
        **details: Any,
    ) -> None:
        log.error(
            MODEL_CALL_ERROR,
            model_id=self.model,
            error_type=type(error).__name__,
            error=str(error),
            latency_ms=int((time.time() - start_time) * 1000),
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
            **details,
        )

    async def list_models(self) -> list[tuple[str, str]]:
        """List models that support generateContent.

        Returns:
            ``(model_id, display_name)`` pairs.

        Raises:
            ServiceError: On non-2xx answers or network failures.
            ResponseParseError: If the body is not a model list.
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout()) as client:
                response = await client.get(f"{self.base_url}/models", params={"key": self._api_key})
        except httpx.RequestError as e:
            raise ServiceError(f"Request error: {e}") from e

        if not 200 <= response.status_code < 300:
            raise ServiceError(
                f"Listing models failed: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return parse_model_list(response.json())
        except ValueError as e:
            raise ResponseParseError(f"Invalid JSON: {e}") from e
