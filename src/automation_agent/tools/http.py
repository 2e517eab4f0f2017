"""HTTP tools: ``http_get`` and ``http_post``."""

import json
from typing import Any

import httpx

from automation_agent.llm_client.types import ModelTier
from automation_agent.telemetry import get_logger
from automation_agent.tools.base import CapabilityModule, optional_argument, required_argument
from automation_agent.tools.types import ToolCallResult, ToolDeclaration, ToolParameter

log = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"


def parse_headers(raw: Any) -> dict[str, str]:
    """Parse the ``headers`` argument.

    The model sends headers as a JSON object string; an already decoded
    object is accepted too. Unparseable headers are logged and ignored.
    """
    if not raw:
        return {}
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}
    try:
        decoded = json.loads(str(raw))
    except json.JSONDecodeError as e:
        log.warning("http_headers_parse_failed", error=str(e))
        return {}
    if not isinstance(decoded, dict):
        log.warning("http_headers_parse_failed", error="headers must be a JSON object")
        return {}
    return {str(k): str(v) for k, v in decoded.items()}


def format_response(response: httpx.Response) -> str:
    """Render a response the way the model receives it."""
    status = f"{response.status_code} {response.reason_phrase}".strip()
    return f"Status: {status}\nContent: {response.text}"


class HttpModule(CapabilityModule):
    """Sends plain HTTP requests on behalf of the model."""

    name = "http"

    def __init__(self, timeout_seconds: float = 30.0) -> None:
        self.timeout_seconds = timeout_seconds

    def declare_tools(self, tier: ModelTier) -> list[ToolDeclaration]:
        headers_param = ToolParameter(
            name="headers",
            type="string",
            description='Optional headers as a JSON object (e.g. {"Authorization": "Bearer ..."})',
            required=False,
        )
        return [
            ToolDeclaration(
                name="http_get",
                description="Send an HTTP GET request to fetch data.",
                parameters=[
                    ToolParameter(name="url", type="string", description="Target URL"),
                    headers_param,
                ],
            ),
            ToolDeclaration(
                name="http_post",
                description="Send an HTTP POST request to submit data.",
                parameters=[
                    ToolParameter(name="url", type="string", description="Target URL"),
                    ToolParameter(
                        name="body", type="string", description="POST body (usually a JSON string)"
                    ),
                    ToolParameter(
                        name="contentType",
                        type="string",
                        description=f"Optional, defaults to {DEFAULT_CONTENT_TYPE}",
                        required=False,
                    ),
                    headers_param,
                ],
            ),
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolCallResult | None:
        if name == "http_get":
            return await self._send(name, "GET", arguments)
        if name == "http_post":
            return await self._send(name, "POST", arguments)
        return None

    async def _send(self, name: str, method: str, arguments: dict[str, Any]) -> ToolCallResult:
        url = required_argument(arguments, "url")
        headers = parse_headers(arguments.get("headers"))
        content: bytes | None = None
        if method == "POST":
            headers.setdefault(
                "Content-Type", optional_argument(arguments, "contentType") or DEFAULT_CONTENT_TYPE
            )
            content = str(arguments.get("body", "")).encode("utf-8")

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as e:
            log.warning("http_request_failed", method=method, url=url, error=str(e))
            return ToolCallResult.error(name, f"Error: {e}")

        return ToolCallResult(name=name, text=format_response(response))
