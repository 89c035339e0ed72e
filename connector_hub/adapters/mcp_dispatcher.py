"""Executes built upstream requests and normalizes their payloads into MCP results."""

import json
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx

from connector_hub.infra.config import config
from connector_hub.infra.errors import ErrorCategory, UpstreamError
from connector_hub.infra.metrics import upstream_call_duration, upstream_calls_total
from connector_hub.services.request_builder import RESOURCE_READ, HttpRequestSpec

logger = logging.getLogger(__name__)


def pretty_json(data: Any) -> str:
    """Serialize ``data`` with a two-space indent."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def _loggable_url(url: str) -> str:
    # Query strings may carry API keys
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


class MCPDispatcher:
    """Issues one HTTP call per request; no retries.

    The upstream call is bounded by the client timeout only.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else config.UPSTREAM_TIMEOUT_SECONDS

    async def execute(self, request: HttpRequestSpec) -> Dict[str, Any]:
        """
        Execute a built request.

        Args:
            request: HttpRequestSpec produced by the request builder

        Returns:
            Tool-call result (``content``) or resource-read result (``contents``)

        Raises:
            UpstreamError: If the upstream answered outside 2xx or could not be reached
            RuntimeError: If a successful response body is not JSON
        """
        logger.info(
            f"Executing {request.name or request.operation} at {_loggable_url(request.url)}",
            extra={"operation": request.operation, "method": request.method},
        )

        start_time = time.time()
        try:
            data = await self._send(request)
            upstream_calls_total.labels(operation=request.operation, status="success").inc()
        except Exception:
            upstream_calls_total.labels(operation=request.operation, status="failure").inc()
            raise
        finally:
            upstream_call_duration.labels(operation=request.operation).observe(time.time() - start_time)

        if request.operation == RESOURCE_READ:
            return {
                "contents": [{
                    "uri": request.uri,
                    "mimeType": request.mime_type or "application/json",
                    "text": pretty_json(data),
                }]
            }

        return {
            "content": [{
                "type": "text",
                "text": pretty_json(data),
            }]
        }

    async def _send(self, request: HttpRequestSpec) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.body,
                )
            except httpx.HTTPError as e:
                logger.warning(f"Upstream request failed: {e}", extra={"operation": request.operation})
                raise UpstreamError(502, str(e), category=ErrorCategory.NETWORK)

        if not 200 <= response.status_code < 300:
            error_text = response.text
            logger.warning(
                "Upstream returned error status",
                extra={"operation": request.operation, "status_code": response.status_code},
            )
            raise UpstreamError(response.status_code, error_text)

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Upstream response parsing failed: {str(e)}")


mcp_dispatcher = MCPDispatcher()
