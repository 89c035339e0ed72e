"""Connectivity checks for configured third-party connections."""

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from connector_hub.infra.errors import InvalidRequest, RecordNotFound
from connector_hub.infra.metrics import connection_tests_total
from connector_hub.infra.timeout import CONNECTION_TEST_TIMEOUT
from connector_hub.services.ports import ConnectionRepository

logger = logging.getLogger(__name__)

# Lightweight authenticated endpoint per connection type, relative to the connection endpoint
HEALTH_PATHS = {
    "freshservice": "api/v2/ticket_form_fields",
    "jira": "rest/api/2/myself",
    "confluence": "rest/api/content?limit=1",
}


def _basic(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def build_test_headers(connection: Dict[str, Any]) -> Dict[str, str]:
    """Auth headers for a connection based on its type and auth type."""
    headers = {"Content-Type": "application/json"}
    auth_config = connection.get("auth_config") or {}

    if connection.get("connection_type") == "freshservice":
        # FreshService takes the API key as the basic-auth username with a dummy password
        api_key = auth_config.get("api_key")
        if api_key:
            headers["Authorization"] = f"Basic {_basic(api_key + ':X')}"
    elif connection.get("auth_type") == "token":
        api_key = auth_config.get("api_key")
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    elif connection.get("auth_type") == "basic_auth":
        username = auth_config.get("username")
        password = auth_config.get("password")
        if username and password:
            headers["Authorization"] = f"Basic {_basic(f'{username}:{password}')}"

    return headers


def build_test_url(connection: Dict[str, Any]) -> str:
    """Full health-check URL for a connection."""
    url = connection.get("endpoint") or ""
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"

    connection_type = connection.get("connection_type")
    if connection_type in HEALTH_PATHS:
        separator = "" if url.endswith("/") else "/"
        return f"{url}{separator}{HEALTH_PATHS[connection_type]}"
    if connection_type == "gemini":
        api_key = (connection.get("auth_config") or {}).get("api_key") or ""
        return f"{url}/v1beta/models?key={api_key}"
    if connection_type == "openai":
        return f"{url}/v1/models"
    return url


class ConnectionTester:
    """Issues one authenticated GET against a connection and records whether it is active."""

    def __init__(self, connections: ConnectionRepository, timeout: float = CONNECTION_TEST_TIMEOUT):
        self.connections = connections
        self.timeout = timeout

    async def test_connection(self, connection_id: Optional[str]) -> Dict[str, Any]:
        if not connection_id:
            raise InvalidRequest("Connection ID is required")

        connection = await self.connections.get_connection(connection_id)
        if not connection:
            raise RecordNotFound("Connection not found")

        logger.info(
            "Testing connection",
            extra={"connection_id": connection_id, "connection_type": connection.get("connection_type")},
        )

        is_active = False
        error_message = ""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(build_test_url(connection), headers=build_test_headers(connection))

            if 200 <= response.status_code < 300:
                is_active = True
            else:
                error_message = f"HTTP {response.status_code}: {response.reason_phrase}"
        except httpx.HTTPError as e:
            logger.warning(f"Connection test error: {e}", extra={"connection_id": connection_id})
            error_message = str(e) or "Connection failed"

        connection_tests_total.labels(
            connection_type=connection.get("connection_type") or "unknown",
            status="success" if is_active else "failure",
        ).inc()

        try:
            await self.connections.set_connection_active(connection_id, is_active)
        except Exception as e:
            # The test result is still reported to the caller
            logger.error(f"Error updating connection status: {e}", extra={"connection_id": connection_id})

        return {"success": is_active, "error": None if is_active else error_message}
