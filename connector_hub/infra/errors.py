"""Error types raised by the gateway and its administrative services."""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Categories of errors for better handling."""
    AUTH_ERROR = "auth_error"  # Missing or invalid bearer token
    PERMISSION = "permission"  # Authenticated but not allowed
    VALIDATION = "validation"  # Malformed request
    CONFIGURATION = "configuration"  # Service or connection not configured
    NOT_FOUND = "not_found"  # Tool, resource or record missing
    API_ERROR = "api_error"  # Upstream API returned an error response
    NETWORK = "network"  # Connection issues, timeouts
    UNKNOWN = "unknown"


class GatewayError(Exception):
    """Base exception carrying the HTTP status used at the API boundary."""
    http_status: int = 500

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN, http_status: Optional[int] = None):
        self.message = message
        self.category = category
        if http_status is not None:
            self.http_status = http_status
        super().__init__(message)


class Unauthorized(GatewayError):
    """Bearer token missing or rejected by the identity provider."""
    http_status = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, ErrorCategory.AUTH_ERROR)


class Forbidden(GatewayError):
    http_status = 403

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.PERMISSION)


class InvalidRequest(GatewayError):
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.VALIDATION)


class RecordNotFound(GatewayError):
    http_status = 404

    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.NOT_FOUND)


class ServiceTypeMissing(GatewayError):
    """Neither serviceType nor a job template with a linked connection was given."""

    def __init__(self, message: str = "Service type not specified or could not be inferred"):
        super().__init__(message, ErrorCategory.CONFIGURATION)


class ServiceNotConfigured(GatewayError):
    def __init__(self, service_type: str):
        self.service_type = service_type
        super().__init__(f"MCP service not configured for {service_type}", ErrorCategory.CONFIGURATION)


class ToolNotFound(GatewayError):
    def __init__(self, tool_name: Optional[str]):
        self.tool_name = tool_name
        super().__init__(f"Tool {tool_name} not found in service configuration", ErrorCategory.NOT_FOUND)


class ResourceNotFound(GatewayError):
    def __init__(self, uri: Optional[str]):
        self.uri = uri
        super().__init__(f"Resource {uri} not found in service configuration", ErrorCategory.NOT_FOUND)


class UnknownMethod(GatewayError):
    def __init__(self, method: Optional[str]):
        self.method = method
        super().__init__(f"Unknown MCP method: {method}", ErrorCategory.VALIDATION)


class UnknownAction(GatewayError):
    def __init__(self, action: Optional[str]):
        self.action = action
        super().__init__(f"Unknown action: {action}", ErrorCategory.VALIDATION)


class UpstreamError(GatewayError):
    """The external API answered outside the 2xx range or could not be reached.

    ``status_code`` is the upstream status; the API boundary still answers 500.
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        category: ErrorCategory = ErrorCategory.API_ERROR,
        message: Optional[str] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"API request failed: {status_code} {body}", category)
