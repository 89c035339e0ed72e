"""MCP gateway: resolves the target service and routes list/call/read methods."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from connector_hub.adapters.mcp_dispatcher import MCPDispatcher, mcp_dispatcher
from connector_hub.infra.errors import (
    ErrorCategory,
    GatewayError,
    ServiceNotConfigured,
    ServiceTypeMissing,
    UnknownMethod,
)
from connector_hub.infra.metrics import mcp_requests_total
from connector_hub.models.credential import CredentialMissing
from connector_hub.models.service import ServiceConfig
from connector_hub.services.credential_resolver import CredentialResolver
from connector_hub.services.ports import AuthenticatedUser, SecretStore, ServiceLookup
from connector_hub.services.request_builder import (
    RESOURCE_READ,
    TOOL_CALL,
    RequestBuilder,
    request_builder,
)

logger = logging.getLogger(__name__)

TOOLS_LIST = "tools/list"
RESOURCES_LIST = "resources/list"


@dataclass(frozen=True)
class CallRequest:
    """One inbound MCP call."""
    method: str
    service_type: Optional[str] = None
    job_template_id: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)
    owner_type: Optional[str] = None
    owner_id: Optional[str] = None


@dataclass(frozen=True)
class GatewaySuccess:
    payload: Dict[str, Any]
    status_code: int = 200


@dataclass(frozen=True)
class CredentialRequired:
    """No credential resolved for a call/read; rendered as TOKEN_REQUIRED."""
    message: str
    service_type: str
    uses_app_token: bool
    status_code: int = 402

    def to_payload(self) -> Dict[str, Any]:
        return {
            "error": "TOKEN_REQUIRED",
            "message": self.message,
            "serviceType": self.service_type,
            "usesAppToken": self.uses_app_token,
        }


@dataclass(frozen=True)
class GatewayFailure:
    message: str
    status_code: int = 500
    category: ErrorCategory = ErrorCategory.UNKNOWN

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


GatewayResult = Union[GatewaySuccess, CredentialRequired, GatewayFailure]


class McpGateway:
    """
    Handles one MCP call from an authenticated user.

    Flow: resolve service type -> load ServiceConfig -> dispatch by method.
    Listing methods return the declared collections without touching
    credentials; call/read methods resolve a credential, build the upstream
    request and execute it.
    """

    def __init__(
        self,
        service_lookup: ServiceLookup,
        secret_store: SecretStore,
        builder: Optional[RequestBuilder] = None,
        dispatcher: Optional[MCPDispatcher] = None,
    ):
        self.service_lookup = service_lookup
        self.resolver = CredentialResolver(secret_store)
        self.builder = builder or request_builder
        self.dispatcher = dispatcher or mcp_dispatcher

    async def handle(self, request: CallRequest, user: AuthenticatedUser) -> GatewayResult:
        """Run the request through the pipeline; never raises."""
        logger.info(
            "MCP Request",
            extra={
                "method": request.method,
                "service_type": request.service_type,
                "job_template_id": request.job_template_id,
                "owner_type": request.owner_type,
            },
        )

        service_type = request.service_type or "unknown"
        try:
            service_type = await self.resolve_service_type(request)
            service = await self.load_service(service_type)
            result = await self._dispatch(request, service, user)
        except GatewayError as e:
            logger.warning(f"MCP request failed: {e.message}", extra={"category": e.category.value})
            result = GatewayFailure(message=e.message, status_code=e.http_status, category=e.category)
        except Exception as e:
            logger.error(f"MCP Server Error: {e}", exc_info=True)
            result = GatewayFailure(message=str(e) or "Unknown error")

        mcp_requests_total.labels(
            method=request.method,
            service_type=service_type,
            outcome=_outcome_label(result),
        ).inc()
        return result

    async def resolve_service_type(self, request: CallRequest) -> str:
        """Use serviceType directly or infer it from the job template's connection."""
        if request.service_type:
            return request.service_type

        if request.job_template_id:
            connection_type = await self.service_lookup.get_connection_type(request.job_template_id)
            if connection_type:
                return connection_type

        raise ServiceTypeMissing()

    async def load_service(self, service_type: str) -> ServiceConfig:
        service = await self.service_lookup.get_service_config(service_type)
        if service is None:
            raise ServiceNotConfigured(service_type)
        return service

    async def _dispatch(self, request: CallRequest, service: ServiceConfig, user: AuthenticatedUser) -> GatewayResult:
        method = request.method
        params = request.params or {}

        if method == TOOLS_LIST:
            return GatewaySuccess({"tools": service.list_tools()})

        if method == RESOURCES_LIST:
            return GatewaySuccess({"resources": service.list_resources()})

        if method in (TOOL_CALL, RESOURCE_READ):
            resolution = await self.resolver.resolve(service, user.id, request.owner_type, request.owner_id)
            if isinstance(resolution, CredentialMissing):
                return CredentialRequired(
                    message=resolution.message,
                    service_type=service.service_type,
                    uses_app_token=resolution.uses_app_token,
                )

            if method == TOOL_CALL:
                spec = self.builder.build(service, resolution, TOOL_CALL, params.get("toolName"), params.get("arguments"))
            else:
                spec = self.builder.build(service, resolution, RESOURCE_READ, params.get("uri"))

            return GatewaySuccess(await self.dispatcher.execute(spec))

        raise UnknownMethod(method)


def _outcome_label(result: GatewayResult) -> str:
    if isinstance(result, GatewaySuccess):
        return "ok"
    if isinstance(result, CredentialRequired):
        return "token_required"
    return "error"
