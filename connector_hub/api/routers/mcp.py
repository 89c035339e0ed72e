"""MCP gateway API router."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from connector_hub.api.dependencies import get_current_user, get_gateway
from connector_hub.api.models import ErrorResponse, MCPRequest, TokenRequiredResponse
from connector_hub.services.gateway import (
    CallRequest,
    CredentialRequired,
    GatewayFailure,
    GatewaySuccess,
    McpGateway,
)
from connector_hub.services.ports import AuthenticatedUser

router = APIRouter()


@router.post(
    "/mcp",
    tags=["MCP"],
    responses={
        402: {"model": TokenRequiredResponse, "description": "No credential configured for the service"},
        500: {"model": ErrorResponse},
    },
)
async def mcp_call(
    request: MCPRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    gateway: McpGateway = Depends(get_gateway),
):
    """
    Proxy an MCP call to an external service API.

    Requires a bearer token. The service is taken from `serviceType` or
    inferred from `jobTemplateId`.

    **Example Request:**
    ```json
    {
        "method": "tools/call",
        "serviceType": "freshservice",
        "params": {"toolName": "get_ticket", "arguments": {"ticketId": 123}}
    }
    ```

    Returns 402 with `error: TOKEN_REQUIRED` when no credential applies.
    """
    params = request.params.model_dump(by_alias=True) if request.params else {}
    result = await gateway.handle(
        CallRequest(
            method=request.method,
            service_type=request.service_type,
            job_template_id=request.job_template_id,
            params=params,
            owner_type=request.owner_type,
            owner_id=request.owner_id,
        ),
        user,
    )

    if isinstance(result, GatewaySuccess):
        return JSONResponse(status_code=result.status_code, content=result.payload)
    if isinstance(result, CredentialRequired):
        return JSONResponse(status_code=result.status_code, content=result.to_payload())
    if isinstance(result, GatewayFailure):
        return JSONResponse(status_code=result.status_code, content=result.to_payload())
    raise TypeError(f"Unexpected gateway result: {result!r}")
