"""MCP service administration API router."""

from fastapi import APIRouter, Depends

from connector_hub.api.dependencies import get_current_user, get_service_admin
from connector_hub.api.models import ConfigureServiceRequest
from connector_hub.services.ports import AuthenticatedUser
from connector_hub.services.service_admin import ServiceAdmin

router = APIRouter()


@router.post("/mcp/services", tags=["MCP Services"])
async def configure_service(
    request: ConfigureServiceRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service_admin: ServiceAdmin = Depends(get_service_admin),
):
    """
    Create, update or delete an MCP service, or set/remove its app-wide token.

    Requires a bearer token belonging to an app admin.

    **Example Request:**
    ```json
    {
        "action": "set_token",
        "serviceId": "5b0c...",
        "tokenData": {"encrypted_token": "env://FRESHSERVICE_API_KEY", "auth_type": "basic"}
    }
    ```
    """
    return await service_admin.configure(
        user,
        action=request.action,
        service_id=request.service_id,
        service_data=request.service_data.model_dump(exclude_none=True) if request.service_data else None,
        token_data=request.token_data.model_dump() if request.token_data else None,
    )
