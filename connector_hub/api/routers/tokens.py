"""Owner credential management API router."""

from fastapi import APIRouter, Depends

from connector_hub.api.dependencies import get_current_user, get_token_service
from connector_hub.api.models import ManageTokenRequest
from connector_hub.services.ports import AuthenticatedUser
from connector_hub.services.token_service import TokenService

router = APIRouter()


@router.post("/mcp/tokens", tags=["Tokens"])
async def manage_token(
    request: ManageTokenRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Set, remove or inspect a user, team or account credential for a service.

    Requires a bearer token. Team credentials require a team manager role,
    account credentials the `account_admin` role. `get` never returns the secret.
    """
    return await token_service.manage(
        user,
        action=request.action,
        service_id=request.service_id,
        owner_type=request.owner_type,
        owner_id=request.owner_id,
        token_data=request.token_data.model_dump() if request.token_data else None,
    )
