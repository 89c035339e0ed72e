"""Management of user, team and account credentials."""

import logging
from typing import Any, Dict, Optional

from connector_hub.infra.errors import Forbidden, InvalidRequest, UnknownAction
from connector_hub.infra.secrets import ENV_PREFIX
from connector_hub.models.credential import Credential, OwnerType
from connector_hub.services.ports import (
    AuthenticatedUser,
    CredentialWriter,
    MembershipDirectory,
    SecretStore,
)

logger = logging.getLogger(__name__)

TEAM_MEMBER_ROLE = "user"
ACCOUNT_ADMIN_ROLE = "account_admin"


def token_metadata(credential: Credential) -> Dict[str, Any]:
    """Non-secret view of a stored credential."""
    return {
        "id": credential.id,
        "owner_type": credential.owner_type,
        "owner_id": credential.owner_id,
        "auth_type": credential.auth_type,
        "endpoint": credential.endpoint,
        "created_at": credential.created_at,
    }


class TokenService:
    """
    Sets, removes and inspects owner-scoped credentials.

    Team credentials may be managed by team members whose role is above
    plain ``user``; account credentials only by account admins. Personal
    credentials default to the calling user.
    """

    def __init__(self, secret_store: SecretStore, writer: CredentialWriter, memberships: MembershipDirectory):
        self.secret_store = secret_store
        self.writer = writer
        self.memberships = memberships

    async def manage(
        self,
        user: AuthenticatedUser,
        action: str,
        service_id: str,
        owner_type: str,
        owner_id: Optional[str] = None,
        token_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        resolved_owner_id = await self.authorize(user, owner_type, owner_id)

        logger.info(
            "MCP Manage Token",
            extra={"action": action, "service_id": service_id, "owner_type": owner_type},
        )

        if action == "set":
            return await self.set_token(service_id, owner_type, resolved_owner_id, token_data)
        if action == "remove":
            await self.writer.delete_owner_credential(service_id, owner_type, resolved_owner_id)
            return {"success": True}
        if action == "get":
            credential = await self.secret_store.get_owner_credential(service_id, owner_type, resolved_owner_id)
            return {
                "success": True,
                "hasToken": credential is not None,
                "token": token_metadata(credential) if credential else None,
            }

        raise UnknownAction(action)

    async def authorize(self, user: AuthenticatedUser, owner_type: str, owner_id: Optional[str]) -> str:
        """Check the caller may manage credentials for the owner; return the owner id."""
        if owner_type == OwnerType.USER.value:
            if owner_id and owner_id != user.id:
                raise Forbidden("Users can only manage their own tokens")
            return user.id

        if owner_type not in (OwnerType.TEAM.value, OwnerType.ACCOUNT.value):
            raise InvalidRequest(f"Invalid owner type: {owner_type}")

        if not owner_id:
            raise InvalidRequest(f"ownerId is required for {owner_type} tokens")

        if owner_type == OwnerType.TEAM.value:
            role = await self.memberships.get_team_role(owner_id, user.id)
            if not role or role == TEAM_MEMBER_ROLE:
                raise Forbidden("Only team managers can manage team tokens")
        else:
            role = await self.memberships.get_account_role(owner_id, user.id)
            if role != ACCOUNT_ADMIN_ROLE:
                raise Forbidden("Only account admins can manage account tokens")

        return owner_id

    async def set_token(
        self,
        service_id: str,
        owner_type: str,
        owner_id: str,
        token_data: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        if not token_data or not token_data.get("encrypted_token"):
            raise InvalidRequest("Token data required for set action")
        if token_data["encrypted_token"].startswith(ENV_PREFIX):
            raise InvalidRequest("Secret references are only allowed for app tokens")

        credential = await self.writer.upsert_owner_credential(
            service_id,
            Credential(
                secret=token_data["encrypted_token"],
                auth_type=token_data.get("auth_type") or "api_key",
                auth_config=token_data.get("auth_config") or {},
                endpoint=token_data.get("endpoint"),
                owner_type=owner_type,
                owner_id=owner_id,
            ),
        )
        return {"success": True, "token": token_metadata(credential)}
