"""Administration of MCP service configurations and their app-wide credentials."""

import logging
from typing import Any, Dict, Optional

from connector_hub.infra.errors import Forbidden, InvalidRequest, UnknownAction
from connector_hub.models.credential import Credential
from connector_hub.services.ports import (
    AuthenticatedUser,
    CredentialWriter,
    MembershipDirectory,
    ServiceRepository,
)

logger = logging.getLogger(__name__)


class ServiceAdmin:
    """Create/update/delete services and set/remove their app credential. App admins only."""

    def __init__(self, services: ServiceRepository, writer: CredentialWriter, memberships: MembershipDirectory):
        self.services = services
        self.writer = writer
        self.memberships = memberships

    async def configure(
        self,
        user: AuthenticatedUser,
        action: str,
        service_id: Optional[str] = None,
        service_data: Optional[Dict[str, Any]] = None,
        token_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not await self.memberships.is_app_admin(user.id):
            raise Forbidden("Only app admins can configure MCP services")

        logger.info("MCP Configure Service", extra={"action": action, "service_id": service_id})

        if action == "create":
            if not service_data:
                raise InvalidRequest("Service data required for create action")
            service = await self.services.create_service(service_data)
            return {"success": True, "service": service}

        if action == "update":
            if not service_id or not service_data:
                raise InvalidRequest("Service ID and data required for update action")
            service = await self.services.update_service(service_id, service_data)
            return {"success": True, "service": service}

        if action == "delete":
            if not service_id:
                raise InvalidRequest("Service ID required for delete action")
            await self.services.delete_service(service_id)
            return {"success": True}

        if action == "set_token":
            if not service_id or not token_data or not token_data.get("encrypted_token"):
                raise InvalidRequest("Service ID and token data required for set_token action")
            credential = await self.writer.upsert_app_credential(
                service_id,
                Credential(
                    secret=token_data["encrypted_token"],
                    auth_type=token_data.get("auth_type") or "api_key",
                    auth_config=token_data.get("auth_config") or {},
                ),
            )
            await self.services.set_uses_app_token(service_id, True)
            return {
                "success": True,
                "token": {
                    "id": credential.id,
                    "service_id": service_id,
                    "auth_type": credential.auth_type,
                    "created_at": credential.created_at,
                },
            }

        if action == "remove_token":
            if not service_id:
                raise InvalidRequest("Service ID required for remove_token action")
            await self.writer.delete_app_credential(service_id)
            await self.services.set_uses_app_token(service_id, False)
            return {"success": True}

        raise UnknownAction(action)
