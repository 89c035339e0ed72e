"""Storage and identity interfaces consumed by the gateway services.

The SQLAlchemy implementations live in ``connector_hub.adapters.sql_stores``;
tests substitute in-memory fakes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from connector_hub.models.credential import Credential
from connector_hub.models.service import ServiceConfig


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ServiceLookup(Protocol):
    """Read access to service configuration and job template links."""

    async def get_service_config(self, service_type: str) -> Optional[ServiceConfig]:
        ...

    async def get_connection_type(self, job_template_id: str) -> Optional[str]:
        """Return the connection_type of the connection linked to a job template."""
        ...


@runtime_checkable
class SecretStore(Protocol):
    """Read access to stored credentials."""

    async def get_app_credential(self, service_id: str) -> Optional[Credential]:
        ...

    async def get_owner_credential(self, service_id: str, owner_type: str, owner_id: str) -> Optional[Credential]:
        ...


@runtime_checkable
class CredentialWriter(Protocol):
    """Write access to stored credentials."""

    async def upsert_owner_credential(self, service_id: str, credential: Credential) -> Credential:
        ...

    async def delete_owner_credential(self, service_id: str, owner_type: str, owner_id: str) -> None:
        ...

    async def upsert_app_credential(self, service_id: str, credential: Credential) -> Credential:
        ...

    async def delete_app_credential(self, service_id: str) -> None:
        ...


@runtime_checkable
class ServiceRepository(Protocol):
    """Administrative access to service configuration rows."""

    async def create_service(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def update_service(self, service_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def delete_service(self, service_id: str) -> None:
        ...

    async def set_uses_app_token(self, service_id: str, uses_app_token: bool) -> None:
        ...


@runtime_checkable
class MembershipDirectory(Protocol):
    """Roles used for permission checks."""

    async def get_team_role(self, team_id: str, user_id: str) -> Optional[str]:
        ...

    async def get_account_role(self, account_id: str, user_id: str) -> Optional[str]:
        ...

    async def is_app_admin(self, user_id: str) -> bool:
        ...


@runtime_checkable
class ConnectionRepository(Protocol):
    """Connection rows checked by the connection tester."""

    async def get_connection(self, connection_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def set_connection_active(self, connection_id: str, is_active: bool) -> None:
        ...


@runtime_checkable
class IdentityProvider(Protocol):
    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """Return the user owning ``access_token`` or None when it is invalid."""
        ...
