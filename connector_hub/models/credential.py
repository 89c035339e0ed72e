"""Credential models shared by the resolver, request builder and stores."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class AuthType(str, Enum):
    API_KEY = "api_key"
    BASIC = "basic"
    OAUTH = "oauth"
    BEARER = "bearer"


class OwnerType(str, Enum):
    USER = "user"
    TEAM = "team"
    ACCOUNT = "account"


@dataclass(frozen=True)
class Credential:
    """A stored secret with its auth metadata.

    App credentials have no owner; owner credentials are scoped to an
    (owner_type, owner_id) pair and may override the service endpoint.
    """
    secret: str
    auth_type: str
    auth_config: Dict[str, Any] = field(default_factory=dict)
    endpoint: Optional[str] = None
    owner_type: Optional[str] = None
    owner_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_app_credential(self) -> bool:
        return self.owner_type is None


@dataclass(frozen=True)
class ResolvedAuth:
    """The secret and auth metadata chosen for one call."""
    secret: str
    auth_type: str
    auth_config: Dict[str, Any]
    endpoint: str  # override endpoint or the service default


@dataclass(frozen=True)
class CredentialMissing:
    """No credential applies; callers prompt the user to configure one."""
    message: str
    uses_app_token: bool


ResolutionResult = Union[ResolvedAuth, CredentialMissing]
