from .credential import (
    AuthType,
    Credential,
    CredentialMissing,
    OwnerType,
    ResolutionResult,
    ResolvedAuth,
)
from .service import ResourceDefinition, ServiceConfig, ToolDefinition

__all__ = [
    "AuthType",
    "Credential",
    "CredentialMissing",
    "OwnerType",
    "ResolutionResult",
    "ResolvedAuth",
    "ResourceDefinition",
    "ServiceConfig",
    "ToolDefinition",
]
