"""API request/response models."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


# ============================================================================
# MCP Gateway Models
# ============================================================================

class MCPParams(BaseModel):
    """Method-specific parameters."""
    model_config = {"populate_by_name": True, "extra": "allow"}

    tool_name: Optional[str] = Field(None, alias="toolName", examples=["get_ticket"])
    arguments: Optional[Dict[str, Any]] = Field(None, examples=[{"ticketId": 123}])
    uri: Optional[str] = Field(None, examples=["freshservice://tickets/123"])


class MCPRequest(BaseModel):
    """Request model for an MCP call."""
    model_config = {"populate_by_name": True}

    method: str = Field(..., description="'tools/list' | 'tools/call' | 'resources/list' | 'resources/read'", examples=["tools/call"])
    service_type: Optional[str] = Field(None, alias="serviceType", examples=["freshservice"])
    job_template_id: Optional[str] = Field(None, alias="jobTemplateId", description="Infer the service from the job template's connection")
    params: Optional[MCPParams] = None
    owner_type: Optional[Literal["user", "team", "account"]] = Field(None, alias="ownerType")
    owner_id: Optional[str] = Field(None, alias="ownerId")


class TokenRequiredResponse(BaseModel):
    """Response model when no credential is configured (HTTP 402)."""
    error: str = Field("TOKEN_REQUIRED", examples=["TOKEN_REQUIRED"])
    message: str
    serviceType: str
    usesAppToken: bool


class ErrorResponse(BaseModel):
    error: str


# ============================================================================
# Token Management Models
# ============================================================================

class TokenData(BaseModel):
    """Credential payload. Only app tokens may use an env:// reference."""
    encrypted_token: str = Field(..., description="Secret value, or an env:// reference for app tokens")
    auth_type: str = Field("api_key", description="'api_key' | 'basic' | 'oauth' | 'bearer'", examples=["api_key"])
    auth_config: Optional[Dict[str, Any]] = Field(None, examples=[{"headerName": "X-Api-Key"}])
    endpoint: Optional[str] = Field(None, description="Override of the service endpoint")


class ManageTokenRequest(BaseModel):
    """Request model for managing owner credentials."""
    model_config = {"populate_by_name": True}

    action: str = Field(..., description="'set' | 'remove' | 'get'", examples=["set"])
    service_id: str = Field(..., alias="serviceId")
    owner_type: Literal["user", "team", "account"] = Field("user", alias="ownerType")
    owner_id: Optional[str] = Field(None, alias="ownerId", description="Defaults to the calling user")
    token_data: Optional[TokenData] = Field(None, alias="tokenData")


# ============================================================================
# Service Administration Models
# ============================================================================

class ServiceData(BaseModel):
    """Service configuration fields accepted on create/update."""
    service_name: Optional[str] = None
    service_type: Optional[str] = None
    description: Optional[str] = None
    uses_app_token: Optional[bool] = None
    endpoint_template: Optional[str] = Field(None, examples=["https://acme.freshservice.com"])
    rate_limit_per_minute: Optional[int] = None
    retry_delay_sec: Optional[int] = None
    max_retries: Optional[int] = None
    call_delay_ms: Optional[int] = None
    tools_config: Optional[List[Dict[str, Any]]] = None
    resources_config: Optional[List[Dict[str, Any]]] = None


class ConfigureServiceRequest(BaseModel):
    """Request model for service administration."""
    model_config = {"populate_by_name": True}

    action: str = Field(..., description="'create' | 'update' | 'delete' | 'set_token' | 'remove_token'")
    service_id: Optional[str] = Field(None, alias="serviceId")
    service_data: Optional[ServiceData] = Field(None, alias="serviceData")
    token_data: Optional[TokenData] = Field(None, alias="tokenData")


# ============================================================================
# Connection / Language Models
# ============================================================================

class ConnectionTestRequest(BaseModel):
    model_config = {"populate_by_name": True}

    connection_id: Optional[str] = Field(None, alias="connectionId")


class ConnectionTestResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class Language(BaseModel):
    code: str
    name: str


class LanguagesResponse(BaseModel):
    languages: List[Language]
    cached: bool
