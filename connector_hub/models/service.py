"""Declarative service configuration models."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ToolDefinition(BaseModel):
    """One callable operation of an external service API."""
    model_config = {"populate_by_name": True, "extra": "allow"}

    name: str = Field(..., description="Tool name, unique within a service")
    description: Optional[str] = None
    method: str = Field(default="GET", description="HTTP method used against the service API")
    path: str = Field(
        default="",
        alias="endpoint",
        description="Path template relative to the service endpoint, e.g. /api/v2/tickets/{ticketId}",
    )
    input_schema: Dict[str, Any] = Field(
        default_factory=dict,
        alias="inputSchema",
        description="JSON Schema describing the tool arguments",
    )


class ResourceDefinition(BaseModel):
    """A readable resource addressed by URI prefix."""
    model_config = {"populate_by_name": True, "extra": "allow"}

    uri_template: str = Field(..., alias="uriTemplate", description="URI prefix matched against requested URIs")
    path: str = Field(default="", alias="endpoint", description="Path template relative to the service endpoint")
    mime_type: str = Field(default="application/json", alias="mimeType")
    name: Optional[str] = None
    description: Optional[str] = None


class ServiceConfig(BaseModel):
    """Configuration of one external integration, loaded per request.

    Tool and resource declarations are kept as stored. They are listed
    verbatim and only parsed into definitions when a call or read selects one.
    """
    model_config = {"populate_by_name": True}

    id: str
    service_type: str = Field(..., description="Service type name: 'freshservice' | 'jira' | 'confluence' | ...")
    service_name: Optional[str] = None
    description: Optional[str] = None
    endpoint_template: str = Field(default="", description="Default base endpoint of the service API")
    tools_config: List[Dict[str, Any]] = Field(default_factory=list, description="Declared tools")
    resources_config: List[Dict[str, Any]] = Field(default_factory=list, description="Declared resources")
    uses_app_token: bool = Field(default=False, description="Whether an app-wide credential is configured")

    def find_tool(self, name: Optional[str]) -> Optional[ToolDefinition]:
        for entry in self.tools_config:
            if name is not None and entry.get("name") == name:
                return ToolDefinition.model_validate(entry)
        return None

    def find_resource(self, uri: Optional[str]) -> Optional[ResourceDefinition]:
        """Return the first resource whose URI template prefixes ``uri``."""
        if uri is None:
            return None
        for entry in self.resources_config:
            uri_template = entry.get("uriTemplate")
            if isinstance(uri_template, str) and uri.startswith(uri_template):
                return ResourceDefinition.model_validate(entry)
        return None

    def list_tools(self) -> List[Dict[str, Any]]:
        return [dict(entry) for entry in self.tools_config]

    def list_resources(self) -> List[Dict[str, Any]]:
        return [dict(entry) for entry in self.resources_config]
