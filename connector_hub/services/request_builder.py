"""Turns declared tools and resources into authenticated HTTP requests."""

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

from connector_hub.infra.errors import ResourceNotFound, ToolNotFound
from connector_hub.models.credential import AuthType, ResolvedAuth
from connector_hub.models.service import ServiceConfig

TOOL_CALL = "tools/call"
RESOURCE_READ = "resources/read"

# Characters encodeURIComponent leaves untouched besides alphanumerics and "_.-~"
_URI_COMPONENT_SAFE = "!*'()"


@dataclass
class HttpRequestSpec:
    """A fully built upstream request."""
    operation: str  # tools/call | resources/read
    method: str
    url: str
    headers: Dict[str, str]
    body: Optional[str] = None
    # Resource reads echo these back in the normalized result
    uri: Optional[str] = None
    mime_type: Optional[str] = None
    name: Optional[str] = None


def stringify_argument(value: Any) -> str:
    """String form of an argument as it appears in a URL path."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def build_url(base_endpoint: str, path_template: str, args: Optional[Dict[str, Any]]) -> str:
    """
    Join endpoint and path template and substitute ``{key}`` placeholders.

    Placeholders without a matching argument are left in the URL as-is.
    """
    url = (base_endpoint or "") + (path_template or "")
    for key, value in (args or {}).items():
        encoded = quote(stringify_argument(value), safe=_URI_COMPONENT_SAFE)
        url = url.replace("{" + key + "}", encoded)
    return url


def build_auth_headers(auth_type: str, secret: str, auth_config: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Build request headers for the credential's auth type."""
    auth_config = auth_config or {}
    headers = {"Content-Type": "application/json"}

    if auth_type == AuthType.API_KEY.value:
        header_name = auth_config.get("headerName")
        if header_name:
            headers[header_name] = secret
        else:
            headers["Authorization"] = f"Bearer {secret}"
    elif auth_type == AuthType.BASIC.value:
        username = auth_config.get("username") or ""
        credentials = base64.b64encode(f"{username}:{secret}".encode("utf-8")).decode("ascii")
        headers["Authorization"] = f"Basic {credentials}"
    else:
        # oauth, bearer and unrecognized types
        headers["Authorization"] = f"Bearer {secret}"

    return headers


class RequestBuilder:
    """Builds HttpRequestSpec objects from a ServiceConfig and a ResolvedAuth."""

    def build(
        self,
        service: ServiceConfig,
        auth: ResolvedAuth,
        operation: str,
        name_or_uri: Optional[str],
        arguments: Optional[Dict[str, Any]] = None,
    ) -> HttpRequestSpec:
        if operation == TOOL_CALL:
            return self.build_tool_call(service, auth, name_or_uri, arguments)
        if operation == RESOURCE_READ:
            return self.build_resource_read(service, auth, name_or_uri)
        raise ValueError(f"Cannot build a request for operation: {operation}")

    def build_tool_call(
        self,
        service: ServiceConfig,
        auth: ResolvedAuth,
        tool_name: Optional[str],
        arguments: Optional[Dict[str, Any]],
    ) -> HttpRequestSpec:
        tool = service.find_tool(tool_name)
        if tool is None:
            raise ToolNotFound(tool_name)

        method = (tool.method or "GET").upper()
        body = None
        if method != "GET" and arguments is not None:
            body = json.dumps(arguments)

        return HttpRequestSpec(
            operation=TOOL_CALL,
            method=method,
            url=build_url(auth.endpoint, tool.path, arguments),
            headers=build_auth_headers(auth.auth_type, auth.secret, auth.auth_config),
            body=body,
            name=tool.name,
        )

    def build_resource_read(self, service: ServiceConfig, auth: ResolvedAuth, uri: Optional[str]) -> HttpRequestSpec:
        resource = service.find_resource(uri)
        if resource is None:
            raise ResourceNotFound(uri)

        return HttpRequestSpec(
            operation=RESOURCE_READ,
            method="GET",
            url=build_url(auth.endpoint, resource.path, {"uri": uri}),
            headers=build_auth_headers(auth.auth_type, auth.secret, auth.auth_config),
            uri=uri,
            mime_type=resource.mime_type or "application/json",
            name=resource.name,
        )


request_builder = RequestBuilder()
