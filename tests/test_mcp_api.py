"""API tests for the gateway, token, service and connection endpoints."""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock, patch

from conftest import FakeConnectionRepository, FakeIdentityProvider, FakeMembershipDirectory
from connector_hub.api.dependencies import (
    get_connection_repository,
    get_credential_writer,
    get_identity_provider,
    get_language_service,
    get_membership_directory,
    get_secret_store,
    get_service_lookup,
    get_service_repository,
)
from connector_hub.main import app
from connector_hub.infra.cache import TTLCache
from connector_hub.infra.config import config
from connector_hub.infra.database import get_db
from connector_hub.models.credential import Credential
from connector_hub.services.language_service import LanguageService
from connector_hub.services.ports import AuthenticatedUser

AUTH = {"Authorization": "Bearer good-token"}


@pytest.fixture
def memberships():
    return FakeMembershipDirectory(
        team_roles={("team-1", "user-1"): "team_manager"},
        app_admins={"admin-1"},
    )


@pytest.fixture
def connections():
    return FakeConnectionRepository({
        "conn-1": {
            "id": "conn-1",
            "connection_type": "jira",
            "endpoint": "acme.atlassian.net",
            "auth_type": "token",
            "auth_config": {"api_key": "jira-key"},
        },
    })


@pytest.fixture
def client(service_repo, credential_store, memberships, connections):
    identity = FakeIdentityProvider({
        "good-token": AuthenticatedUser(id="user-1", email="user@example.com"),
        "admin-token": AuthenticatedUser(id="admin-1"),
    })
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_service_lookup] = lambda: service_repo
    app.dependency_overrides[get_service_repository] = lambda: service_repo
    app.dependency_overrides[get_secret_store] = lambda: credential_store
    app.dependency_overrides[get_credential_writer] = lambda: credential_store
    app.dependency_overrides[get_membership_directory] = lambda: memberships
    app.dependency_overrides[get_connection_repository] = lambda: connections
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestMCPEndpoint:
    def test_missing_authorization(self, client):
        response = client.post("/mcp", json={"method": "tools/list", "serviceType": "freshservice"})

        assert response.status_code == 401
        assert response.json() == {"error": "No authorization header"}

    def test_rejected_token(self, client):
        response = client.post(
            "/mcp",
            json={"method": "tools/list", "serviceType": "freshservice"},
            headers={"Authorization": "Bearer bad-token"},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_tools_list(self, client):
        response = client.post("/mcp", json={"method": "tools/list", "serviceType": "freshservice"}, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["tools"][0]["name"] == "get_ticket"
        assert "X-Request-ID" in response.headers

    def test_token_required(self, client):
        response = client.post(
            "/mcp",
            json={
                "method": "tools/call",
                "serviceType": "freshservice",
                "params": {"toolName": "get_ticket", "arguments": {"ticketId": 1}},
            },
            headers=AUTH,
        )

        assert response.status_code == 402
        body = response.json()
        assert body["error"] == "TOKEN_REQUIRED"
        assert body["serviceType"] == "freshservice"
        assert body["usesAppToken"] is False

    def test_service_not_configured(self, client):
        response = client.post("/mcp", json={"method": "tools/list", "serviceType": "confluence"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "MCP service not configured for confluence"}

    def test_tool_call_success(self, client, credential_store):
        credential_store.add_owner(
            "svc-fs",
            Credential(secret="k", auth_type="api_key", owner_type="user", owner_id="user-1"),
        )

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_response = MagicMock()
            mock_response.status_code = 200
            mock_response.json.return_value = {"id": 123, "subject": "X"}
            mock_client.request = AsyncMock(return_value=mock_response)
            mock_client.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client.__aexit__ = AsyncMock(return_value=None)
            mock_client_class.return_value = mock_client

            response = client.post(
                "/mcp",
                json={
                    "method": "tools/call",
                    "serviceType": "freshservice",
                    "params": {"toolName": "get_ticket", "arguments": {"ticketId": 123}},
                },
                headers=AUTH,
            )

        assert response.status_code == 200
        assert response.json() == {
            "content": [{"type": "text", "text": '{\n  "id": 123,\n  "subject": "X"\n}'}]
        }

    def test_missing_method_is_a_gateway_failure(self, client):
        response = client.post("/mcp", json={"serviceType": "freshservice"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid request: method: Field required"}

    def test_invalid_owner_type_is_a_gateway_failure(self, client):
        response = client.post(
            "/mcp",
            json={"method": "tools/call", "serviceType": "freshservice", "ownerType": "org"},
            headers=AUTH,
        )

        assert response.status_code == 500
        assert set(response.json()) == {"error"}
        assert response.json()["error"].startswith("Invalid request: ownerType")

    def test_other_endpoints_keep_422(self, client):
        response = client.post("/mcp/tokens", json={"action": "get"}, headers=AUTH)

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"


class TestTokensEndpoint:
    def test_set_and_get_personal_token(self, client):
        response = client.post(
            "/mcp/tokens",
            json={
                "action": "set",
                "serviceId": "svc-fs",
                "tokenData": {"encrypted_token": "secret-value", "auth_type": "basic"},
            },
            headers=AUTH,
        )
        assert response.status_code == 200
        assert response.json()["token"]["owner_id"] == "user-1"

        response = client.post("/mcp/tokens", json={"action": "get", "serviceId": "svc-fs"}, headers=AUTH)

        body = response.json()
        assert body["hasToken"] is True
        assert body["token"]["auth_type"] == "basic"
        assert "secret-value" not in response.text

    def test_team_token_for_manager(self, client, credential_store):
        response = client.post(
            "/mcp/tokens",
            json={
                "action": "set",
                "serviceId": "svc-fs",
                "ownerType": "team",
                "ownerId": "team-1",
                "tokenData": {"encrypted_token": "team-secret"},
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        assert ("svc-fs", "team", "team-1") in credential_store.owner_credentials

    def test_account_token_requires_admin(self, client):
        response = client.post(
            "/mcp/tokens",
            json={
                "action": "set",
                "serviceId": "svc-fs",
                "ownerType": "account",
                "ownerId": "acc-1",
                "tokenData": {"encrypted_token": "x"},
            },
            headers=AUTH,
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Only account admins can manage account tokens"}

    def test_unknown_action(self, client):
        response = client.post("/mcp/tokens", json={"action": "rotate", "serviceId": "svc-fs"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Unknown action: rotate"}


class TestServicesEndpoint:
    def test_non_admin_forbidden(self, client):
        response = client.post(
            "/mcp/services",
            json={"action": "delete", "serviceId": "svc-fs"},
            headers=AUTH,
        )

        assert response.status_code == 403

    def test_admin_sets_app_token(self, client, service_repo, credential_store):
        response = client.post(
            "/mcp/services",
            json={
                "action": "set_token",
                "serviceId": "svc-fs",
                "tokenData": {"encrypted_token": "env://FRESHSERVICE_API_KEY", "auth_type": "basic"},
            },
            headers={"Authorization": "Bearer admin-token"},
        )

        assert response.status_code == 200
        assert response.json()["token"]["service_id"] == "svc-fs"
        assert service_repo.uses_app_token["svc-fs"] is True
        assert credential_store.app_credentials["svc-fs"].secret == "env://FRESHSERVICE_API_KEY"


class TestConnectionsEndpoint:
    def test_missing_connection_id(self, client):
        response = client.post("/connections/test", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Connection ID is required"}

    def test_unknown_connection(self, client):
        response = client.post("/connections/test", json={"connectionId": "nope"})

        assert response.status_code == 404

    def test_successful_connection(self, client, connections):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_response = MagicMock()
            mock_response.status_code = 200
            mock_client.get = AsyncMock(return_value=mock_response)
            mock_client.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client.__aexit__ = AsyncMock(return_value=None)
            mock_client_class.return_value = mock_client

            response = client.post("/connections/test", json={"connectionId": "conn-1"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "error": None}
        assert connections.active["conn-1"] is True


class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_metrics(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "mcp_requests_total" in response.text


class TestLanguagesEndpoint:
    def test_google_error(self, client):
        service = LanguageService(TTLCache(ttl_seconds=60), api_key="g-key")
        app.dependency_overrides[get_language_service] = lambda: service

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_response = MagicMock()
            mock_response.status_code = 400
            mock_response.text = "API key not valid"
            mock_client.get = AsyncMock(return_value=mock_response)
            mock_client.__aenter__ = AsyncMock(return_value=mock_client)
            mock_client.__aexit__ = AsyncMock(return_value=None)
            mock_client_class.return_value = mock_client

            response = client.get("/languages")

        assert response.status_code == 500
        assert response.json() == {"error": "Google API error: 400", "languages": []}


class TestReadinessProbe:
    @pytest.fixture
    def session(self):
        return MagicMock()

    @pytest.fixture
    def ready_client(self, client, session, monkeypatch):
        monkeypatch.setattr(config, "SUPABASE_URL", "https://project.supabase.co")
        app.dependency_overrides[get_db] = lambda: session
        return client

    def test_ready(self, ready_client):
        response = ready_client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert set(response.json()["checks"].values()) == {"ok"}

    def test_reports_failing_store(self, ready_client, session):
        def execute(statement):
            if "connection_tokens" in str(statement):
                raise RuntimeError("relation does not exist")

        session.execute.side_effect = execute

        response = ready_client.get("/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["failed"] == ["owner_tokens"]
        assert body["checks"]["owner_tokens"] == "error: RuntimeError"
        assert body["checks"]["services"] == "ok"

    def test_database_unreachable(self, ready_client, session):
        session.execute.side_effect = RuntimeError("connection refused")

        response = ready_client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "error: RuntimeError"
        assert response.json()["checks"]["services"] == "skipped"
